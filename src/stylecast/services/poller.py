"""
Prediction polling.

Sequentially re-reads job status on a fixed interval until the job reaches a
terminal state or the attempt budget runs out. Progress is derived from the
attempt count only and never reaches 100% before success is confirmed.
"""

import asyncio
from typing import Optional

import structlog

from ..errors import EmptyResultError, PollError, PredictionTimeoutError, RemoteFailureError
from ..models.prediction import PredictionJob, PredictionStatus
from ..utils.config import PredictionSettings
from ..utils.monitoring import POLL_ATTEMPTS, PREDICTION_COUNT
from .prediction_client import PredictionClient
from .progress import ProgressReporter

logger = structlog.get_logger()


class PredictionPoller:
    """Drives one prediction from submitted to terminal."""

    def __init__(self, client: PredictionClient, settings: PredictionSettings):
        self.client = client
        self.settings = settings

    def progress_for(self, attempts: int) -> float:
        """min(cap, base + attempts * rate)"""
        s = self.settings
        return min(s.progress_cap, s.progress_base + attempts * s.progress_rate)

    @staticmethod
    def _advance(job: PredictionJob, snapshot: PredictionJob) -> PredictionJob:
        try:
            return job.advance(snapshot)
        except ValueError as e:
            raise PollError(f"Unusable status response: {e}") from e

    async def wait(
        self,
        job: PredictionJob,
        reporter: Optional[ProgressReporter] = None
    ) -> PredictionJob:
        """
        Poll until the job succeeds.

        Args:
            job: Snapshot returned by submission
            reporter: Progress sink, called once per tick

        Returns:
            Terminal snapshot with status SUCCEEDED and at least one output locator

        Raises:
            RemoteFailureError: job failed, or status could not be read persistently
            PredictionTimeoutError: attempt budget exhausted without a terminal status
            EmptyResultError: job succeeded without output
        """
        reporter = reporter or ProgressReporter()
        attempts = 0
        consecutive_errors = 0
        last_error: Optional[PollError] = None

        while not job.is_terminal:
            if attempts >= self.settings.max_attempts:
                POLL_ATTEMPTS.observe(attempts)
                if last_error is not None:
                    PREDICTION_COUNT.labels(outcome="unreachable").inc()
                    raise RemoteFailureError(job.job_id, f"status unavailable: {last_error}")
                PREDICTION_COUNT.labels(outcome="timeout").inc()
                logger.warning("Prediction timed out", job_id=job.job_id, attempts=attempts)
                raise PredictionTimeoutError(job.job_id, attempts)

            await asyncio.sleep(self.settings.poll_interval)
            attempts += 1

            try:
                job = self._advance(job, await self.client.get_status(job))
                consecutive_errors = 0
                last_error = None
            except PollError as e:
                consecutive_errors += 1
                last_error = e
                logger.warning(
                    "Status check failed",
                    job_id=job.job_id,
                    attempt=attempts,
                    consecutive_errors=consecutive_errors,
                    error=str(e)
                )
                if consecutive_errors >= self.settings.max_consecutive_poll_errors:
                    POLL_ATTEMPTS.observe(attempts)
                    PREDICTION_COUNT.labels(outcome="unreachable").inc()
                    raise RemoteFailureError(job.job_id, f"status unavailable: {e}") from e

            progress = self.progress_for(attempts)
            reporter.report(f"Generating... {int(progress)}%", percent=progress)
            logger.debug("Polled prediction", job_id=job.job_id, status=job.status.value, attempt=attempts)

        POLL_ATTEMPTS.observe(attempts)

        if job.status is PredictionStatus.FAILED:
            PREDICTION_COUNT.labels(outcome="failed").inc()
            logger.warning("Prediction failed", job_id=job.job_id, error=job.error, attempts=attempts)
            raise RemoteFailureError(job.job_id, job.error or "Style transfer failed")

        if not job.output_url:
            PREDICTION_COUNT.labels(outcome="empty").inc()
            raise EmptyResultError(job.job_id)

        PREDICTION_COUNT.labels(outcome="succeeded").inc()
        logger.info("Prediction succeeded", job_id=job.job_id, attempts=attempts, output=job.output_url)
        return job
