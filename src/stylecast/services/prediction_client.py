"""
HTTP client for the prediction collaborator endpoint.

Creates jobs, reads job status and downloads finished images. Provider
credentials live in the collaborator; this client never sends secrets.
"""

import asyncio
import json
from typing import Optional, Tuple

import aiohttp
import structlog

from ..errors import PollError, ResultFetchError, SubmissionError
from ..models.media import EncodedImage
from ..models.prediction import PredictionJob
from ..utils.config import AppSettings, get_settings

logger = structlog.get_logger()

_BODY_PREVIEW = 400


class PredictionClient:
    """
    Async client for the prediction endpoint.

    Usable as an async context manager. A caller-provided ``session`` is never
    closed by the client.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.settings = settings or get_settings()
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=self.settings.prediction.request_timeout)

    async def __aenter__(self) -> "PredictionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get HTTP session with lazy initialization."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def submit_url(self) -> str:
        p = self.settings.prediction
        return f"{p.base_url}{p.submit_path}"

    def status_url_for(self, job: PredictionJob) -> Tuple[str, Optional[dict]]:
        p = self.settings.prediction
        if p.use_status_url and job.status_url:
            return job.status_url, None
        return f"{p.base_url}{p.status_path}", {"id": job.job_id}

    async def submit(self, encoded: EncodedImage, prompt: str, style: Optional[str] = None) -> PredictionJob:
        """
        Create a prediction job.

        Args:
            encoded: Preprocessed image
            prompt: Generation prompt
            style: Style category forwarded to the collaborator

        Returns:
            PredictionJob in queued or processing state

        Raises:
            SubmissionError: on transport errors, non-success responses or a malformed body
        """
        payload = {
            "image": encoded.data_uri,
            "prompt": prompt,
            "parameters": self.settings.generation.as_payload(),
        }
        if style:
            payload["style"] = style

        try:
            async with self.session.post(self.submit_url, json=payload) as response:
                body = await response.text()
                if response.status >= 400:
                    logger.error("Prediction submission rejected", status=response.status, body=body[:_BODY_PREVIEW])
                    raise SubmissionError(
                        f"Server error: {response.status}",
                        status=response.status,
                        body=body[:_BODY_PREVIEW]
                    )
                data = _decode_json(body)
        except aiohttp.ClientError as e:
            raise SubmissionError(f"Submission transport error: {e}") from e
        except asyncio.TimeoutError as e:
            raise SubmissionError("Submission timed out") from e

        if data is None:
            raise SubmissionError("Submission response is not JSON", status=response.status, body=body[:_BODY_PREVIEW])

        try:
            job = PredictionJob.from_response(data)
        except ValueError as e:
            raise SubmissionError(str(e), status=response.status, body=body[:_BODY_PREVIEW]) from e

        if job.is_terminal:
            logger.warning("Prediction terminal on submission", job_id=job.job_id, status=job.status.value)

        logger.info("Submitted prediction", job_id=job.job_id, status=job.status.value)
        return job

    async def get_status(self, job: PredictionJob) -> PredictionJob:
        """
        Fetch a fresh snapshot of a job.

        Raises:
            PollError: on transport errors, non-success responses or a malformed body
        """
        url, params = self.status_url_for(job)
        try:
            async with self.session.get(url, params=params) as response:
                body = await response.text()
                if response.status >= 400:
                    raise PollError(f"Failed to check status: HTTP {response.status}", status=response.status)
        except aiohttp.ClientError as e:
            raise PollError(f"Status transport error: {e}") from e
        except asyncio.TimeoutError as e:
            raise PollError("Status request timed out") from e

        data = _decode_json(body)
        if data is None:
            raise PollError("Status response is not JSON", status=response.status)

        try:
            snapshot = PredictionJob.from_response(data, job_id=job.job_id)
        except ValueError as e:
            raise PollError(str(e), status=response.status) from e

        if snapshot.job_id != job.job_id:
            raise PollError(
                f"Status response is for {snapshot.job_id}, expected {job.job_id}",
                status=response.status
            )
        return snapshot

    async def fetch_output(self, url: str) -> Tuple[bytes, str]:
        """
        Download the finished image.

        Returns:
            Tuple of (image bytes, content type)
        """
        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise ResultFetchError(url, status=response.status)
                data = await response.read()
                content_type = response.content_type or "application/octet-stream"
        except aiohttp.ClientError as e:
            raise ResultFetchError(url) from e
        except asyncio.TimeoutError as e:
            raise ResultFetchError(url) from e

        if not data:
            raise ResultFetchError(url, status=response.status)

        logger.info("Fetched result image", url=url, bytes=len(data), content_type=content_type)
        return data, content_type


def _decode_json(body: str):
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None
