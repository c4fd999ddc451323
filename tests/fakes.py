"""Test doubles for the prediction transport."""

import asyncio
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Union

from stylecast.errors import SubmissionError
from stylecast.models.prediction import PredictionJob


class FakePredictionClient:
    """
    Scripted stand-in for PredictionClient.

    ``statuses`` is consumed one item per poll; dicts become snapshots and
    exceptions are raised. The last item repeats once the script runs out.
    A dict of scripts keyed by job id gives each job its own sequence, and
    ``submit_response`` may be a callable of the prompt to hand out job ids.
    """

    def __init__(
        self,
        submit_response: Union[dict, Callable[[str], dict], None] = None,
        submit_error: Optional[Exception] = None,
        statuses: Union[List[Any], Dict[str, List[Any]], None] = None,
        output: bytes = b"\xff\xd8remote-result",
        content_type: str = "image/jpeg",
        poll_delay: float = 0.0,
    ):
        self.submit_response = submit_response or {"id": "abc", "status": "starting"}
        self.submit_error = submit_error
        self.statuses = statuses if isinstance(statuses, dict) else list(statuses or [])
        self.output = output
        self.content_type = content_type
        self.poll_delay = poll_delay

        self.submissions = []
        self.status_calls = 0
        self.calls_by_job = defaultdict(int)
        self.fetched: List[str] = []
        self.closed = False
        self._in_flight = 0
        self.max_in_flight = 0

    async def submit(self, encoded, prompt, style=None) -> PredictionJob:
        self.submissions.append({"encoded": encoded, "prompt": prompt, "style": style})
        if self.submit_error is not None:
            raise self.submit_error
        response = self.submit_response
        if callable(response):
            response = response(prompt)
        return PredictionJob.from_response(response)

    async def get_status(self, job: PredictionJob) -> PredictionJob:
        self.status_calls += 1
        self.calls_by_job[job.job_id] += 1
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.poll_delay:
                await asyncio.sleep(self.poll_delay)
            script = self.statuses[job.job_id] if isinstance(self.statuses, dict) else self.statuses
            index = min(self.calls_by_job[job.job_id] - 1, len(script) - 1)
            item = script[index]
        finally:
            self._in_flight -= 1
        if isinstance(item, BaseException):
            raise item
        return PredictionJob.from_response(item, job_id=job.job_id)

    async def fetch_output(self, url: str):
        self.fetched.append(url)
        return self.output, self.content_type

    async def close(self) -> None:
        self.closed = True


def http_500() -> SubmissionError:
    return SubmissionError("Server error: 500", status=500, body='{"error": "boom"}')
