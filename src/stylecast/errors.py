"""Error taxonomy for the style transfer pipeline.

Every error raised by the real pipeline derives from StyleTransferError so the
orchestration entry point can turn any of them into a simulated result.
"""

from typing import Optional


class StyleTransferError(Exception):
    """Base class for all pipeline errors."""
    pass


class DecodeError(StyleTransferError):
    """The input image could not be decoded."""
    pass


class SubmissionError(StyleTransferError):
    """The prediction job could not be created."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class PollError(StyleTransferError):
    """Transport failure while checking job status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RemoteFailureError(StyleTransferError):
    """The job reported failure, or status could not be retrieved at all."""

    def __init__(self, job_id: str, detail: str = ""):
        super().__init__(f"Prediction {job_id} failed: {detail}" if detail else f"Prediction {job_id} failed")
        self.job_id = job_id
        self.detail = detail


class PredictionTimeoutError(StyleTransferError, TimeoutError):
    """The attempt budget ran out before a terminal status was seen."""

    def __init__(self, job_id: str, attempts: int):
        super().__init__(f"Prediction {job_id} did not finish after {attempts} attempts")
        self.job_id = job_id
        self.attempts = attempts


class EmptyResultError(StyleTransferError):
    """The job succeeded without any output locator."""

    def __init__(self, job_id: str):
        super().__init__(f"Prediction {job_id} succeeded without output")
        self.job_id = job_id


class ResultFetchError(StyleTransferError):
    """The final image could not be downloaded."""

    def __init__(self, url: str, status: Optional[int] = None):
        super().__init__(f"Failed to fetch result {url}" + (f" (HTTP {status})" if status else ""))
        self.url = url
        self.status = status
