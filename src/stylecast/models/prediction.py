"""
Prediction job snapshots.

A PredictionJob is an immutable view of one remote job as last reported by the
service. Each status poll produces a new snapshot that replaces the previous one.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PredictionStatus(Enum):
    """Job status enumeration."""
    QUEUED = "queued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PredictionStatus.SUCCEEDED, PredictionStatus.FAILED)

    @classmethod
    def from_remote(cls, value: Any) -> "PredictionStatus":
        """Map a provider status string onto the local enum."""
        status = _REMOTE_STATUS.get(str(value or "").strip().lower())
        if status is None:
            raise ValueError(f"Unrecognized prediction status: {value!r}")
        return status


_REMOTE_STATUS = {
    "starting": PredictionStatus.QUEUED,
    "queued": PredictionStatus.QUEUED,
    "processing": PredictionStatus.PROCESSING,
    "succeeded": PredictionStatus.SUCCEEDED,
    "failed": PredictionStatus.FAILED,
    "canceled": PredictionStatus.FAILED,
    "cancelled": PredictionStatus.FAILED,
}


@dataclass(frozen=True)
class PredictionJob:
    """Immutable snapshot of a remote prediction."""
    job_id: str
    status: PredictionStatus
    status_url: Optional[str] = None
    output: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def output_url(self) -> Optional[str]:
        """Canonical output locator: the first one if several were returned."""
        return self.output[0] if self.output else None

    @classmethod
    def from_response(cls, data: Dict[str, Any], job_id: Optional[str] = None) -> "PredictionJob":
        """
        Build a snapshot from a submission or status response body.

        Args:
            data: Decoded JSON body
            job_id: Known job id, used when a status response omits it

        Returns:
            PredictionJob snapshot

        Raises:
            ValueError: if the body has no job id or an unknown status
        """
        if not isinstance(data, dict):
            raise ValueError("Prediction response is not a JSON object")

        resolved_id = data.get("id") or job_id
        if not resolved_id:
            raise ValueError("Prediction response has no id")

        urls = data.get("urls") or {}
        status_url = urls.get("get") if isinstance(urls, dict) else None

        return cls(
            job_id=str(resolved_id),
            status=PredictionStatus.from_remote(data.get("status")),
            status_url=status_url,
            output=_normalize_output(data.get("output")),
            error=str(data["error"]) if data.get("error") else None,
        )

    def advance(self, snapshot: "PredictionJob") -> "PredictionJob":
        """Replace this snapshot with a newer one for the same job."""
        if self.is_terminal:
            raise ValueError(f"Prediction {self.job_id} is already {self.status.value}")
        if snapshot.job_id != self.job_id:
            raise ValueError(f"Snapshot for {snapshot.job_id} cannot replace {self.job_id}")
        if snapshot.status_url is None and self.status_url is not None:
            return replace(snapshot, status_url=self.status_url)
        return snapshot


def _normalize_output(output: Any) -> Tuple[str, ...]:
    if not output:
        return ()
    if isinstance(output, str):
        return (output,)
    if isinstance(output, (list, tuple)):
        return tuple(str(item) for item in output if item)
    return ()
