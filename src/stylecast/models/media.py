"""
Media and result value types.

SourceImage and StyleDescriptor are supplied by the caller, EncodedImage is the
transport form produced by preprocessing, and TransferResult is the only value
handed back to the caller.
"""

import base64
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class SourceImage:
    """Caller-owned input image bytes plus decoded metadata."""
    data: bytes = field(repr=False)
    mime_type: str
    width: int
    height: int
    filename: Optional[str] = None

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class StyleDescriptor:
    """Artwork the user picked as the target style."""
    artist: str
    style: str
    title: str = ""
    keywords: Optional[str] = None


@dataclass(frozen=True)
class EncodedImage:
    """Re-encoded image ready to be sent to the prediction service."""
    data: bytes = field(repr=False)
    content_type: str
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_uri(self) -> str:
        """Self-contained ``data:`` URI form of the image."""
        return f"data:{self.content_type};base64,{self.base64}"


@dataclass(frozen=True)
class TransferResult:
    """
    Outcome of one style transfer request.

    On success ``result_path`` points to a local file holding ``data``; the caller
    owns that file and should call ``release()`` when done with it. Simulated
    results have ``is_mock`` set and record why the real pipeline was skipped in
    ``fallback_reason``.
    """
    success: bool
    result_path: Optional[Path] = None
    data: Optional[bytes] = field(default=None, repr=False)
    content_type: Optional[str] = None
    remote_url: Optional[str] = None
    is_mock: bool = False
    fallback_reason: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def failed(cls, error: str, error_type: Optional[str] = None) -> "TransferResult":
        return cls(success=False, error=error, error_type=error_type)

    def release(self) -> None:
        """Delete the local result file if it still exists."""
        if self.result_path is not None:
            try:
                os.remove(self.result_path)
            except FileNotFoundError:
                pass

    def to_dict(self) -> Dict[str, Any]:
        """Normalized, JSON-friendly result shape."""
        if not self.success:
            return {"success": False, "error": self.error}

        out: Dict[str, Any] = {
            "success": True,
            "resultUrl": self.result_path.as_uri() if self.result_path else None,
            "contentType": self.content_type,
        }
        if self.is_mock:
            out["isMock"] = True
            out["fallbackReason"] = self.fallback_reason
        else:
            out["remoteUrl"] = self.remote_url
        return out
