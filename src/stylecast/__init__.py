"""
Stylecast

Async client that re-renders a photo in the style of a chosen artwork by
delegating synthesis to a remote prediction service.

Features:
- Width-bounded JPEG preprocessing with Pillow
- Deterministic prompt construction from artist and style keyword tables
- Job submission and rate-limited status polling over aiohttp
- Attempt-derived progress reporting through callbacks or an async stream
- Simulated fallback result whenever the remote pipeline fails
"""

from .models import PredictionJob, PredictionStatus, SourceImage, StyleDescriptor, TransferResult
from .services import ProgressEvent, ProgressStream, StyleTransferService

__version__ = "1.0.0"
__author__ = "Style Transfer Team"

__all__ = [
    "PredictionJob",
    "PredictionStatus",
    "SourceImage",
    "StyleDescriptor",
    "TransferResult",
    "ProgressEvent",
    "ProgressStream",
    "StyleTransferService"
]
