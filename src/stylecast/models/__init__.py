"""Model package initialization."""

from .media import EncodedImage, SourceImage, StyleDescriptor, TransferResult
from .prediction import PredictionJob, PredictionStatus

__all__ = [
    "EncodedImage",
    "SourceImage",
    "StyleDescriptor",
    "TransferResult",
    "PredictionJob",
    "PredictionStatus"
]
