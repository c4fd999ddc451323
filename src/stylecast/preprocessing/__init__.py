"""Preprocessing package initialization."""

from .image_processor import ImageProcessor

__all__ = ["ImageProcessor"]
