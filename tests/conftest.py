"""Shared fixtures for the stylecast test suite."""

import io

import pytest
from PIL import Image, ImageDraw

from stylecast.models.media import SourceImage
from stylecast.utils import config
from stylecast.utils.config import (
    AppSettings,
    FallbackSettings,
    PredictionSettings,
    ProcessingSettings,
)


def make_image_bytes(size=(640, 480), fmt="PNG", mode="RGB", color=(200, 60, 40)) -> bytes:
    """Synthetic image with a couple of shapes so encoders have something to work with."""
    image = Image.new(mode, size, color if mode == "RGB" else color + (255,))
    draw = ImageDraw.Draw(image)
    draw.rectangle([size[0] // 4, size[1] // 4, size[0] // 2, size[1] // 2], fill="black")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_source(size=(640, 480), fmt="PNG") -> SourceImage:
    data = make_image_bytes(size, fmt)
    return SourceImage(data=data, mime_type=Image.MIME[fmt], width=size[0], height=size[1])


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        prediction=PredictionSettings(
            base_url="http://prediction.test/api",
            poll_interval=0,
            max_attempts=90,
        ),
        processing=ProcessingSettings(max_dimension=768, result_dir=str(tmp_path / "results")),
        fallback=FallbackSettings(tick_interval=0),
    )


@pytest.fixture
def reset_global_settings():
    config._settings = None
    yield
    config._settings = None
