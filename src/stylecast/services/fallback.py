"""Simulated style transfer used when the remote pipeline is unavailable."""

import asyncio
from typing import Optional

import structlog

from ..models.media import SourceImage, TransferResult
from ..utils.config import FallbackSettings
from .progress import ProgressReporter
from .results import ResultStore, StorageError

logger = structlog.get_logger()


class FallbackSimulator:
    """Echoes the input photo back as a tagged, successful result."""

    def __init__(self, settings: FallbackSettings, store: ResultStore):
        self.settings = settings
        self.store = store

    async def simulate(
        self,
        source: SourceImage,
        reporter: Optional[ProgressReporter] = None,
        reason: Optional[str] = None
    ) -> TransferResult:
        reporter = reporter or ProgressReporter()

        progress = 0
        while progress < 100:
            await asyncio.sleep(self.settings.tick_interval)
            progress = min(100, progress + self.settings.step)
            reporter.report(f"Processing... {progress}%", percent=float(progress), phase="simulating")

        try:
            path = await self.store.save(source.data, source.mime_type)
        except StorageError as e:
            logger.warning("Simulated result kept in memory only", error=str(e))
            path = None

        logger.info("Served simulated result", reason=reason, path=str(path) if path else None)
        return TransferResult(
            success=True,
            result_path=path,
            data=source.data,
            content_type=source.mime_type,
            is_mock=True,
            fallback_reason=reason
        )
