"""
Style Transfer Service

Composes preprocessing, prompt building, job submission and polling into one
call. Any failure of the remote pipeline is logged and replaced by a simulated
result, so ``process`` always hands back a successful TransferResult.
"""

import asyncio
import time
from pathlib import Path
from typing import Optional, Union

import structlog

from ..errors import DecodeError, StyleTransferError
from ..models.media import SourceImage, StyleDescriptor, TransferResult
from ..preprocessing.image_processor import ImageProcessor
from ..utils.config import AppSettings, get_settings
from ..utils.monitoring import FALLBACK_COUNT, PIPELINE_DURATION
from .fallback import FallbackSimulator
from .poller import PredictionPoller
from .prediction_client import PredictionClient
from .progress import ProgressCallback, ProgressReporter, ProgressStream
from .prompt_builder import PromptBuilder
from .results import ResultStore, StorageError

logger = structlog.get_logger()

SourceInput = Union[SourceImage, bytes, str, Path]


class StyleTransferService:
    """
    Entry point for style transfer requests.

    Every collaborator can be injected; missing ones are built from ``settings``.
    Instances hold no per-request state, so concurrent ``process`` calls are
    independent of each other.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        client: Optional[PredictionClient] = None,
        image_processor: Optional[ImageProcessor] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        store: Optional[ResultStore] = None,
        fallback: Optional[FallbackSimulator] = None
    ):
        self.settings = settings or get_settings()
        self.client = client or PredictionClient(self.settings)
        self.image_processor = image_processor or ImageProcessor(
            jpeg_quality=self.settings.processing.jpeg_quality
        )
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.store = store or ResultStore(self.settings.processing.result_dir)
        self.fallback = fallback or FallbackSimulator(self.settings.fallback, self.store)
        self.poller = PredictionPoller(self.client, self.settings.prediction)

    async def __aenter__(self) -> "StyleTransferService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def apply(
        self,
        source: SourceImage,
        style: StyleDescriptor,
        reporter: Optional[ProgressReporter] = None
    ) -> TransferResult:
        """
        Run the remote pipeline only.

        Returns:
            Successful TransferResult, or a failed one carrying the error text
        """
        reporter = reporter or ProgressReporter()

        try:
            reporter.report("Preparing AI processing...", percent=0.0, phase="submitting")
            encoded = await self.image_processor.resize(source, self.settings.processing.max_dimension)
            prompt = self.prompt_builder.build(style)

            job = await self.client.submit(encoded, prompt, style.style)
            del encoded

            reporter.report(
                "Generating high-quality painting...",
                percent=self.poller.progress_for(0),
            )
            job = await self.poller.wait(job, reporter)

            data, content_type = await self.client.fetch_output(job.output_url)
            path = await self.store.save(data, content_type)

        except (StyleTransferError, StorageError) as e:
            logger.error("Style transfer error", error_type=type(e).__name__, error=str(e))
            return TransferResult.failed(str(e), error_type=type(e).__name__)

        reporter.report("Done", percent=100.0, phase="done")
        return TransferResult(
            success=True,
            result_path=path,
            data=data,
            content_type=content_type,
            remote_url=job.output_url
        )

    async def process(
        self,
        source: SourceInput,
        style: StyleDescriptor,
        on_progress: Optional[ProgressCallback] = None,
        progress_stream: Optional[ProgressStream] = None,
        timeout: Optional[float] = None
    ) -> TransferResult:
        """
        Style transfer with simulated fallback.

        Args:
            source: SourceImage, raw bytes or path to the photo
            style: Target artwork
            on_progress: Callback receiving human-readable status strings
            progress_stream: Stream receiving ProgressEvents; closed on return
            timeout: Optional deadline in seconds for the remote pipeline

        Returns:
            Successful TransferResult; ``is_mock`` is set when simulated
        """
        reporter = ProgressReporter(callback=on_progress, stream=progress_stream)
        start_time = time.monotonic()

        try:
            image, result = await self._load(source)

            if result is None:
                try:
                    if timeout is not None:
                        result = await asyncio.wait_for(self.apply(image, style, reporter), timeout)
                    else:
                        result = await self.apply(image, style, reporter)
                except asyncio.TimeoutError:
                    result = TransferResult.failed(
                        f"Processing timeout after {timeout}s", error_type="PipelineTimeout"
                    )
                except Exception as e:
                    logger.exception("Unexpected style transfer failure")
                    result = TransferResult.failed(str(e), error_type=type(e).__name__)

            if result.success:
                PIPELINE_DURATION.labels(mode="remote").observe(time.monotonic() - start_time)
                return result

            reason = f"{result.error_type}: {result.error}" if result.error_type else result.error
            logger.warning("API failed, using mock", reason=reason)
            FALLBACK_COUNT.labels(reason=result.error_type or "unknown").inc()

            simulated = await self.fallback.simulate(image, reporter, reason=reason)
            PIPELINE_DURATION.labels(mode="simulated").observe(time.monotonic() - start_time)
            return simulated
        finally:
            reporter.close()

    async def _load(self, source: SourceInput):
        """Decode the caller's input; undecodable input goes straight to fallback."""
        if isinstance(source, SourceImage):
            return source, None

        try:
            return await self.image_processor.load_source_image(source), None
        except DecodeError as e:
            data = source if isinstance(source, bytes) else b""
            filename = None if isinstance(source, bytes) else Path(source).name
            if not data and isinstance(source, (str, Path)):
                data = _read_quietly(Path(source))
            raw = SourceImage(
                data=data,
                mime_type="application/octet-stream",
                width=0,
                height=0,
                filename=filename
            )
            return raw, TransferResult.failed(str(e), error_type=type(e).__name__)


def _read_quietly(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError:
        return b""
