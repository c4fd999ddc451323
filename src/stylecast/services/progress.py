"""
Progress reporting.

The pipeline writes ProgressEvents to a ProgressReporter, which forwards them to
an optional caller callback and an optional single-consumer ProgressStream.
Delivery is fire-and-forget: a failing callback is logged and ignored.
"""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import structlog

logger = structlog.get_logger()

ProgressCallback = Callable[[str], None]


@dataclass(frozen=True)
class ProgressEvent:
    """One progress update."""
    message: str
    percent: Optional[float] = None
    phase: str = "generating"


class ProgressStream:
    """
    Single-consumer stream of progress events.

    The producer calls ``publish``/``close``; the caller iterates with
    ``async for``. Iteration ends once the stream is closed and drained.
    """

    _CLOSED = object()

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._consumed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: ProgressEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(self._CLOSED)

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        if self._consumed:
            raise RuntimeError("ProgressStream supports a single consumer")
        self._consumed = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ProgressEvent]:
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            yield item


class ProgressReporter:
    """Fans progress events out to a callback and/or a stream."""

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        stream: Optional[ProgressStream] = None
    ):
        self.callback = callback
        self.stream = stream
        self.last_percent: Optional[float] = None

    def report(self, message: str, percent: Optional[float] = None, phase: str = "generating") -> None:
        if percent is not None:
            self.last_percent = percent
        event = ProgressEvent(message=message, percent=percent, phase=phase)

        if self.stream is not None:
            self.stream.publish(event)

        if self.callback is not None:
            try:
                self.callback(message)
            except Exception as e:
                logger.warning("Progress callback failed", error=str(e), progress_message=message)

    def close(self) -> None:
        if self.stream is not None:
            self.stream.close()
