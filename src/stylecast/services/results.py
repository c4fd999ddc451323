"""
Local result storage.

Writes result bytes to uniquely named files so callers get a locally-addressable
handle. Files belong to the caller once returned (see TransferResult.release).
"""

import mimetypes
import tempfile
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import structlog

logger = structlog.get_logger()


class StorageError(Exception):
    """Custom exception for storage operations."""
    pass


class ResultStore:
    """Writes result images into a local directory."""

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self.directory = Path(directory or tempfile.gettempdir()).resolve()

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, content_type: Optional[str]) -> Path:
        extension = mimetypes.guess_extension(content_type or "") or ".bin"
        if extension == ".jpe":
            extension = ".jpg"
        return self.directory / f"stylecast_{uuid.uuid4().hex}{extension}"

    async def save(self, data: bytes, content_type: Optional[str] = None) -> Path:
        """
        Write bytes to a new file.

        Returns:
            Absolute path of the written file

        Raises:
            StorageError: if the file cannot be written
        """
        target_path = self.path_for(content_type)
        try:
            self._ensure_directory()
            async with aiofiles.open(target_path, 'wb') as f:
                await f.write(data)
        except OSError as e:
            logger.error("Result write failed", path=str(target_path), error=str(e))
            raise StorageError(f"Write failed: {e}") from e

        logger.debug("Stored result", path=str(target_path), size=len(data))
        return target_path
