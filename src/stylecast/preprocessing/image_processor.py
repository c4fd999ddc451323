"""
Image Processing Pipeline

Decodes caller photos, bounds their size and re-encodes them as JPEG so the
payload sent to the prediction service stays small and predictable.
"""

import asyncio
import io
from pathlib import Path
from typing import Optional, Tuple, Union

import aiofiles
import structlog
from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import DecodeError
from ..models.media import EncodedImage, SourceImage

logger = structlog.get_logger()

ImageInput = Union[SourceImage, bytes]


class ImageProcessor:
    """
    Image preprocessing for the style transfer client.

    Features:
    - EXIF orientation correction
    - Width-bounded resizing with aspect ratio preservation
    - Transparency flattened onto white before lossy encoding
    - Blocking Pillow work runs in the default executor
    """

    def __init__(self, jpeg_quality: int = 95):
        if not 1 <= jpeg_quality <= 100:
            raise ValueError("jpeg_quality must be between 1 and 100")
        self.jpeg_quality = jpeg_quality

    async def load_source_image(
        self,
        source: Union[bytes, str, Path],
        filename: Optional[str] = None
    ) -> SourceImage:
        """
        Decode raw bytes or a local file into a SourceImage.

        Args:
            source: Image bytes or path to an image file
            filename: Optional display name for byte input

        Returns:
            SourceImage with MIME type and natural dimensions

        Raises:
            DecodeError: if the file cannot be read or decoded
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                async with aiofiles.open(path, 'rb') as f:
                    data = await f.read()
            except OSError as e:
                raise DecodeError(f"Cannot read image file {path}: {e}") from e
            filename = filename or path.name
        else:
            data = source

        loop = asyncio.get_running_loop()
        mime_type, size = await loop.run_in_executor(None, self._inspect_sync, data)

        logger.debug("Loaded source image", filename=filename, mime_type=mime_type, size=size)
        return SourceImage(
            data=data,
            mime_type=mime_type,
            width=size[0],
            height=size[1],
            filename=filename
        )

    async def resize(self, image: ImageInput, max_dimension: int) -> EncodedImage:
        """
        Bound the image width and re-encode it as JPEG.

        Args:
            image: SourceImage or raw image bytes
            max_dimension: Maximum output width in pixels

        Returns:
            EncodedImage holding the new JPEG bytes

        Raises:
            DecodeError: if the input cannot be decoded
        """
        if max_dimension <= 0:
            raise ValueError("max_dimension must be a positive integer")

        data = image.data if isinstance(image, SourceImage) else image

        loop = asyncio.get_running_loop()
        encoded = await loop.run_in_executor(None, self._resize_sync, data, max_dimension)

        logger.info(
            "Preprocessed image",
            size=encoded.size,
            bytes=len(encoded.data),
            max_dimension=max_dimension
        )
        return encoded

    def _inspect_sync(self, data: bytes) -> Tuple[str, Tuple[int, int]]:
        with self._open(data) as img:
            mime_type = Image.MIME.get(img.format or "", "application/octet-stream")
            return mime_type, img.size

    def _resize_sync(self, data: bytes, max_dimension: int) -> EncodedImage:
        """Synchronous resize and encode."""
        with self._open(data) as img:
            image = ImageOps.exif_transpose(img)
            image = self._to_rgb(image)

            new_size = self.target_size(image.size, max_dimension)
            if image.size != new_size:
                image = image.resize(new_size, Image.Resampling.LANCZOS)

            output_buffer = io.BytesIO()
            image.save(
                output_buffer,
                format='JPEG',
                quality=self.jpeg_quality,
                optimize=True
            )

            return EncodedImage(
                data=output_buffer.getvalue(),
                content_type="image/jpeg",
                width=image.size[0],
                height=image.size[1]
            )

    @staticmethod
    def target_size(size: Tuple[int, int], max_dimension: int) -> Tuple[int, int]:
        """Scale so the width is at most max_dimension, keeping aspect ratio."""
        width, height = size
        if width <= max_dimension:
            return width, height
        new_height = max(1, round(height * max_dimension / width))
        return max_dimension, new_height

    @staticmethod
    def _open(data: bytes) -> Image.Image:
        if not data:
            raise DecodeError("Empty image data")
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Invalid image data: {e}") from e
        return img

    @staticmethod
    def _to_rgb(image: Image.Image) -> Image.Image:
        if image.mode == 'RGB':
            return image
        if image.mode in ('RGBA', 'LA') or (image.mode == 'P' and 'transparency' in image.info):
            # Composite on white so transparent areas do not turn black
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            return background
        return image.convert('RGB')

