"""Vehicle photo compression before upload"""

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from src.config import settings
from src.errors import ImageCompressionError

logger = logging.getLogger(__name__)

JPEG_QUALITY_STEPS = (85, 75, 65, 55, 45, 35)


@dataclass
class CompressedImage:
    content: bytes
    extension: str
    original_size: int

    @property
    def size(self) -> int:
        return len(self.content)


class ImageCompressor:
    """Downscales and re-encodes photos to a target size"""

    def __init__(
        self,
        max_size_mb: Optional[float] = None,
        max_dimension: Optional[int] = None,
    ):
        self.max_bytes = int((max_size_mb or settings.IMAGE_MAX_SIZE_MB) * 1024 * 1024)
        self.max_dimension = max_dimension or settings.IMAGE_MAX_DIMENSION

    def compress(self, content: bytes) -> CompressedImage:
        """
        Compress an image to JPEG

        Fits the image within max_dimension pixels, then lowers the JPEG
        quality until the output fits max_size_mb (or the lowest quality
        step is reached).

        Raises:
            ImageCompressionError: content is not a readable image
        """
        try:
            img = Image.open(BytesIO(content))
            img = ImageOps.exif_transpose(img)
            img.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
            if img.mode != "RGB":
                img = img.convert("RGB")

            output = b""
            for quality in JPEG_QUALITY_STEPS:
                buffer = BytesIO()
                img.save(buffer, format="JPEG", quality=quality, optimize=True)
                output = buffer.getvalue()
                if len(output) <= self.max_bytes:
                    break
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"Error compressing image: {e}", exc_info=True)
            raise ImageCompressionError(f"Could not process image: {e}") from e

        logger.info(f"Compressed photo: {len(content) / 1024:.1f} KB -> {len(output) / 1024:.1f} KB")
        return CompressedImage(content=output, extension="jpg", original_size=len(content))

    async def compress_async(self, content: bytes) -> CompressedImage:
        """Compress in a worker thread"""
        return await asyncio.to_thread(self.compress, content)
