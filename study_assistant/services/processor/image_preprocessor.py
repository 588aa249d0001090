"""
Image normalization ahead of text recognition.
Grayscale, contrast boost and a size ceiling; recognizers degrade on very large bitmaps.
"""

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageEnhance, ImageOps

from study_assistant.core.config import settings

logger = logging.getLogger(__name__)


class ImagePreprocessor:
    """Prepares raster images for OCR"""

    def __init__(self, contrast_factor: Optional[float] = None, max_dimension: Optional[int] = None):
        self.contrast_factor = contrast_factor if contrast_factor is not None else settings.OCR_CONTRAST_FACTOR
        self.max_dimension = max_dimension if max_dimension is not None else settings.OCR_MAX_IMAGE_DIMENSION

    def preprocess(self, image: Image.Image) -> Image.Image:
        """Return a new grayscale, contrast-boosted image no larger than the ceiling."""
        gray = ImageOps.grayscale(image)
        enhanced = ImageEnhance.Contrast(gray).enhance(self.contrast_factor)

        width, height = enhanced.size
        if width > self.max_dimension or height > self.max_dimension:
            scale = min(self.max_dimension / width, self.max_dimension / height)
            new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
            logger.info(f"Downscaling image from {width}x{height} to {new_size[0]}x{new_size[1]}")
            enhanced = enhanced.resize(new_size, Image.Resampling.LANCZOS)

        return enhanced

    def preprocess_bytes(self, data: bytes) -> Image.Image:
        """Decode an encoded image and preprocess it."""
        with Image.open(BytesIO(data)) as img:
            img.load()
            return self.preprocess(img)
