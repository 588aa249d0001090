"""
Font loading and text measurement.

Layout works in points; fonts are loaded at pixel size (points * scale) so
that measurement and drawing agree.
"""

import logging
from typing import Dict, Optional, Tuple

from PIL import ImageFont

from study_assistant.core.config import settings

logger = logging.getLogger(__name__)


class FontBook:
    """Resolves (size, bold, italic) to a Pillow font, with synthetic bold when no bold face exists"""

    def __init__(
        self,
        regular_path: Optional[str] = None,
        bold_path: Optional[str] = None,
        italic_path: Optional[str] = None,
        scale: Optional[float] = None,
    ):
        self.regular_path = regular_path or settings.RENDER_FONT_PATH
        self.bold_path = bold_path or settings.RENDER_FONT_BOLD_PATH
        self.italic_path = italic_path or settings.RENDER_FONT_ITALIC_PATH
        self.scale = scale or settings.RENDER_SCALE
        self._cache: Dict[Tuple[str, int], Optional[ImageFont.ImageFont]] = {}

    def _load(self, path: str, pixel_size: int):
        key = (path, pixel_size)
        if key not in self._cache:
            try:
                self._cache[key] = ImageFont.truetype(path, pixel_size)
            except OSError:
                logger.warning(f"Font not found: {path}")
                self._cache[key] = None
        return self._cache[key]

    def _default(self, pixel_size: int):
        key = ("<default>", pixel_size)
        if key not in self._cache:
            self._cache[key] = ImageFont.load_default(size=pixel_size)
        return self._cache[key]

    def font(self, size: float, bold: bool = False, italic: bool = False):
        """Return (font, synthetic_bold)."""
        pixel_size = max(1, round(size * self.scale))
        if bold:
            face = self._load(self.bold_path, pixel_size)
            if face is not None:
                return face, False
        elif italic:
            face = self._load(self.italic_path, pixel_size)
            if face is not None:
                return face, False
        face = self._load(self.regular_path, pixel_size) or self._default(pixel_size)
        return face, bold

    def measure(self, text: str, size: float, bold: bool = False, italic: bool = False) -> float:
        """Advance width of text in points."""
        if not text:
            return 0.0
        face, synthetic = self.font(size, bold, italic)
        width = face.getlength(text)
        if synthetic:
            width += 1
        return width / self.scale
