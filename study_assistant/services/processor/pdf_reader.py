"""
PDF access through pypdfium2: digital text per page and page rasterization.
"""

import logging

import pypdfium2 as pdfium
from PIL import Image

logger = logging.getLogger(__name__)


class PdfReader:
    """Thin wrapper over a pypdfium2 document opened from bytes"""

    def __init__(self, data: bytes):
        self._pdf = pdfium.PdfDocument(data)

    def __enter__(self) -> "PdfReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._pdf)

    def close(self) -> None:
        self._pdf.close()

    def page_text(self, page_num: int) -> str:
        page = self._pdf[page_num]
        try:
            textpage = page.get_textpage()
            try:
                text = textpage.get_text_range()
            finally:
                textpage.close()
        finally:
            page.close()
        return text.replace("\r\n", "\n").replace("\r", "\n")

    def text(self) -> str:
        """Concatenated text of all pages, one line break between pages."""
        return "\n".join(self.page_text(i) for i in range(len(self))).strip()

    def render_page(self, page_num: int, max_dimension: int) -> Image.Image:
        """Render one page so that it fits within max_dimension on both sides."""
        page = self._pdf[page_num]
        try:
            width, height = page.get_size()
            scale = min(max_dimension / width, max_dimension / height)
            bitmap = page.render(scale=scale)
            image = bitmap.to_pil()
            logger.debug(f"Rendered page {page_num + 1} at scale {scale:.2f} ({image.width}x{image.height})")
            return image
        finally:
            page.close()
