"""
Optical text recognition over a pluggable backend.

The default backend is local Tesseract via pytesseract. A cloud recognizer
can be swapped in by implementing ``RecognitionBackend``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Optional, Set

import pytesseract
from PIL import Image

from study_assistant.core.config import settings

logger = logging.getLogger(__name__)


class RecognitionBackend(ABC):
    """Black-box recognizer: encoded image bytes in, raw text out."""

    @abstractmethod
    async def recognize(self, image_bytes: bytes, language: str) -> str:
        ...

    async def languages(self) -> Optional[Set[str]]:
        """Installed language codes, or None when the backend cannot tell."""
        return None


class TesseractBackend(RecognitionBackend):
    """Local Tesseract engine"""

    def __init__(self, tesseract_cmd: Optional[str] = None):
        cmd = tesseract_cmd or settings.TESSERACT_CMD
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd

    def _recognize_sync(self, image_bytes: bytes, language: str) -> str:
        with Image.open(BytesIO(image_bytes)) as image:
            return pytesseract.image_to_string(image, lang=language)

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._recognize_sync, image_bytes, language
        )

    async def languages(self) -> Optional[Set[str]]:
        try:
            installed = await asyncio.get_event_loop().run_in_executor(
                None, pytesseract.get_languages
            )
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            logger.warning(f"Could not list Tesseract languages: {e}")
            return set()
        return set(installed)


class TextRecognizer:
    """Recognizes text in one image, preferring the configured language."""

    def __init__(
        self,
        backend: Optional[RecognitionBackend] = None,
        language: Optional[str] = None,
        fallback_language: Optional[str] = None,
    ):
        self.backend = backend or TesseractBackend()
        self.language = language or settings.OCR_DEFAULT_LANGUAGE
        self.fallback_language = fallback_language or settings.OCR_FALLBACK_LANGUAGE
        self._resolved_language: Optional[str] = None

    async def _resolve_language(self) -> str:
        if self._resolved_language is not None:
            return self._resolved_language

        installed = await self.backend.languages()
        if installed is None or self.language in installed:
            resolved = self.language
        elif self.fallback_language in installed:
            logger.warning(
                f"Language data '{self.language}' not found. Falling back to '{self.fallback_language}'"
            )
            resolved = self.fallback_language
        else:
            raise RuntimeError(
                f"OCR language data not found for '{self.language}' or '{self.fallback_language}'"
            )

        self._resolved_language = resolved
        return resolved

    async def is_available(self) -> bool:
        installed = await self.backend.languages()
        if installed is None:
            return True
        return self.language in installed or self.fallback_language in installed

    async def recognize(self, image: Image.Image) -> str:
        language = await self._resolve_language()
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        text = await self.backend.recognize(buffer.getvalue(), language)
        if not text or not text.strip():
            logger.warning("OCR returned empty text")
            return ""
        return text.strip()
