"""Unit tests for study_assistant/services/processor/text_recognizer.py"""
import pytest
from unittest.mock import patch

from PIL import Image

from study_assistant.services.processor.text_recognizer import TesseractBackend, TextRecognizer
from tests.fakes import FakeRecognitionBackend, RecognitionState


class TestLanguageResolution:
    """Tests for preferred/fallback language selection."""

    @pytest.mark.asyncio
    async def test_uses_preferred_language_when_installed(self):
        """Should recognize with the preferred language when its data exists."""
        state = RecognitionState(replies=["text"], installed={"swe", "eng"})
        recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")

        await recognizer.recognize(Image.new("L", (10, 10), 255))

        assert state.calls == ["swe"]

    @pytest.mark.asyncio
    async def test_falls_back_when_preferred_missing(self):
        """Should use the fallback language when the preferred data is missing."""
        state = RecognitionState(replies=["text"], installed={"eng", "osd"})
        recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")

        await recognizer.recognize(Image.new("L", (10, 10), 255))
        await recognizer.recognize(Image.new("L", (10, 10), 255))

        assert state.calls == ["eng", "eng"]

    @pytest.mark.asyncio
    async def test_raises_when_no_language_installed(self):
        """Should raise when neither language is available."""
        state = RecognitionState(installed={"deu"})
        recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")

        with pytest.raises(RuntimeError):
            await recognizer.recognize(Image.new("L", (10, 10), 255))

    @pytest.mark.asyncio
    async def test_unknown_language_list_trusts_preferred(self):
        """Should use the preferred language when the backend cannot list languages."""
        state = RecognitionState(replies=["text"], installed=None)
        recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")

        await recognizer.recognize(Image.new("L", (10, 10), 255))

        assert state.calls == ["swe"]


class TestRecognize:
    """Tests for recognize and availability."""

    @pytest.mark.asyncio
    async def test_strips_whitespace(self):
        """Should strip surrounding whitespace from recognized text."""
        state = RecognitionState(replies=["\n  Hej  \n"])
        recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")

        assert await recognizer.recognize(Image.new("L", (10, 10), 255)) == "Hej"

    @pytest.mark.asyncio
    async def test_is_available(self):
        """Should report availability from installed languages."""
        present = TextRecognizer(
            FakeRecognitionBackend(RecognitionState(installed={"eng"})), language="swe", fallback_language="eng"
        )
        absent = TextRecognizer(
            FakeRecognitionBackend(RecognitionState(installed=set())), language="swe", fallback_language="eng"
        )

        assert await present.is_available() is True
        assert await absent.is_available() is False


class TestTesseractBackend:
    """Tests for the pytesseract backend."""

    @pytest.mark.asyncio
    @patch("study_assistant.services.processor.text_recognizer.pytesseract.get_languages")
    async def test_languages_missing_binary(self, mock_get_languages):
        """Should report no languages when tesseract is not installed."""
        import pytesseract

        mock_get_languages.side_effect = pytesseract.TesseractNotFoundError()

        assert await TesseractBackend().languages() == set()

    @pytest.mark.asyncio
    @patch("study_assistant.services.processor.text_recognizer.pytesseract.image_to_string")
    async def test_recognize_passes_language(self, mock_image_to_string):
        """Should call tesseract with the requested language."""
        from io import BytesIO

        mock_image_to_string.return_value = "Text"
        buffer = BytesIO()
        Image.new("L", (10, 10), 255).save(buffer, format="PNG")

        result = await TesseractBackend().recognize(buffer.getvalue(), "swe")

        assert result == "Text"
        assert mock_image_to_string.call_args.kwargs["lang"] == "swe"
