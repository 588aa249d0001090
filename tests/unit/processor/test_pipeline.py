"""Unit tests for study_assistant/services/processor/pipeline.py"""
import threading

import pytest

from study_assistant.schemas.documents import DocumentStatus, SourceDocument
from study_assistant.services.processor import ExtractionPipeline, ImagePreprocessor, TextRecognizer
from tests.fakes import (
    FakeRecognitionBackend,
    RecognitionState,
    build_png,
    build_scanned_pdf,
    build_text_pdf,
)


def make_pipeline(documents, files, state=None):
    recognizer = TextRecognizer(FakeRecognitionBackend(state), language="swe", fallback_language="eng")
    return ExtractionPipeline(
        documents=documents,
        files=files,
        recognizer=recognizer,
        preprocessor=ImagePreprocessor(contrast_factor=1.5, max_dimension=3000),
        raster_max_dimension=800,
    )


async def add_document(documents, files, doc_id, file_name, data):
    path = f"uploads/{doc_id}/{file_name}"
    if data is not None:
        files.files[path] = data
    await documents.save(SourceDocument(id=doc_id, test_id="set-1", file_name=file_name, file_path=path))
    documents.saved_statuses.clear()


class TestDigitalPdf:
    """Tests for PDFs with a text layer."""

    @pytest.mark.asyncio
    async def test_extracts_text_layer(self, documents, files):
        """Should complete with exactly the PDF's text."""
        await add_document(documents, files, "doc-1", "lecture.pdf", build_text_pdf("Hello world"))
        state = RecognitionState(replies=["should not be used"])
        pipeline = make_pipeline(documents, files, state)

        result = await pipeline.process_document("doc-1")

        stored = await documents.load("doc-1")
        assert result.method == "pdf_text"
        assert stored.status == DocumentStatus.OCR_COMPLETED
        assert stored.extracted_text == "Hello world"
        assert state.calls == []

    @pytest.mark.asyncio
    async def test_marks_in_progress_before_terminal_status(self, documents, files):
        """Should persist OcrInProgress before the terminal status."""
        await add_document(documents, files, "doc-1", "lecture.pdf", build_text_pdf("Hello world"))

        await make_pipeline(documents, files).process_document("doc-1")

        assert documents.saved_statuses == [DocumentStatus.OCR_IN_PROGRESS, DocumentStatus.OCR_COMPLETED]


class TestScannedPdf:
    """Tests for image-only PDFs."""

    @pytest.mark.asyncio
    async def test_ocr_pages_in_order_with_markers(self, documents, files):
        """Should OCR each page and join the text with page markers."""
        await add_document(documents, files, "doc-2", "scan.pdf", build_scanned_pdf(2))
        state = RecognitionState(replies=["A", "B"])

        result = await make_pipeline(documents, files, state).process_document("doc-2")

        text = (await documents.load("doc-2")).extracted_text
        assert result.method == "pdf_ocr"
        assert result.pages == 2
        assert "--- Page 1 ---" in text and "--- Page 2 ---" in text
        assert text.index("--- Page 1 ---") < text.index("A") < text.index("--- Page 2 ---") < text.index("B")

    @pytest.mark.asyncio
    async def test_skips_blank_pages(self, documents, files):
        """Should leave out markers for pages that produced no text."""
        await add_document(documents, files, "doc-2", "scan.pdf", build_scanned_pdf(2))
        state = RecognitionState(replies=["   ", "Only page two"])

        await make_pipeline(documents, files, state).process_document("doc-2")

        text = (await documents.load("doc-2")).extracted_text
        assert text == "--- Page 2 ---\nOnly page two"

    @pytest.mark.asyncio
    async def test_raster_respects_dimension_ceiling(self, documents, files):
        """Should render pages no larger than the configured ceiling."""
        await add_document(documents, files, "doc-2", "scan.pdf", build_scanned_pdf(1))
        state = RecognitionState(replies=["text"])

        await make_pipeline(documents, files, state).process_document("doc-2")

        width, height = state.image_sizes[0]
        assert max(width, height) <= 800

    @pytest.mark.asyncio
    async def test_pages_are_preprocessed_off_the_event_loop(self, documents, files):
        """Should run page preprocessing in a worker thread."""
        await add_document(documents, files, "doc-2", "scan.pdf", build_scanned_pdf(2))
        threads = []

        class RecordingPreprocessor(ImagePreprocessor):
            def preprocess(self, image):
                threads.append(threading.get_ident())
                return super().preprocess(image)

        pipeline = make_pipeline(documents, files, RecognitionState(replies=["A", "B"]))
        pipeline.preprocessor = RecordingPreprocessor(contrast_factor=1.5, max_dimension=3000)

        await pipeline.process_document("doc-2")

        assert len(threads) == 2
        assert threading.get_ident() not in threads


class TestOtherFormats:
    """Tests for text files, images and unsupported inputs."""

    @pytest.mark.asyncio
    async def test_text_file_is_read_verbatim(self, documents, files):
        """Should store plain text content as-is."""
        await add_document(documents, files, "doc-3", "notes.txt", "Fotosyntes\nKlorofyll".encode("utf-8"))

        result = await make_pipeline(documents, files).process_document("doc-3")

        assert result.method == "text"
        assert (await documents.load("doc-3")).extracted_text == "Fotosyntes\nKlorofyll"

    @pytest.mark.asyncio
    async def test_image_is_recognized(self, documents, files):
        """Should OCR raster images with the preferred language."""
        await add_document(documents, files, "doc-4", "photo.PNG", build_png())
        state = RecognitionState(replies=["  Cellens delar  "])

        result = await make_pipeline(documents, files, state).process_document("doc-4")

        assert result.method == "image_ocr"
        assert state.calls == ["swe"]
        assert (await documents.load("doc-4")).extracted_text == "Cellens delar"

    @pytest.mark.asyncio
    async def test_empty_ocr_result_fails(self, documents, files):
        """Should mark the document failed when OCR finds no text."""
        await add_document(documents, files, "doc-4", "photo.jpg", build_png())
        state = RecognitionState(replies=[""])

        result = await make_pipeline(documents, files, state).process_document("doc-4")

        stored = await documents.load("doc-4")
        assert result.status == DocumentStatus.OCR_FAILED
        assert stored.status == DocumentStatus.OCR_FAILED
        assert stored.extracted_text is None

    @pytest.mark.asyncio
    async def test_unsupported_extension_fails_without_reading(self, documents, files):
        """Should fail unsupported files without touching storage."""
        await add_document(documents, files, "doc-5", "slides.pptx", b"PK\x03\x04")

        result = await make_pipeline(documents, files).process_document("doc-5")

        assert result.status == DocumentStatus.OCR_FAILED
        assert files.reads == []

    @pytest.mark.asyncio
    async def test_missing_file_fails(self, documents, files):
        """Should fail when the stored file is gone."""
        await add_document(documents, files, "doc-6", "lecture.pdf", None)

        result = await make_pipeline(documents, files).process_document("doc-6")

        assert result.status == DocumentStatus.OCR_FAILED
        assert (await documents.load("doc-6")).status == DocumentStatus.OCR_FAILED

    @pytest.mark.asyncio
    async def test_corrupt_pdf_fails(self, documents, files):
        """Should record a failure instead of raising for unreadable PDFs."""
        await add_document(documents, files, "doc-7", "broken.pdf", b"not a pdf at all")

        result = await make_pipeline(documents, files).process_document("doc-7")

        assert result.status == DocumentStatus.OCR_FAILED

    @pytest.mark.asyncio
    async def test_recognizer_error_fails(self, documents, files):
        """Should record a failure when the OCR backend raises."""
        await add_document(documents, files, "doc-8", "photo.png", build_png())
        state = RecognitionState(replies=[RuntimeError("engine crashed")])

        result = await make_pipeline(documents, files, state).process_document("doc-8")

        assert result.status == DocumentStatus.OCR_FAILED


class TestProcessDocument:
    """Tests for persistence behavior."""

    @pytest.mark.asyncio
    async def test_unknown_document_returns_none(self, documents, files):
        """Should return None when the document does not exist."""
        assert await make_pipeline(documents, files).process_document("missing") is None

    @pytest.mark.asyncio
    async def test_rerun_overwrites_previous_result(self, documents, files):
        """Should overwrite text and status when extraction runs again."""
        await add_document(documents, files, "doc-9", "notes.txt", b"first version")
        pipeline = make_pipeline(documents, files)
        await pipeline.process_document("doc-9")

        files.files["uploads/doc-9/notes.txt"] = b"second version"
        await pipeline.process_document("doc-9")

        stored = await documents.load("doc-9")
        assert stored.extracted_text == "second version"
        assert stored.status == DocumentStatus.OCR_COMPLETED

    @pytest.mark.asyncio
    async def test_failed_rerun_clears_text(self, documents, files):
        """Should not keep stale text after a failed rerun."""
        await add_document(documents, files, "doc-9", "notes.txt", b"first version")
        pipeline = make_pipeline(documents, files)
        await pipeline.process_document("doc-9")

        files.files["uploads/doc-9/notes.txt"] = b"   "
        await pipeline.process_document("doc-9")

        stored = await documents.load("doc-9")
        assert stored.status == DocumentStatus.OCR_FAILED
        assert stored.extracted_text is None
        assert not stored.has_usable_text
