"""Unit tests for study_assistant/tasks/document_tasks.py"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from celery.exceptions import Retry

from study_assistant.schemas.documents import DocumentStatus, ExtractionResult
from study_assistant.tasks.document_tasks import extract_document_task


class TestExtractDocumentTask:
    """Tests for extract_document_task."""

    @patch("study_assistant.services.processor.get_extraction_pipeline")
    def test_returns_summary(self, mock_get_pipeline):
        """Should run the pipeline and summarize the result."""
        pipeline = MagicMock()
        pipeline.process_document = AsyncMock(return_value=ExtractionResult(
            text="Hello world", status=DocumentStatus.OCR_COMPLETED, method="pdf_text", pages=1
        ))
        mock_get_pipeline.return_value = pipeline

        result = extract_document_task("doc-1")

        assert result == {
            "status": "OcrCompleted",
            "document_id": "doc-1",
            "method": "pdf_text",
            "text_length": 11,
        }
        pipeline.process_document.assert_awaited_once_with("doc-1")

    @patch("study_assistant.services.processor.get_extraction_pipeline")
    def test_unknown_document(self, mock_get_pipeline):
        """Should report not_found when the document is missing."""
        pipeline = MagicMock()
        pipeline.process_document = AsyncMock(return_value=None)
        mock_get_pipeline.return_value = pipeline

        assert extract_document_task("missing") == {"status": "not_found", "document_id": "missing"}

    @patch("study_assistant.services.processor.get_extraction_pipeline")
    def test_infrastructure_errors_retry(self, mock_get_pipeline):
        """Should retry when the pipeline itself raises."""
        pipeline = MagicMock()
        pipeline.process_document = AsyncMock(side_effect=ConnectionError("database unavailable"))
        mock_get_pipeline.return_value = pipeline

        with patch.object(extract_document_task, "retry", return_value=Retry()) as mock_retry:
            with pytest.raises(Retry):
                extract_document_task("doc-1")

        assert isinstance(mock_retry.call_args.kwargs["exc"], ConnectionError)
        assert mock_retry.call_args.kwargs["countdown"] == 30
