from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional


class DocumentStatus(str, Enum):
    """Lifecycle of an uploaded document's text extraction."""
    UPLOADED = "Uploaded"
    OCR_IN_PROGRESS = "OcrInProgress"
    OCR_COMPLETED = "OcrCompleted"
    OCR_FAILED = "OcrFailed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SourceDocument(BaseModel):
    """One uploaded file belonging to a study set."""
    id: str = Field(..., description="Document ID")
    test_id: str = Field(..., description="Owning study set ID")
    file_name: str = Field(..., description="Original uploaded filename")
    file_path: str = Field(..., description="Opaque storage handle of the raw file")
    content_type: str = Field("application/octet-stream", description="Declared MIME type")
    status: DocumentStatus = Field(DocumentStatus.UPLOADED, description="Extraction status")
    extracted_text: Optional[str] = Field(None, description="Extracted plain text")
    uploaded_at: datetime = Field(default_factory=utc_now, description="Upload timestamp")

    @property
    def has_usable_text(self) -> bool:
        return (
            self.status == DocumentStatus.OCR_COMPLETED
            and bool(self.extracted_text and self.extracted_text.strip())
        )


class StudySet(BaseModel):
    """A named group of documents that content is generated from."""
    id: str = Field(..., description="Study set ID")
    name: str = Field(..., description="Display name")
    owner_id: Optional[str] = Field(None, description="Owning user ID")


class ExtractionResult(BaseModel):
    """Outcome of one extraction run."""
    text: str = Field("", description="Extracted text (empty on failure)")
    status: DocumentStatus = Field(..., description="Terminal status")
    method: str = Field("none", description="Strategy used (text, pdf_text, pdf_ocr, image_ocr, none)")
    pages: int = Field(0, description="Number of pages processed")


class ExtractionAccepted(BaseModel):
    """Response model for a queued extraction."""
    message: str = Field("Processing started", description="Acknowledgment message")
    document_id: str = Field(..., description="Document ID")
    task_id: Optional[str] = Field(None, description="Celery task ID for async tracking")


class DocumentStatusResponse(BaseModel):
    """Response model for document extraction status."""
    document_id: str = Field(..., description="Document ID")
    file_name: str = Field(..., description="Original filename")
    status: DocumentStatus = Field(..., description="Extraction status")
    text_length: int = Field(0, description="Length of extracted text")


class ProcessingError(BaseModel):
    """Error response model."""
    status: str = Field(default="error", description="Error status")
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Specific error code")
