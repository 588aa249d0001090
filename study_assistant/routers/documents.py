"""Document extraction router - background text extraction and status."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from study_assistant.core.exceptions import NotFoundError
from study_assistant.routers.dependencies import get_document_repository
from study_assistant.schemas.documents import DocumentStatusResponse, ExtractionAccepted
from study_assistant.services.storage.base import DocumentRepository
from study_assistant.tasks.document_tasks import extract_document_task

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/documents/{document_id}/extract",
    response_model=ExtractionAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_extraction(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
):
    """
    Queue text extraction for an uploaded document.

    Returns immediately; poll /documents/{document_id}/status for the outcome.
    """
    try:
        await documents.load(document_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        task = extract_document_task.delay(document_id)
    except Exception as e:
        logger.error(f"Failed to queue extraction for document {document_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to queue extraction: {str(e)}")

    logger.info(f"Queued extraction for document {document_id} (task {task.id})")
    return ExtractionAccepted(document_id=document_id, task_id=task.id)


@router.get("/documents/{document_id}/status", response_model=DocumentStatusResponse)
async def get_extraction_status(
    document_id: str,
    documents: DocumentRepository = Depends(get_document_repository),
):
    """Get the extraction status of a document."""
    try:
        document = await documents.load(document_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return DocumentStatusResponse(
        document_id=document.id,
        file_name=document.file_name,
        status=document.status,
        text_length=len(document.extracted_text or ""),
    )
