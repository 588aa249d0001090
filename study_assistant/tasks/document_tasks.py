"""Document extraction Celery tasks."""
import asyncio
import logging

from study_assistant.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def extract_document_task(self, document_id: str):
    """
    Extract text from a stored document in the background.

    Extraction failures are recorded on the document as OcrFailed by the
    pipeline itself; only infrastructure errors (database, storage) reach
    this task and are retried.

    Args:
        document_id: ID of the document to process

    Returns:
        dict: Terminal status and extracted text length
    """
    from study_assistant.services.processor import get_extraction_pipeline

    try:
        logger.info(f"Starting extraction task for document {document_id}")
        result = asyncio.run(get_extraction_pipeline().process_document(document_id))
    except Exception as e:
        logger.error(f"Extraction task failed for document {document_id}: {e}")
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=30 * (self.request.retries + 1))
        raise

    if result is None:
        return {"status": "not_found", "document_id": document_id}

    return {
        "status": result.status.value,
        "document_id": document_id,
        "method": result.method,
        "text_length": len(result.text),
    }
