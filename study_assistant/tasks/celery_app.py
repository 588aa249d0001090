"""Celery application configuration for background extraction."""
from celery import Celery
from study_assistant.core.config import settings

# Create Celery app
celery_app = Celery(
    "study-assistant",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

# Configure Celery
celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # Result expiry (24 hours)
    result_expires=86400,
    # Scanned PDFs are OCR'd page by page and can take a while
    task_time_limit=1800,
    task_soft_time_limit=1700,
    # Worker settings
    worker_concurrency=settings.CELERY_WORKER_CONCURRENCY,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    imports=["study_assistant.tasks.document_tasks"],
)
