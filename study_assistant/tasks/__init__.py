"""Celery tasks for the study assistant service."""
from study_assistant.tasks.celery_app import celery_app
from study_assistant.tasks.document_tasks import extract_document_task

__all__ = [
    "celery_app",
    "extract_document_task",
]
