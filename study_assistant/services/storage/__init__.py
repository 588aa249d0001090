"""Storage services: file access and keyed persistence."""
from typing import Optional

from study_assistant.core.config import settings
from study_assistant.services.storage.base import (
    FileStorage,
    DocumentRepository,
    StudySetRepository,
    ContentRepository,
    UsageStore,
)
from study_assistant.services.storage.local_storage import LocalFileStorage
from study_assistant.services.storage.minio_client import MinioFileStorage, parse_minio_path

_file_storage: Optional[FileStorage] = None


def get_file_storage() -> FileStorage:
    """Get or create the configured file storage singleton."""
    global _file_storage
    if _file_storage is None:
        if settings.STORAGE_TYPE == "minio":
            _file_storage = MinioFileStorage()
        else:
            _file_storage = LocalFileStorage(settings.STORAGE_BASE_PATH)
    return _file_storage


__all__ = [
    "FileStorage",
    "DocumentRepository",
    "StudySetRepository",
    "ContentRepository",
    "UsageStore",
    "LocalFileStorage",
    "MinioFileStorage",
    "parse_minio_path",
    "get_file_storage",
]
