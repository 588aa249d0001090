"""FastAPI dependency providers; tests override these with in-memory doubles."""
from study_assistant.core.database import get_engine
from study_assistant.services.ai import (
    ContentGenerationService,
    UsageLedger,
    get_generation_service,
    get_study_set_namer,
)
from study_assistant.services.ai.generators import StudySetNamer
from study_assistant.services.storage.base import ContentRepository, DocumentRepository, StudySetRepository
from study_assistant.services.storage.sql_store import (
    SqlContentRepository,
    SqlDocumentRepository,
    SqlStudySetRepository,
    SqlUsageStore,
)


def get_document_repository() -> DocumentRepository:
    return SqlDocumentRepository(get_engine())


def get_study_set_repository() -> StudySetRepository:
    return SqlStudySetRepository(get_engine())


def get_content_repository() -> ContentRepository:
    return SqlContentRepository(get_engine())


def get_usage_ledger() -> UsageLedger:
    return UsageLedger(SqlUsageStore(get_engine()))


def get_generator() -> ContentGenerationService:
    return get_generation_service()


def get_namer() -> StudySetNamer:
    return get_study_set_namer()
