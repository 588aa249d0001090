"""Entry point for generation: dispatches a request to the generator for its kind."""

import logging
from typing import Dict, Iterable, Optional

from study_assistant.schemas.generation import ContentKind, GeneratedContent, GenerationRequest
from .generators import (
    ContentGenerator,
    FlashcardGenerator,
    PracticeTestGenerator,
    StudySetNamer,
    SummaryGenerator,
)

logger = logging.getLogger(__name__)


class ContentGenerationService:
    def __init__(self, generators: Iterable[ContentGenerator]):
        self._generators: Dict[ContentKind, ContentGenerator] = {g.kind: g for g in generators}
        missing = [kind.value for kind in ContentKind if kind not in self._generators]
        if missing:
            raise ValueError(f"No generator registered for: {', '.join(missing)}")

    async def generate(self, request: GenerationRequest) -> GeneratedContent:
        return await self._generators[request.kind].generate(request)


_service: Optional[ContentGenerationService] = None
_namer: Optional[StudySetNamer] = None


def _collaborators():
    from study_assistant.core.database import get_engine
    from study_assistant.services.storage.sql_store import (
        SqlContentRepository,
        SqlDocumentRepository,
        SqlStudySetRepository,
        SqlUsageStore,
    )
    from .gateway import get_ai_gateway
    from .usage_ledger import UsageLedger

    engine = get_engine()
    return {
        "gateway": get_ai_gateway(),
        "ledger": UsageLedger(SqlUsageStore(engine)),
        "documents": SqlDocumentRepository(engine),
        "study_sets": SqlStudySetRepository(engine),
        "contents": SqlContentRepository(engine),
    }


def get_generation_service() -> ContentGenerationService:
    """Get or create the global generation service."""
    global _service
    if _service is None:
        deps = _collaborators()
        _service = ContentGenerationService(
            [
                FlashcardGenerator(**deps),
                PracticeTestGenerator(**deps),
                SummaryGenerator(**deps),
            ]
        )
    return _service


def get_study_set_namer() -> StudySetNamer:
    global _namer
    if _namer is None:
        deps = _collaborators()
        _namer = StudySetNamer(deps["gateway"], deps["ledger"], deps["documents"])
    return _namer
