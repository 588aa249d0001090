"""
Shared generation flow: admission, text aggregation, provider call, usage
recording and persistence. Subclasses supply prompts and parsing.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from study_assistant.core.exceptions import NoTextAvailableError
from study_assistant.schemas.documents import SourceDocument, StudySet
from study_assistant.schemas.generation import (
    ContentKind,
    FlashcardItem,
    GeneratedContent,
    GenerationRequest,
)
from study_assistant.schemas.providers import ProviderRequest, ProviderResponse
from study_assistant.services.storage.base import (
    ContentRepository,
    DocumentRepository,
    StudySetRepository,
)
from ..gateway import AiGateway
from ..usage_ledger import UsageLedger

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "\n\n--- Next Document ---\n\n"


def combine_document_text(documents: Iterable[SourceDocument]) -> str:
    """Join the text of every usable document, each prefixed with its file name."""
    return DOCUMENT_SEPARATOR.join(
        f"Document: {doc.file_name}\n{doc.extracted_text}"
        for doc in documents
        if doc.has_usable_text
    )


def with_instructions(prompt: str, instructions: Optional[str]) -> str:
    if instructions and instructions.strip():
        return f"{prompt}\n\nAdditional instructions: {instructions.strip()}"
    return prompt


class ContentGenerator(ABC):
    kind: ContentKind
    temperature: float = 0.7
    title_prefix: str

    def __init__(
        self,
        gateway: AiGateway,
        ledger: UsageLedger,
        documents: DocumentRepository,
        study_sets: StudySetRepository,
        contents: ContentRepository,
    ):
        self.gateway = gateway
        self.ledger = ledger
        self.documents = documents
        self.study_sets = study_sets
        self.contents = contents

    @abstractmethod
    def build_system_prompt(self, request: GenerationRequest) -> str:
        ...

    @abstractmethod
    def build_user_prompt(self, request: GenerationRequest, material: str) -> str:
        ...

    def parse_items(self, text: str) -> List[FlashcardItem]:
        """Structured items for kinds that have them; raw-text kinds keep none."""
        return []

    async def aggregate_text(self, test_id: str) -> str:
        documents = await self.documents.list_for_set(test_id)
        material = combine_document_text(documents)
        if not material.strip():
            raise NoTextAvailableError()
        logger.info(
            f"Aggregated {sum(1 for d in documents if d.has_usable_text)} of {len(documents)} "
            f"documents for study set {test_id} ({len(material)} characters)"
        )
        return material

    async def invoke(self, request: ProviderRequest) -> ProviderResponse:
        response = await self.gateway.send(request)
        await self.ledger.record(response.usage.input_tokens, response.usage.output_tokens)
        return response

    def build_title(self, study_set: StudySet) -> str:
        return f"{self.title_prefix} - {study_set.name}"

    async def generate(self, request: GenerationRequest) -> GeneratedContent:
        if request.kind != self.kind:
            raise ValueError(f"{type(self).__name__} cannot generate {request.kind.value}")

        await self.ledger.ensure_admitted()
        study_set = await self.study_sets.load(request.test_id)
        material = await self.aggregate_text(request.test_id)

        logger.info(f"Generating {self.kind.value} for study set {request.test_id}")
        response = await self.invoke(
            ProviderRequest(
                system_prompt=self.build_system_prompt(request),
                user_prompt=self.build_user_prompt(request, material),
                temperature=self.temperature,
            )
        )

        content = GeneratedContent(
            test_id=request.test_id,
            kind=self.kind,
            title=self.build_title(study_set),
            raw_text=response.text,
            flashcards=self.parse_items(response.text),
        )
        await self.contents.save(content)
        logger.info(f"Created {self.kind.value} content {content.id} for study set {request.test_id}")
        return content
