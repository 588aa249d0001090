"""
Narrow storage interfaces consumed by the extraction, generation and
rendering services. Only keyed lookups are expressed here; implementations
own their query mechanics.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List

from study_assistant.schemas.documents import SourceDocument, StudySet
from study_assistant.schemas.generation import GeneratedContent
from study_assistant.schemas.providers import UsageRecord


class FileStorage(ABC):
    """Raw file access by opaque handle."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    async def read(self, path: str) -> bytes:
        ...


class DocumentRepository(ABC):

    @abstractmethod
    async def load(self, document_id: str) -> SourceDocument:
        """Raise NotFoundError when absent."""

    @abstractmethod
    async def save(self, document: SourceDocument) -> None:
        ...

    @abstractmethod
    async def list_for_set(self, test_id: str) -> List[SourceDocument]:
        ...

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        ...


class StudySetRepository(ABC):

    @abstractmethod
    async def load(self, test_id: str) -> StudySet:
        """Raise NotFoundError when absent."""

    @abstractmethod
    async def save(self, study_set: StudySet) -> None:
        ...


class ContentRepository(ABC):

    @abstractmethod
    async def load(self, content_id: str) -> GeneratedContent:
        """Raise NotFoundError when absent."""

    @abstractmethod
    async def save(self, content: GeneratedContent) -> None:
        ...

    @abstractmethod
    async def delete(self, content_id: str) -> None:
        ...


class UsageStore(ABC):
    """Per-day token counters."""

    @abstractmethod
    async def get_or_create(self, day: date) -> UsageRecord:
        ...

    @abstractmethod
    async def increment(self, day: date, input_tokens: int, output_tokens: int) -> UsageRecord:
        """Add to the day's counters in one atomic update and bump the call count."""
