"""Pydantic schemas for the study assistant service."""
from study_assistant.schemas.documents import (
    DocumentStatus,
    SourceDocument,
    StudySet,
    ExtractionResult,
    ExtractionAccepted,
    DocumentStatusResponse,
    ProcessingError,
)
from study_assistant.schemas.generation import (
    ContentKind,
    DifficultyLevel,
    QuestionType,
    SummaryLength,
    SummaryFormat,
    FlashcardOptions,
    PracticeTestOptions,
    SummaryOptions,
    GenerationRequest,
    FlashcardItem,
    GeneratedContent,
)
from study_assistant.schemas.providers import (
    ProviderKind,
    ProviderRequest,
    ProviderResponse,
    TokenUsage,
    UsageRecord,
)

__all__ = [
    "DocumentStatus",
    "SourceDocument",
    "StudySet",
    "ExtractionResult",
    "ExtractionAccepted",
    "DocumentStatusResponse",
    "ProcessingError",
    "ContentKind",
    "DifficultyLevel",
    "QuestionType",
    "SummaryLength",
    "SummaryFormat",
    "FlashcardOptions",
    "PracticeTestOptions",
    "SummaryOptions",
    "GenerationRequest",
    "FlashcardItem",
    "GeneratedContent",
    "ProviderKind",
    "ProviderRequest",
    "ProviderResponse",
    "TokenUsage",
    "UsageRecord",
]
