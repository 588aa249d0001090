"""Schemas for generation requests and generated study material."""
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from study_assistant.schemas.documents import utc_now


class ContentKind(str, Enum):
    FLASHCARDS = "Flashcards"
    PRACTICE_TEST = "PracticeTest"
    SUMMARY = "Summary"


class DifficultyLevel(str, Enum):
    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    MIXED = "Mixed"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MultipleChoice"
    TRUE_FALSE = "TrueFalse"
    SHORT_ANSWER = "ShortAnswer"
    ESSAY = "Essay"
    MIXED = "Mixed"


class SummaryLength(str, Enum):
    BRIEF = "Brief"
    STANDARD = "Standard"
    DETAILED = "Detailed"


class SummaryFormat(str, Enum):
    BULLETS = "Bullets"
    PARAGRAPHS = "Paragraphs"
    OUTLINE = "Outline"


class FlashcardOptions(BaseModel):
    kind: Literal["Flashcards"] = "Flashcards"
    count: Optional[int] = Field(None, ge=1, le=100, description="Number of cards; None lets the model decide")
    difficulty: DifficultyLevel = Field(DifficultyLevel.MIXED, description="Difficulty level")


class PracticeTestOptions(BaseModel):
    kind: Literal["PracticeTest"] = "PracticeTest"
    count: Optional[int] = Field(None, ge=1, le=100, description="Number of questions; None lets the model decide")
    question_types: List[QuestionType] = Field(default_factory=lambda: [QuestionType.MIXED])
    include_explanations: bool = Field(True, description="Include explanations in the answer key")


class SummaryOptions(BaseModel):
    kind: Literal["Summary"] = "Summary"
    length: SummaryLength = Field(SummaryLength.STANDARD, description="Summary length")
    format: SummaryFormat = Field(SummaryFormat.PARAGRAPHS, description="Summary format")


GenerationOptions = Annotated[
    Union[FlashcardOptions, PracticeTestOptions, SummaryOptions],
    Field(discriminator="kind"),
]


class GenerationRequest(BaseModel):
    """Transient description of what to generate."""
    test_id: str = Field(..., description="Target study set ID")
    teacher_instructions: Optional[str] = Field(None, max_length=5000, description="Free-text instructions")
    options: GenerationOptions

    @property
    def kind(self) -> ContentKind:
        return ContentKind(self.options.kind)


class GenerateContentBody(BaseModel):
    """HTTP body for a generation request; the study set comes from the path."""
    teacher_instructions: Optional[str] = Field(None, max_length=5000)
    options: GenerationOptions


class FlashcardItem(BaseModel):
    question: str = Field(..., description="Question text")
    answer: str = Field(..., description="Answer text")
    order: int = Field(..., ge=0, description="Position in the set, contiguous from 0")


class GeneratedContent(BaseModel):
    """Output of one successful generation call."""
    id: str = Field(default_factory=lambda: uuid4().hex)
    test_id: str = Field(..., description="Source study set ID")
    kind: ContentKind
    title: str
    raw_text: str = Field(..., description="Provider response text as returned")
    generated_at: datetime = Field(default_factory=utc_now)
    flashcards: List[FlashcardItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_flashcard_order(self) -> "GeneratedContent":
        if self.kind == ContentKind.FLASHCARDS:
            if not self.flashcards:
                raise ValueError("flashcard content needs at least one card")
            orders = [card.order for card in self.flashcards]
            if orders != list(range(len(orders))):
                raise ValueError(f"flashcard order must be contiguous from 0, got {orders}")
        elif self.flashcards:
            raise ValueError(f"{self.kind.value} content carries raw text only")
        return self


class GeneratedContentResponse(BaseModel):
    id: str
    test_id: str
    kind: ContentKind
    title: str
    generated_at: datetime
    flashcard_count: int = 0


class SuggestNameBody(BaseModel):
    document_ids: Optional[List[str]] = Field(None, description="Documents to name from; defaults to the whole set")


class SuggestNameResponse(BaseModel):
    name: str
