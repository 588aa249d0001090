"""Content generators, one per content kind, plus study set naming."""
from .base import ContentGenerator, combine_document_text, DOCUMENT_SEPARATOR
from .flashcards import FlashcardGenerator, parse_flashcards, strip_code_fences
from .practice_test import PracticeTestGenerator
from .summary import SummaryGenerator
from .naming import StudySetNamer

__all__ = [
    "ContentGenerator",
    "combine_document_text",
    "DOCUMENT_SEPARATOR",
    "FlashcardGenerator",
    "parse_flashcards",
    "strip_code_fences",
    "PracticeTestGenerator",
    "SummaryGenerator",
    "StudySetNamer",
]
