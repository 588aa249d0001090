"""Flashcard generation and JSON response parsing."""

import json
import logging
from typing import List

from study_assistant.core.exceptions import MalformedResponseError
from study_assistant.schemas.generation import (
    ContentKind,
    DifficultyLevel,
    FlashcardItem,
    FlashcardOptions,
    GenerationRequest,
)
from .base import ContentGenerator, with_instructions

logger = logging.getLogger(__name__)

DIFFICULTY_INSTRUCTIONS = {
    DifficultyLevel.BASIC: "Focus on basic definitions and core facts.",
    DifficultyLevel.INTERMEDIATE: "Combine factual recall with questions that require understanding of the concepts.",
    DifficultyLevel.ADVANCED: "Emphasize application, analysis and connections between concepts.",
    DifficultyLevel.MIXED: "Use a mix of basic, intermediate and advanced questions.",
}


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` or ```json markdown fence."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_flashcards(text: str) -> List[FlashcardItem]:
    """Parse a JSON array of question/answer objects into ordered cards.

    Keys are matched case-insensitively and entries missing either side are
    dropped, so order indices stay contiguous. Raises MalformedResponseError
    when nothing usable remains.
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("["), cleaned.rfind("]")
        if start == -1 or end <= start:
            raise MalformedResponseError("Failed to parse flashcards from AI response: no JSON array found")
        try:
            data = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Failed to parse flashcards from AI response: {e}") from e

    if not isinstance(data, list):
        raise MalformedResponseError("Failed to parse flashcards from AI response: expected a JSON array")

    cards: List[FlashcardItem] = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        fields = {str(key).lower(): value for key, value in entry.items()}
        question = str(fields.get("question") or "").strip()
        answer = str(fields.get("answer") or "").strip()
        if question and answer:
            cards.append(FlashcardItem(question=question, answer=answer, order=len(cards)))

    if not cards:
        raise MalformedResponseError("Failed to parse flashcards from AI response: no flashcards found")
    return cards


class FlashcardGenerator(ContentGenerator):
    kind = ContentKind.FLASHCARDS
    temperature = 0.7
    title_prefix = "Flashcards"

    def build_system_prompt(self, request: GenerationRequest) -> str:
        options: FlashcardOptions = request.options
        return (
            "You are an educational assistant that creates flashcards from study materials.\n"
            "Create flashcards in Swedish that help students learn the key concepts.\n"
            "Each flashcard should have a clear question and a concise answer.\n"
            f"{DIFFICULTY_INSTRUCTIONS[options.difficulty]}\n"
            "Format your response as a JSON array of objects with 'question' and 'answer' properties.\n"
            'Example: [{"question": "Vad är fotosyntesen?", '
            '"answer": "En process där växter omvandlar ljusenergi till kemisk energi."}]'
        )

    def build_user_prompt(self, request: GenerationRequest, material: str) -> str:
        options: FlashcardOptions = request.options
        if options.count is None:
            header = (
                "Create flashcards from the following study material. "
                "Let the model decide how many flashcards are appropriate: "
                "choose a number that covers the key concepts without repetition."
            )
        else:
            header = f"Create exactly {options.count} flashcards from the following study material:"
        return with_instructions(f"{header}\n\n{material}", request.teacher_instructions)

    def parse_items(self, text: str) -> List[FlashcardItem]:
        cards = parse_flashcards(text)
        logger.info(f"Parsed {len(cards)} flashcards from response")
        return cards
