from typing import List

from study_assistant.schemas.generation import FlashcardItem
from .layout import Block, CardRow


def flashcard_blocks(cards: List[FlashcardItem]) -> List[Block]:
    """One two-cell row per card, in card order."""
    return [CardRow(card.question, card.answer, card.order) for card in sorted(cards, key=lambda c: c.order)]
