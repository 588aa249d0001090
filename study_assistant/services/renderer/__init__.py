"""
Document rendering for generated content.

Each content kind supplies its blocks; a shared composer paginates them
between the standard header and footer, and the canvas paints the result
into a PDF.

Usage:
    from study_assistant.services.renderer import render_content

    pdf_bytes = render_content(content, study_set_name="Biologi")
"""

import logging
from typing import Callable, Dict, List, Optional

from study_assistant.core.exceptions import RenderError
from study_assistant.schemas.generation import ContentKind, GeneratedContent
from .canvas import pages_to_pdf
from .flashcards import flashcard_blocks
from .fonts import FontBook
from .layout import Block, Page, PageGeometry, compose_pages, standard_footer, standard_header
from .practice_test import practice_test_blocks, split_answer_key
from .summary import summary_blocks
from .inline import parse_inline, plain_text

logger = logging.getLogger(__name__)

DEFAULT_TITLES: Dict[ContentKind, str] = {
    ContentKind.FLASHCARDS: "Flashcards",
    ContentKind.PRACTICE_TEST: "Övningsprov",
    ContentKind.SUMMARY: "Sammanfattning",
}

BLOCK_BUILDERS: Dict[ContentKind, Callable[[GeneratedContent], List[Block]]] = {
    ContentKind.FLASHCARDS: lambda content: flashcard_blocks(content.flashcards),
    ContentKind.PRACTICE_TEST: lambda content: practice_test_blocks(content.raw_text),
    ContentKind.SUMMARY: lambda content: summary_blocks(content.title or DEFAULT_TITLES[ContentKind.SUMMARY], content.raw_text),
}


def resolve_title(content: GeneratedContent, study_set_name: Optional[str] = None) -> str:
    for candidate in (study_set_name, content.title):
        if candidate and candidate.strip():
            return candidate.strip()
    return DEFAULT_TITLES[content.kind]


def layout_content(
    content: GeneratedContent,
    study_set_name: Optional[str] = None,
    fonts: Optional[FontBook] = None,
    geometry: Optional[PageGeometry] = None,
) -> List[Page]:
    """Lay out content into positioned pages without painting them."""
    fonts = fonts or FontBook()
    geometry = geometry or PageGeometry()
    header = standard_header(resolve_title(content, study_set_name), content.generated_at, fonts, geometry)
    footer = standard_footer(fonts)
    blocks = BLOCK_BUILDERS[content.kind](content)
    return compose_pages(blocks, fonts, header, footer, geometry)


def render_content(
    content: GeneratedContent,
    study_set_name: Optional[str] = None,
    fonts: Optional[FontBook] = None,
) -> bytes:
    """Render content to PDF bytes. Raises RenderError; never returns a partial document."""
    fonts = fonts or FontBook()
    try:
        pages = layout_content(content, study_set_name, fonts)
        return pages_to_pdf(pages, fonts)
    except Exception as e:
        logger.error(f"Failed to render {content.kind.value} content {content.id}: {e}", exc_info=True)
        raise RenderError(f"Failed to render {content.kind.value} content: {e}") from e


__all__ = [
    "FontBook",
    "DEFAULT_TITLES",
    "resolve_title",
    "layout_content",
    "render_content",
    "split_answer_key",
    "parse_inline",
    "plain_text",
]
