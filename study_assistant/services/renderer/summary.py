from typing import List

from .layout import Block, Paragraph
from .markdown import markdown_blocks


def summary_blocks(title: str, raw_text: str) -> List[Block]:
    """Content title, then the summary classified line by line."""
    blocks: List[Block] = [Paragraph(title, size=16, bold=True, space_after=6, markup=False)]
    blocks.extend(markdown_blocks(raw_text))
    return blocks
