"""Line classification for the markdown-like text that providers return."""

import re
from typing import List, Optional, Tuple

from .layout import BLACK, Block, Paragraph, Rule, Spacer, TableGrid

NUMBERED_RE = re.compile(r"^\d+\.\s")
RULE_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
SEPARATOR_RE = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$")

HEADINGS = (
    ("### ", 13),
    ("## ", 14),
    ("# ", 16),
)


def split_cells(line: str) -> List[str]:
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|"):
        stripped = stripped[:-1]
    return [cell.strip() for cell in stripped.split("|")]


def is_table_start(lines: List[str], index: int) -> bool:
    """A line with a pipe followed by a pipe-led separator line containing ---."""
    if index + 1 >= len(lines) or "|" not in lines[index]:
        return False
    following = lines[index + 1].strip()
    return following.startswith("|") and "---" in following and bool(SEPARATOR_RE.match(following))


def read_table(lines: List[str], index: int) -> Tuple[TableGrid, int]:
    """Parse the table starting at index; returns the grid and the index after it."""
    rows = [split_cells(lines[index])]
    position = index + 2
    while position < len(lines) and lines[position].strip().startswith("|"):
        rows.append(split_cells(lines[position]))
        position += 1
    return TableGrid(rows), position


def heading_level(line: str) -> Optional[Tuple[str, int]]:
    stripped = line.lstrip()
    for prefix, size in HEADINGS:
        if stripped.startswith(prefix):
            return stripped[len(prefix):].strip(), size
    return None


def classify_line(line: str) -> Block:
    """Block for a single non-table line."""
    stripped = line.strip()
    if not stripped:
        return Spacer(6)

    heading = heading_level(line)
    if heading is not None:
        text, size = heading
        return Paragraph(text, size=size, bold=True, space_before=4, space_after=2)

    if RULE_RE.match(stripped):
        return Rule()

    if stripped.startswith("- ") or stripped.startswith("* "):
        return Paragraph(stripped[2:].strip(), bullet="•", indent=10)

    if NUMBERED_RE.match(stripped):
        return Paragraph(stripped, indent=10)

    return Paragraph(stripped, color=BLACK)


def markdown_blocks(text: str) -> List[Block]:
    lines = text.replace("\r\n", "\n").split("\n")
    blocks: List[Block] = []
    index = 0
    while index < len(lines):
        if is_table_start(lines, index):
            table, index = read_table(lines, index)
            blocks.append(table)
            continue
        blocks.append(classify_line(lines[index]))
        index += 1
    return blocks
