"""
Page layout.

Blocks are laid out into fragments (units of vertical space with boxes
positioned relative to the fragment), and ``compose_pages`` flows fragments
onto pages between an injected header and footer. Everything here is pure:
the result is a list of pages holding positioned boxes, which the canvas
module paints.
"""

import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .fonts import FontBook
from .inline import Span, parse_inline

Color = Tuple[int, int, int]

BLACK: Color = (0, 0, 0)
GRAY: Color = (110, 110, 110)
LIGHT_GRAY: Color = (235, 235, 235)
BLUE: Color = (31, 78, 160)
GREEN: Color = (28, 128, 60)

MM = 72 / 25.4
A4_WIDTH = 210 * MM
A4_HEIGHT = 297 * MM
MARGIN = 10 * MM
BODY_SIZE = 12
LINE_HEIGHT = 1.5


@dataclass
class TextRun:
    x: float
    y: float
    text: str
    size: float
    bold: bool = False
    italic: bool = False
    color: Color = BLACK
    tag: Optional[str] = None


@dataclass
class RectBox:
    x: float
    y: float
    width: float
    height: float
    border: float = 1.0
    color: Color = BLACK
    fill: Optional[Color] = None


@dataclass
class LineBox:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 1.0
    color: Color = BLACK


Box = Union[TextRun, RectBox, LineBox]


def shift_box(box: Box, dx: float, dy: float) -> Box:
    if isinstance(box, LineBox):
        return replace(box, x1=box.x1 + dx, y1=box.y1 + dy, x2=box.x2 + dx, y2=box.y2 + dy)
    return replace(box, x=box.x + dx, y=box.y + dy)


@dataclass
class Fragment:
    height: float
    boxes: List[Box] = field(default_factory=list)

    def shifted(self, dx: float, dy: float) -> List[Box]:
        return [shift_box(box, dx, dy) for box in self.boxes]


@dataclass
class Page:
    number: int
    width: float
    height: float
    boxes: List[Box] = field(default_factory=list)

    def text_runs(self) -> List[TextRun]:
        return [box for box in self.boxes if isinstance(box, TextRun)]

    def text(self) -> str:
        """Page text in reading order, one line per distinct baseline."""
        lines: List[Tuple[float, List[TextRun]]] = []
        for run in sorted(self.text_runs(), key=lambda r: (round(r.y, 1), r.x)):
            if lines and abs(lines[-1][0] - run.y) < 0.5:
                lines[-1][1].append(run)
            else:
                lines.append((run.y, [run]))
        return "\n".join("".join(r.text for r in runs) for _, runs in lines)


# Wrapping

@dataclass
class _Piece:
    text: str
    bold: bool
    italic: bool
    width: float


WrappedLine = List[Tuple[float, _Piece]]


def _break_long_word(piece: _Piece, width: float, size: float, fonts: FontBook) -> List[_Piece]:
    parts: List[_Piece] = []
    current = ""
    for ch in piece.text:
        candidate = current + ch
        if current and fonts.measure(candidate, size, piece.bold, piece.italic) > width:
            parts.append(_Piece(current, piece.bold, piece.italic, fonts.measure(current, size, piece.bold, piece.italic)))
            current = ch
        else:
            current = candidate
    if current:
        parts.append(_Piece(current, piece.bold, piece.italic, fonts.measure(current, size, piece.bold, piece.italic)))
    return parts


def wrap_spans(spans: Sequence[Span], width: float, size: float, fonts: FontBook) -> List[WrappedLine]:
    """Greedy word wrap of styled spans. Each line is a list of (x offset, piece)."""
    pieces: List[_Piece] = []
    for span in spans:
        for chunk in re.findall(r"\S+|\s+", span.text):
            pieces.append(_Piece(chunk, span.bold, span.italic, fonts.measure(chunk, size, span.bold, span.italic)))

    lines: List[WrappedLine] = []
    line: WrappedLine = []
    x = 0.0

    def finish() -> None:
        nonlocal line, x
        while line and line[-1][1].text.isspace():
            line.pop()
        lines.append(_merge(line))
        line, x = [], 0.0

    for piece in pieces:
        if piece.text.isspace():
            if line:
                line.append((x, piece))
                x += piece.width
            continue
        if piece.width > width:
            for part in _break_long_word(piece, width, size, fonts):
                if line and x + part.width > width:
                    finish()
                line.append((x, part))
                x += part.width
            continue
        if line and x + piece.width > width:
            finish()
        line.append((x, piece))
        x += piece.width

    if line or not lines:
        finish()
    return lines


def _merge(line: WrappedLine) -> WrappedLine:
    merged: WrappedLine = []
    for x, piece in line:
        if merged and merged[-1][1].bold == piece.bold and merged[-1][1].italic == piece.italic:
            mx, mp = merged[-1]
            merged[-1] = (mx, _Piece(mp.text + piece.text, mp.bold, mp.italic, mp.width + piece.width))
        else:
            merged.append((x, piece))
    return merged


def line_width(line: WrappedLine) -> float:
    if not line:
        return 0.0
    x, piece = line[-1]
    return x + piece.width


def line_runs(line: WrappedLine, x: float, y: float, size: float, color: Color, tag: Optional[str] = None) -> List[TextRun]:
    return [
        TextRun(x + offset, y, piece.text, size, piece.bold, piece.italic, color, tag)
        for offset, piece in line
    ]


# Blocks

class Block:
    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        raise NotImplementedError


@dataclass
class Paragraph(Block):
    text: str
    size: float = BODY_SIZE
    bold: bool = False
    italic: bool = False
    color: Color = BLACK
    indent: float = 0.0
    bullet: Optional[str] = None
    space_before: float = 0.0
    space_after: float = 0.0
    markup: bool = True

    def spans(self) -> List[Span]:
        spans = parse_inline(self.text) if self.markup else [Span(self.text)]
        return [Span(s.text, s.bold or self.bold, s.italic or self.italic) for s in spans]

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        line_height = self.size * LINE_HEIGHT
        text_x = self.indent
        bullet_width = 0.0
        if self.bullet:
            bullet_width = fonts.measure(self.bullet + " ", self.size) + 2
            text_x += bullet_width

        lines = wrap_spans(self.spans(), max(width - text_x, self.size), self.size, fonts)
        fragments = []
        for index, line in enumerate(lines):
            top = self.space_before if index == 0 else 0.0
            baseline_offset = top + (line_height - self.size) / 2
            boxes: List[Box] = line_runs(line, text_x, baseline_offset, self.size, self.color)
            if index == 0 and self.bullet:
                boxes.insert(0, TextRun(self.indent, baseline_offset, self.bullet, self.size, color=self.color))
            height = top + line_height
            if index == len(lines) - 1:
                height += self.space_after
            fragments.append(Fragment(height, boxes))
        return fragments


@dataclass
class Spacer(Block):
    height: float

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        return [Fragment(self.height)]


@dataclass
class PageBreak(Block):
    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        return []


@dataclass
class Rule(Block):
    thickness: float = 1.0
    color: Color = GRAY
    space: float = 4.0

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        y = self.space + self.thickness / 2
        return [Fragment(self.space * 2 + self.thickness, [LineBox(0, y, width, y, self.thickness, self.color)])]


@dataclass
class TableGrid(Block):
    rows: List[List[str]]
    size: float = 10
    padding: float = 4.0
    border: float = 1.0
    space_after: float = 6.0

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        if not self.rows:
            return []
        columns = max(len(row) for row in self.rows)
        col_width = width / columns
        line_height = self.size * LINE_HEIGHT
        fragments = []

        for row_index, row in enumerate(self.rows):
            header = row_index == 0
            cells = list(row) + [""] * (columns - len(row))
            wrapped = []
            for cell in cells:
                spans = [Span(s.text, s.bold or header, s.italic) for s in parse_inline(cell)]
                wrapped.append(wrap_spans(spans, max(col_width - 2 * self.padding, self.size), self.size, fonts))

            last = row_index == len(self.rows) - 1
            reserve = self.space_after if last else 0.0
            max_lines = max(1, math.floor((max_height - reserve - 2 * self.padding) / line_height))
            slices = list(range(0, max(len(lines) for lines in wrapped), max_lines))
            for start in slices:
                part = [lines[start:start + max_lines] for lines in wrapped]
                height = max(len(lines) for lines in part) * line_height + 2 * self.padding

                boxes: List[Box] = []
                for col, lines in enumerate(part):
                    x = col * col_width
                    boxes.append(RectBox(x, 0, col_width, height, self.border, BLACK, LIGHT_GRAY if header else None))
                    for line_no, line in enumerate(lines):
                        y = self.padding + line_no * line_height + (line_height - self.size) / 2
                        boxes.extend(line_runs(line, x + self.padding, y, self.size, BLACK))

                fragments.append(Fragment(height + (reserve if start == slices[-1] else 0.0), boxes))
        return fragments


@dataclass
class BorderedGroup(Block):
    """Children inside one border; split into separately bordered parts only when taller than a page."""

    children: List[Block]
    border: float = 1.0
    padding: float = 10.0
    space_after: float = 10.0

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        inner_width = width - 2 * self.padding
        inner_max = max_height - 2 * self.padding - self.space_after
        inner: List[Fragment] = []
        for child in self.children:
            inner.extend(child.layout(inner_width, fonts, inner_max))
        if not inner:
            return []

        chunks: List[List[Fragment]] = [[]]
        used = 0.0
        for fragment in inner:
            if chunks[-1] and used + fragment.height > inner_max:
                chunks.append([])
                used = 0.0
            chunks[-1].append(fragment)
            used += fragment.height

        result = []
        for chunk in chunks:
            content_height = sum(f.height for f in chunk)
            height = content_height + 2 * self.padding
            boxes: List[Box] = [RectBox(0, 0, width, height, self.border)]
            y = self.padding
            for fragment in chunk:
                boxes.extend(fragment.shifted(self.padding, y))
                y += fragment.height
            result.append(Fragment(height + self.space_after, boxes))
        return result


@dataclass
class CardRow(Block):
    """One flashcard: question and answer cells side by side, text centered in each."""

    question: str
    answer: str
    order: int
    size: float = BODY_SIZE
    border: float = 2.0
    padding_vertical: float = 20.0
    padding_horizontal: float = 10.0
    gap: float = 4.0
    spacing: float = 4.0

    def _cell_lines(self, text: str, bold: bool, width: float, fonts: FontBook) -> List[WrappedLine]:
        spans = [Span(s.text, s.bold or bold, s.italic) for s in parse_inline(text)]
        return wrap_spans(spans, max(width - 2 * self.padding_horizontal, self.size), self.size, fonts)

    def layout(self, width: float, fonts: FontBook, max_height: float) -> List[Fragment]:
        cell_width = (width - self.gap) / 2
        line_height = self.size * LINE_HEIGHT
        question = self._cell_lines(self.question, True, cell_width, fonts)
        answer = self._cell_lines(self.answer, False, cell_width, fonts)

        # Cells taller than a page continue in further bordered rows
        max_lines = max(1, math.floor((max_height - self.spacing - 2 * self.padding_vertical) / line_height))
        slices = range(0, max(len(question), len(answer)), max_lines)
        return [
            self._row(
                [
                    ("question", 0.0, question[start:start + max_lines]),
                    ("answer", cell_width + self.gap, answer[start:start + max_lines]),
                ],
                cell_width,
                line_height,
            )
            for start in slices
        ]

    def _row(self, cells, cell_width: float, line_height: float) -> Fragment:
        height = max(1, max(len(lines) for _, _, lines in cells)) * line_height + 2 * self.padding_vertical
        boxes: List[Box] = []
        for name, x, lines in cells:
            boxes.append(RectBox(x, 0, cell_width, height, self.border))
            top = (height - len(lines) * line_height) / 2
            for line_no, line in enumerate(lines):
                line_x = x + (cell_width - line_width(line)) / 2
                y = top + line_no * line_height + (line_height - self.size) / 2
                boxes.extend(line_runs(line, line_x, y, self.size, BLACK, tag=f"card-{self.order}-{name}"))
        return Fragment(height + self.spacing, boxes)


# Page composition

@dataclass
class PageGeometry:
    width: float = A4_WIDTH
    height: float = A4_HEIGHT
    margin: float = MARGIN

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin


@dataclass
class Decoration:
    """Header or footer: reserved height plus a painter called once page numbers are known."""

    height: float
    draw: Callable[[int, int, PageGeometry], List[Box]]


def standard_header(title: str, generated_at: datetime, fonts: FontBook, geometry: PageGeometry) -> Decoration:
    title_size, stamp_size = 20, 10
    title_lines = wrap_spans([Span(title, bold=True)], geometry.content_width, title_size, fonts)
    title_height = len(title_lines) * title_size * 1.3
    height = title_height + stamp_size * LINE_HEIGHT + 10
    stamp = f"Genererad: {generated_at:%Y-%m-%d %H:%M}"

    def draw(page_number: int, page_count: int, geo: PageGeometry) -> List[Box]:
        boxes: List[Box] = []
        y = geo.margin
        for line in title_lines:
            boxes.extend(line_runs(line, geo.margin, y, title_size, BLUE, tag="header-title"))
            y += title_size * 1.3
        boxes.append(TextRun(geo.margin, y, stamp, stamp_size, color=GRAY, tag="header-stamp"))
        return boxes

    return Decoration(height, draw)


def standard_footer(fonts: FontBook) -> Decoration:
    size = 9

    def draw(page_number: int, page_count: int, geo: PageGeometry) -> List[Box]:
        label = f"Sida {page_number} av {page_count}"
        x = (geo.width - fonts.measure(label, size)) / 2
        y = geo.height - geo.margin - size
        return [TextRun(x, y, label, size, color=GRAY, tag="footer")]

    return Decoration(size * LINE_HEIGHT + 6, draw)


def compose_pages(
    blocks: Sequence[Block],
    fonts: FontBook,
    header: Decoration,
    footer: Decoration,
    geometry: Optional[PageGeometry] = None,
) -> List[Page]:
    """Flow blocks onto pages and decorate every page with header and footer."""
    geo = geometry or PageGeometry()
    body_top = geo.margin + header.height
    body_bottom = geo.height - geo.margin - footer.height
    body_height = body_bottom - body_top

    bodies: List[List[Box]] = [[]]
    y = body_top

    for block in blocks:
        if isinstance(block, PageBreak):
            if bodies[-1]:
                bodies.append([])
                y = body_top
            continue
        for fragment in block.layout(geo.content_width, fonts, body_height):
            if not fragment.boxes and y == body_top:
                continue
            if y + fragment.height > body_bottom and y > body_top:
                bodies.append([])
                y = body_top
            bodies[-1].extend(fragment.shifted(geo.margin, y))
            y += fragment.height

    total = len(bodies)
    pages = []
    for index, body in enumerate(bodies):
        number = index + 1
        boxes = header.draw(number, total, geo) + body + footer.draw(number, total, geo)
        pages.append(Page(number, geo.width, geo.height, boxes))
    return pages


__all__ = [
    "TextRun",
    "RectBox",
    "LineBox",
    "Fragment",
    "Page",
    "Paragraph",
    "Spacer",
    "PageBreak",
    "Rule",
    "TableGrid",
    "BorderedGroup",
    "CardRow",
    "PageGeometry",
    "Decoration",
    "standard_header",
    "standard_footer",
    "compose_pages",
]
