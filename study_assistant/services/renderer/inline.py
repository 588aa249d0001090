"""
Inline markup: ``**bold**``, ``*italic*`` and ``_italic_``.

A lexer turns a line into a token stream and a single render pass turns the
tokens into styled spans. A delimiter only opens when a matching closer
exists later in the line; anything unmatched stays literal text.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class TokenType(Enum):
    TEXT = "text"
    BOLD_OPEN = "bold_open"
    BOLD_CLOSE = "bold_close"
    ITALIC_OPEN = "italic_open"
    ITALIC_CLOSE = "italic_close"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str = ""


@dataclass(frozen=True)
class Span:
    text: str
    bold: bool = False
    italic: bool = False


def _is_word_char(ch: str) -> bool:
    return ch.isalnum()


def _can_open_italic(text: str, i: int, ch: str) -> bool:
    nxt = text[i + 1] if i + 1 < len(text) else ""
    if not nxt or nxt.isspace():
        return False
    if ch == "_" and i > 0 and _is_word_char(text[i - 1]):
        return False
    return True


def _can_close_italic(text: str, i: int, ch: str) -> bool:
    prev = text[i - 1] if i > 0 else ""
    if not prev or prev.isspace():
        return False
    if ch == "_" and i + 1 < len(text) and _is_word_char(text[i + 1]):
        return False
    return True


def _find_italic_close(text: str, start: int, ch: str) -> int:
    """Index of the first valid closer for ``ch`` at or after start, or -1.

    ``**`` pairs are skipped as units, matching how the lexer consumes them.
    """
    j = start
    while j < len(text):
        if text.startswith("**", j):
            j += 2
            continue
        if text[j] == ch and _can_close_italic(text, j, ch):
            return j
        j += 1
    return -1


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    buffer: List[str] = []
    bold_at: Optional[int] = None
    italic_at: Optional[int] = None
    italic_char = ""

    def flush() -> None:
        if buffer:
            tokens.append(Token(TokenType.TEXT, "".join(buffer)))
            buffer.clear()

    i = 0
    while i < len(text):
        if text.startswith("**", i):
            if bold_at is not None:
                flush()
                tokens.append(Token(TokenType.BOLD_CLOSE, "**"))
                bold_at = None
            elif text.find("**", i + 2) > i + 2:
                flush()
                bold_at = len(tokens)
                tokens.append(Token(TokenType.BOLD_OPEN, "**"))
            else:
                buffer.append("**")
            i += 2
            continue

        ch = text[i]
        if ch in "*_":
            if italic_at is not None and ch == italic_char and _can_close_italic(text, i, ch):
                flush()
                tokens.append(Token(TokenType.ITALIC_CLOSE, ch))
                italic_at = None
                i += 1
                continue
            if (
                italic_at is None
                and _can_open_italic(text, i, ch)
                and _find_italic_close(text, i + 2, ch) != -1
            ):
                flush()
                italic_at = len(tokens)
                italic_char = ch
                tokens.append(Token(TokenType.ITALIC_OPEN, ch))
                i += 1
                continue

        buffer.append(ch)
        i += 1

    flush()

    # An opener whose closer was consumed differently reverts to literal text.
    for index in (bold_at, italic_at):
        if index is not None:
            tokens[index] = Token(TokenType.TEXT, tokens[index].text)
    return tokens


def render_spans(tokens: List[Token]) -> List[Span]:
    spans: List[Span] = []
    bold = italic = False
    for token in tokens:
        if token.type == TokenType.BOLD_OPEN:
            bold = True
        elif token.type == TokenType.BOLD_CLOSE:
            bold = False
        elif token.type == TokenType.ITALIC_OPEN:
            italic = True
        elif token.type == TokenType.ITALIC_CLOSE:
            italic = False
        elif token.text:
            if spans and spans[-1].bold == bold and spans[-1].italic == italic:
                spans[-1] = Span(spans[-1].text + token.text, bold, italic)
            else:
                spans.append(Span(token.text, bold, italic))
    return spans


def parse_inline(text: str) -> List[Span]:
    return render_spans(tokenize(text))


def plain_text(text: str) -> str:
    """Line text with inline markup removed."""
    return "".join(span.text for span in parse_inline(text))
