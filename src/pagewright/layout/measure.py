"""Text measurement and line wrapping."""

from __future__ import annotations

import functools
from dataclasses import dataclass

from reportlab.pdfbase import pdfmetrics

from pagewright.config import LINE_HEIGHT


@functools.lru_cache(maxsize=16384)
def _string_width(text: str, font_name: str, size: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, size)


@dataclass(frozen=True)
class Font:
    """A registered PDF font measured with its real glyph widths."""

    name: str

    def width(self, text: str, size: float) -> float:
        return _string_width(text, self.name, size)


@dataclass(frozen=True)
class TextMetrics:
    lines: tuple[str, ...]
    height: float
    line_advance: float
    widest: float

    @property
    def line_count(self) -> int:
        return len(self.lines)


def _validate_width(max_width: float) -> None:
    if max_width <= 0:
        msg = f"max_width must be positive, got {max_width}."
        raise ValueError(msg)


def split_token(token: str, font: Font, size: float, max_width: float) -> list[str]:
    """Break one unbreakable token into prefixes that each fit max_width.

    The longest fitting prefix is found by binary search. A prefix always holds
    at least one character, so a glyph wider than max_width is emitted alone.
    """
    _validate_width(max_width)
    chunks: list[str] = []
    remainder = token
    while remainder:
        if font.width(remainder, size) <= max_width:
            chunks.append(remainder)
            break
        low, high, fit = 1, len(remainder) - 1, 0
        while low <= high:
            mid = (low + high) // 2
            if font.width(remainder[:mid], size) <= max_width:
                fit = mid
                low = mid + 1
            else:
                high = mid - 1
        fit = max(fit, 1)
        chunks.append(remainder[:fit])
        remainder = remainder[fit:]
    return chunks or [""]


def _wrap_paragraph(paragraph: str, font: Font, size: float, max_width: float) -> list[str]:
    words = paragraph.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = ""
    for word in words:
        if current:
            candidate = f"{current} {word}"
            if font.width(candidate, size) <= max_width:
                current = candidate
                continue
            lines.append(current)
        if font.width(word, size) <= max_width:
            current = word
        else:
            *head, current = split_token(word, font, size, max_width)
            lines.extend(head)
    lines.append(current)
    return lines


def wrap_text(text: str, font: Font, size: float, max_width: float) -> list[str]:
    """Wrap text greedily; explicit newlines always start a new line."""
    _validate_width(max_width)
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines: list[str] = []
    for paragraph in normalized.split("\n"):
        lines.extend(_wrap_paragraph(paragraph, font, size, max_width))
    return lines


def measure_and_wrap(
    text: str,
    font: Font,
    size: float,
    max_width: float,
    line_height: float = LINE_HEIGHT,
) -> TextMetrics:
    """Return wrapped lines plus the height they occupy."""
    lines = tuple(wrap_text(text, font, size, max_width))
    advance = size * line_height
    widest = max((font.width(line, size) for line in lines), default=0.0)
    return TextMetrics(
        lines=lines,
        height=len(lines) * advance,
        line_advance=advance,
        widest=widest,
    )


def measure_lines(
    text: str,
    font: Font,
    size: float,
    line_height: float = LINE_HEIGHT,
) -> TextMetrics:
    """Measure pre-broken text without rewrapping it; whitespace is kept."""
    lines = tuple(text.replace("\r\n", "\n").replace("\r", "\n").split("\n"))
    advance = size * line_height
    return TextMetrics(
        lines=lines,
        height=len(lines) * advance,
        line_advance=advance,
        widest=max((font.width(line, size) for line in lines), default=0.0),
    )
