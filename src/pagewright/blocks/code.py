"""Code block renderer with optional line numbers and page-sized chunks."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from pagewright.config import FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import Font, split_token
from pagewright.model import CodeBlock, CodeSection

LANGUAGE_NAMES = {
    "plaintext": "Plain Text",
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "python": "Python",
    "java": "Java",
    "c": "C",
    "cpp": "C++",
    "csharp": "C#",
    "go": "Go",
    "rust": "Rust",
    "ruby": "Ruby",
    "php": "PHP",
    "swift": "Swift",
    "kotlin": "Kotlin",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "json": "JSON",
    "yaml": "YAML",
    "xml": "XML",
    "markdown": "Markdown",
    "sql": "SQL",
    "bash": "Bash",
    "shell": "Shell",
    "powershell": "PowerShell",
    "dockerfile": "Dockerfile",
}

PADDING = 10
SECTION_GAP = 10
MIN_HEIGHT = 40
GUTTER_GAP = 8
CODE_LINE_HEIGHT = 1.3
HEADER_HEIGHT = FontSizes.CODE_LABEL + 8
CORNER_RADIUS = 4
TAB = "  "
CONTINUED = "(continued)"
# Lines a split section must fit on the current page before its first chunk starts there.
MIN_CHUNK_LINES = 3


@dataclass(frozen=True)
class CodeLine:
    """One drawn row; continuation rows of a wrapped source line have no number."""

    number: int | None
    text: str


def language_label(section: CodeSection) -> str:
    if section.filename.strip():
        return section.filename.strip()
    language = section.language.strip().lower() or "plaintext"
    return LANGUAGE_NAMES.get(language, section.language.strip())


def gutter_width(font: Font, size: float, line_count: int) -> float:
    digits = max(2, len(str(line_count)))
    return font.width("9" * digits, size) + GUTTER_GAP


def layout_code_lines(content: str, font: Font, size: float, max_width: float) -> list[CodeLine]:
    """Hard-wrap source lines to max_width, keeping their indentation."""
    source = content.replace("\r\n", "\n").replace("\r", "\n").replace("\t", TAB).rstrip("\n")
    lines: list[CodeLine] = []
    for number, line in enumerate(source.split("\n"), start=1):
        line = line.rstrip()
        if not line:
            lines.append(CodeLine(number, ""))
            continue
        for index, chunk in enumerate(split_token(line, font, size, max_width)):
            lines.append(CodeLine(number if index == 0 else None, chunk))
    return lines


def _chrome_height() -> float:
    return HEADER_HEIGHT + 2 * PADDING


def _box_height(line_count: int, advance: float) -> float:
    return max(MIN_HEIGHT, _chrome_height() + line_count * advance)


def _draw_chunk(
    ctx: RenderContext,
    label: str,
    lines: Sequence[CodeLine],
    *,
    gutter: float,
    show_numbers: bool,
) -> None:
    canvas = ctx.canvas
    theme = ctx.theme
    size = FontSizes.CODE
    advance = size * CODE_LINE_HEIGHT
    width = canvas.content_width
    height = _box_height(len(lines), advance)
    left = canvas.content_left
    top = canvas.cursor_y

    canvas.draw_box(
        width,
        height,
        fill=theme.CODE_BACKGROUND,
        stroke=theme.CODE_BORDER,
        radius=CORNER_RADIUS,
        ensure_space=False,
        advance_cursor=False,
    )
    canvas.draw_text(
        label,
        font=ctx.fonts.bold,
        size=FontSizes.CODE_LABEL,
        color=theme.CODE_LABEL,
        x=left + PADDING,
        y=top + PADDING,
        max_width=width - 2 * PADDING,
        line_height=1.0,
    )

    body_top = top + PADDING + HEADER_HEIGHT
    body_height = len(lines) * advance
    body_left = left + PADDING
    if show_numbers:
        numbers = "\n".join("" if line.number is None else str(line.number) for line in lines)
        with canvas.region(body_left, body_top, gutter - GUTTER_GAP, body_height):
            canvas.draw_text(
                numbers,
                font=ctx.fonts.mono,
                size=size,
                color=theme.TEXT_MUTED,
                align="right",
                line_height=CODE_LINE_HEIGHT,
                ensure_space=False,
                wrap=False,
            )
        body_left += gutter

    with canvas.region(body_left, body_top, left + width - PADDING - body_left, body_height):
        canvas.draw_text(
            "\n".join(line.text for line in lines),
            font=ctx.fonts.mono,
            size=size,
            color=theme.TEXT,
            line_height=CODE_LINE_HEIGHT,
            ensure_space=False,
            wrap=False,
        )
    canvas.move_y(height)


def render_section(ctx: RenderContext, section: CodeSection, *, show_numbers: bool) -> None:
    canvas = ctx.canvas
    font = ctx.fonts.mono
    size = FontSizes.CODE
    advance = size * CODE_LINE_HEIGHT
    source_lines = section.content.replace("\r\n", "\n").rstrip("\n").count("\n") + 1
    gutter = gutter_width(font, size, source_lines) if show_numbers else 0.0
    text_width = canvas.content_width - 2 * PADDING - gutter
    lines = layout_code_lines(section.content, font, size, text_width)
    label = language_label(section)

    if _box_height(len(lines), advance) <= canvas.body_height:
        canvas.ensure_block(_box_height(len(lines), advance))
        _draw_chunk(ctx, label, lines, gutter=gutter, show_numbers=show_numbers)
        return

    start = 0
    while start < len(lines):
        left_over = len(lines) - start
        canvas.ensure_block(_chrome_height() + min(MIN_CHUNK_LINES, left_over) * advance)
        fits = max(1, math.floor((canvas.remaining - _chrome_height()) / advance))
        chunk = lines[start : start + fits]
        chunk_label = label if start == 0 else f"{label} {CONTINUED}"
        _draw_chunk(ctx, chunk_label, chunk, gutter=gutter, show_numbers=show_numbers)
        start += len(chunk)


def render_code(ctx: RenderContext, block: CodeBlock) -> None:
    sections = [section for section in block.sections if section.content.strip()]
    if not sections:
        return

    for index, section in enumerate(sections):
        if index:
            ctx.canvas.move_y(SECTION_GAP)
        render_section(ctx, section, show_numbers=block.show_line_numbers)
    ctx.canvas.move_y(Spacing.CODE_BOTTOM)
