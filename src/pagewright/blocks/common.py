"""Helpers shared by block renderers."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from reportlab.lib import colors

from pagewright.config import MESSAGE_BOX_PALETTES, ORPHAN_LINES, FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import (
    ALIGNMENTS,
    Font,
    PageCanvas,
    RasterImage,
    TextMetrics,
    measure_and_wrap,
)

NOTICE_PADDING = 12
NOTICE_RADIUS = 4
ICON_SIZE = 14
ICON_GAP = 8
PARAGRAPH_GAP = 2
_SLACK = 1e-6


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def alignment_or(value: str, default: str) -> str:
    return value if value in ALIGNMENTS else default


def compact_line_height(size: float) -> float:
    """Line height leaving a fixed 2pt gap between lines."""
    return 1 + 2 / size


def parse_color(value: str | None, default: colors.Color) -> colors.Color:
    if not value:
        return default
    try:
        if value.startswith("#"):
            return colors.HexColor(value)
        return colors.toColor(value)
    except ValueError:
        return default


def notice_rows(measured: Sequence[TextMetrics]) -> list[tuple[str, float]]:
    """Flatten wrapped paragraphs into (line, gap above) rows."""
    rows: list[tuple[str, float]] = []
    for index, metrics in enumerate(measured):
        for line_index, line in enumerate(metrics.lines):
            rows.append((line, PARAGRAPH_GAP if index and not line_index else 0.0))
    return rows


def box_segments(
    canvas: PageCanvas,
    rows: Sequence[tuple[str, float]],
    *,
    advance: float,
    padding: float,
    min_inner: float = 0.0,
    spacing_after: float = 0.0,
) -> Iterator[tuple[float, float, Sequence[tuple[str, float]]]]:
    """Yield (top, height, rows) for each page-sized piece of a padded text box.

    A box that fits in the page body is one piece kept together. A taller box
    breaks between lines, each piece starting where ORPHAN_LINES lines fit.
    Callers draw at the yielded position; the cursor moves past each piece.
    """
    inner = sum(gap for _, gap in rows) + len(rows) * advance
    total = 2 * padding + max(inner, min_inner)
    if total + spacing_after <= canvas.body_height:
        canvas.ensure_block(total + spacing_after)

    start = 0
    while start < len(rows):
        canvas.ensure_block(2 * padding + min(ORPHAN_LINES, len(rows) - start) * advance)
        room = canvas.remaining - 2 * padding + _SLACK
        used = 0.0
        end = start
        while end < len(rows):
            step = advance + (rows[end][1] if end > start else 0.0)
            if end > start and used + step > room:
                break
            used += step
            end += 1
        height = 2 * padding + (max(used, min_inner) if start == 0 else used)
        yield canvas.cursor_y, height, rows[start:end]
        canvas.move_y(height)
        start = end
    canvas.move_y(spacing_after)


def draw_notice(
    ctx: RenderContext,
    paragraphs: Sequence[str],
    kind: str,
    *,
    padding: float = NOTICE_PADDING,
    size: float = FontSizes.MESSAGE_BOX,
    icon: RasterImage | None = None,
    font: Font | None = None,
) -> None:
    """Draw a tinted, bordered box holding one or more paragraphs.

    Boxes taller than the page body continue on the next page as a new box.
    """
    canvas = ctx.canvas
    font = font or ctx.fonts.regular
    fill, stroke, text_color = MESSAGE_BOX_PALETTES[kind]
    line_height = compact_line_height(size)

    width = canvas.content_width
    icon_space = ICON_SIZE + ICON_GAP if icon is not None else 0
    text_width = width - 2 * padding - icon_space
    measured = [measure_and_wrap(text, font, size, text_width, line_height) for text in paragraphs]
    rows = notice_rows(measured)
    segments = box_segments(
        canvas,
        rows,
        advance=size * line_height,
        padding=padding,
        min_inner=ICON_SIZE if icon is not None else 0.0,
        spacing_after=Spacing.MESSAGE_BOX_BOTTOM,
    )
    left = canvas.content_left
    for index, (top, height, piece) in enumerate(segments):
        canvas.draw_box(
            width,
            height,
            x=left,
            y=top,
            fill=fill,
            stroke=stroke,
            radius=NOTICE_RADIUS,
        )
        if icon is not None and index == 0:
            canvas.draw_image(
                icon, x=left + padding, y=top + padding, width=ICON_SIZE, height=ICON_SIZE
            )

        line_top = top + padding
        for row, (line, gap) in enumerate(piece):
            if row:
                line_top += gap
            canvas.draw_text(
                line,
                font=font,
                size=size,
                color=text_color,
                x=left + padding + icon_space,
                y=line_top,
                max_width=text_width,
                line_height=line_height,
                wrap=False,
            )
            line_top += size * line_height
