"""Renderers for titles, paragraphs, lists, dividers and video links."""

from __future__ import annotations

import math
import re

from pagewright.config import ORPHAN_LINES, TITLE_LINE_HEIGHT, FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import Font, aligned_x, measure_and_wrap
from pagewright.model import (
    DividerBlock,
    ListBlock,
    TextBlock,
    TitleBlock,
    YoutubeBlock,
    extract_youtube_id,
)

from .common import alignment_or, compact_line_height

TITLE_SIZES = {1: FontSizes.H1, 2: FontSizes.H2, 3: FontSizes.H3}
TITLE_BOTTOM_SPACING = {
    "none": 0,
    "small": round(Spacing.TITLE_BOTTOM * 0.35),
    "medium": Spacing.TITLE_BOTTOM,
    "large": 30,
}
UNDERLINE_GAP = 4
UNDERLINE_THICKNESS = 2
# Room kept below a title so it never sits alone at the bottom of a page.
TITLE_KEEP_WITH_NEXT = 2 * FontSizes.BODY * compact_line_height(FontSizes.BODY)

TEXT_BOTTOM_SPACING = {"none": 0, "small": 2, "medium": Spacing.TEXT_BOTTOM, "large": 6}

BULLET = "•"
MARKER_GAP = 6

DIVIDER_STYLES = ("line", "dashed", "dotted", "double", "thick")
DIVIDER_BOTTOM_SPACING = {"small": Spacing.SMALL, "medium": Spacing.MEDIUM, "large": Spacing.LARGE}
DIVIDER_DASHES = {"dashed": (6, 4), "dotted": (2, 3)}
DIVIDER_LABEL_GAP = 8
DIVIDER_LABEL_MIN_SIZE = 8

_EMPHASIS = re.compile(r"\*\*(.+?)\*\*|\*(.+?)\*")


def strip_emphasis(text: str) -> str:
    """Drop **bold** and *italic* markers, keeping the wrapped text."""
    return _EMPHASIS.sub(lambda match: match.group(1) or match.group(2), text)


def title_height(ctx: RenderContext, block: TitleBlock) -> float:
    level = min(3, max(1, block.level))
    metrics = measure_and_wrap(
        block.text.strip(),
        ctx.fonts.bold,
        TITLE_SIZES[level],
        ctx.canvas.content_width,
        TITLE_LINE_HEIGHT,
    )
    return metrics.height


def title_reserve(ctx: RenderContext, block: TitleBlock) -> float:
    """Height a title reserves before drawing, including room for what follows."""
    underline = UNDERLINE_GAP + UNDERLINE_THICKNESS if block.underline else 0
    bottom = TITLE_BOTTOM_SPACING.get(block.spacing, Spacing.TITLE_BOTTOM)
    return Spacing.TITLE_TOP + title_height(ctx, block) + underline + bottom + TITLE_KEEP_WITH_NEXT


def render_title(ctx: RenderContext, block: TitleBlock) -> None:
    text = block.text.strip()
    if not text:
        return

    canvas = ctx.canvas
    level = min(3, max(1, block.level))
    size = TITLE_SIZES[level]
    color = {1: ctx.theme.TITLE_H1, 2: ctx.theme.TITLE_H2, 3: ctx.theme.TITLE_H3}[level]
    bottom = TITLE_BOTTOM_SPACING.get(block.spacing, Spacing.TITLE_BOTTOM)

    canvas.ensure_block(title_reserve(ctx, block))
    canvas.move_y(Spacing.TITLE_TOP)
    canvas.draw_text(
        text,
        font=ctx.fonts.bold,
        size=size,
        color=color,
        align=alignment_or(block.alignment, "left"),
        line_height=TITLE_LINE_HEIGHT,
        ensure_space=False,
    )
    if block.underline:
        canvas.draw_rule(
            color=ctx.theme.TITLE_UNDERLINE,
            thickness=UNDERLINE_THICKNESS,
            spacing_before=UNDERLINE_GAP,
            ensure_space=False,
        )
    canvas.move_y(bottom)


def render_text(ctx: RenderContext, block: TextBlock) -> None:
    text = strip_emphasis(block.text).strip()
    if not text:
        return

    size = FontSizes.BODY
    ctx.canvas.draw_text(
        text,
        font=ctx.fonts.regular,
        size=size,
        color=ctx.theme.TEXT,
        align=alignment_or(block.alignment, "left"),
        line_height=compact_line_height(size),
        spacing_after=TEXT_BOTTOM_SPACING.get(block.spacing, Spacing.TEXT_BOTTOM),
        keep_together=False,
    )


def list_markers(block: ListBlock, count: int) -> list[str]:
    if block.ordered:
        return [f"{block.start_number + index}." for index in range(count)]
    return [BULLET] * count


def render_list(ctx: RenderContext, block: ListBlock) -> None:
    items = [strip_emphasis(item).strip() for item in block.items]
    items = [item for item in items if item]
    if not items:
        return

    canvas = ctx.canvas
    font = ctx.fonts.regular
    size = FontSizes.LIST
    line_height = compact_line_height(size)
    markers = list_markers(block, len(items))
    marker_width = max(font.width(marker, size) for marker in markers)
    indent = marker_width + MARKER_GAP
    body_width = canvas.content_width - indent

    for marker, item in zip(markers, items, strict=True):
        metrics = measure_and_wrap(item, font, size, body_width, line_height)
        unit = metrics.height + Spacing.LIST_ITEM_GAP
        if unit <= canvas.body_height:
            canvas.ensure_block(unit)
        else:
            # Too tall for any page: break between lines like a paragraph.
            canvas.ensure_block(min(ORPHAN_LINES, metrics.line_count) * metrics.line_advance)
        left = canvas.content_left
        canvas.draw_text(
            marker,
            font=font,
            size=size,
            color=ctx.theme.TEXT,
            align="right" if block.ordered else "left",
            x=left,
            y=canvas.cursor_y,
            max_width=marker_width,
            line_height=line_height,
        )
        # Continuation lines hang under the item text, not under the marker.
        canvas.draw_text(
            item,
            font=font,
            size=size,
            color=ctx.theme.TEXT,
            x=left + indent,
            max_width=body_width,
            line_height=line_height,
            keep_together=False,
        )
        canvas.move_y(Spacing.LIST_ITEM_GAP)
    canvas.move_y(Spacing.LIST_BOTTOM - Spacing.LIST_ITEM_GAP)


def fit_label_size(font: Font, label: str, desired: float, max_width: float) -> float:
    """Shrink the label one point at a time until it fits, down to the minimum size."""
    size = desired
    while font.width(label, size) > max_width and size > DIVIDER_LABEL_MIN_SIZE:
        size = max(DIVIDER_LABEL_MIN_SIZE, math.floor(size - 1))
    return size


def _styled_rule(ctx: RenderContext, style: str, x0: float, x1: float, middle: float) -> None:
    if x1 - x0 <= 0:
        return
    canvas = ctx.canvas
    color = ctx.theme.DIVIDER
    if style == "double":
        for offset in (-1.5, 1.5):
            canvas.draw_rule(color=color, x=x0, y=middle + offset - 0.5, length=x1 - x0, thickness=1)
        return
    thickness = 2 if style == "thick" else 1
    canvas.draw_rule(
        color=color,
        x=x0,
        y=middle - thickness / 2,
        length=x1 - x0,
        thickness=thickness,
        dash=DIVIDER_DASHES.get(style),
    )


def render_divider(ctx: RenderContext, block: DividerBlock) -> None:
    canvas = ctx.canvas
    style = block.style if block.style in DIVIDER_STYLES else "line"
    bottom = DIVIDER_BOTTOM_SPACING.get(block.spacing, Spacing.DIVIDER_BOTTOM)
    label = block.label.strip()
    font = ctx.fonts.regular
    label_size = fit_label_size(
        font, label, FontSizes.ALTERNATIVE, canvas.content_width - 4 * DIVIDER_LABEL_GAP
    )
    band = label_size * 1.4 if label else 4

    canvas.ensure_block(band + bottom)
    left = canvas.content_left
    right = canvas.content_right
    top = canvas.cursor_y
    middle = top + band / 2

    if label:
        label_width = font.width(label, label_size)
        center = left + canvas.content_width / 2
        _styled_rule(ctx, style, left, center - label_width / 2 - DIVIDER_LABEL_GAP, middle)
        _styled_rule(ctx, style, center + label_width / 2 + DIVIDER_LABEL_GAP, right, middle)
        canvas.draw_text(
            label,
            font=font,
            size=label_size,
            color=ctx.theme.TEXT_MUTED,
            align="center",
            y=middle - label_size * 0.65,
            line_height=1.0,
        )
    else:
        _styled_rule(ctx, style, left, right, middle)
    canvas.move_y(band + bottom)


def render_youtube(ctx: RenderContext, block: YoutubeBlock) -> None:
    if not block.video.strip():
        return
    video_id = extract_youtube_id(block.video)
    if video_id is None:
        msg = f"invalid YouTube reference '{block.video}'."
        raise ValueError(msg)

    canvas = ctx.canvas
    url = f"https://youtu.be/{video_id}"
    caption = block.caption.strip()
    text = f"{caption}: {url}" if caption else url
    size = FontSizes.BODY
    line_height = compact_line_height(size)
    align = alignment_or(block.alignment, "left")
    metrics = measure_and_wrap(text, ctx.fonts.regular, size, canvas.content_width, line_height)

    canvas.ensure_block(metrics.height + Spacing.TEXT_BOTTOM)
    top = canvas.cursor_y
    canvas.draw_text(
        text,
        font=ctx.fonts.regular,
        size=size,
        color=ctx.theme.LINK,
        align=align,
        line_height=line_height,
        spacing_after=Spacing.TEXT_BOTTOM,
        ensure_space=False,
    )
    link_x = aligned_x(align, canvas.content_left, canvas.content_width, metrics.widest)
    canvas.add_link(link_x, top, metrics.widest, metrics.height, url=url)
