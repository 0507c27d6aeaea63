"""Boxed notices: message boxes, quotes, audio, unknown and failed blocks."""

from __future__ import annotations

from pathlib import PurePosixPath

from pagewright.config import QUOTE_FILL, FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import measure_and_wrap
from pagewright.model import AudioBlock, MessageBoxBlock, UnknownBlock

from .common import box_segments, compact_line_height, draw_notice, notice_rows
from .text import strip_emphasis

MESSAGE_BOX_KINDS = ("info", "warning", "error", "success", "neutral")
# (padding, font size) per box size.
MESSAGE_BOX_SIZES = {
    "small": (8, 10),
    "medium": (12, FontSizes.MESSAGE_BOX),
    "large": (16, 12),
}

QUOTE_RULE_WIDTH = 4
QUOTE_PADDING_X = 10
QUOTE_PADDING_Y = 8

AUDIO_NOTICE = "Audio player available only in browser version."


def render_message_box(ctx: RenderContext, block: MessageBoxBlock) -> None:
    text = strip_emphasis(block.text).strip()
    if not text:
        return
    if block.kind == "quote":
        render_quote(ctx, text)
        return

    kind = block.kind if block.kind in MESSAGE_BOX_KINDS else "info"
    padding, size = MESSAGE_BOX_SIZES.get(block.size, MESSAGE_BOX_SIZES["medium"])
    icon = ctx.icon(kind) if block.show_icon else None
    draw_notice(ctx, [text], kind, padding=padding, size=size, icon=icon)


def render_quote(ctx: RenderContext, text: str) -> None:
    canvas = ctx.canvas
    size = FontSizes.MESSAGE_BOX
    line_height = compact_line_height(size)
    inner_left = QUOTE_RULE_WIDTH + QUOTE_PADDING_X
    text_width = canvas.content_width - inner_left - QUOTE_PADDING_X
    metrics = measure_and_wrap(text, ctx.fonts.italic, size, text_width, line_height)
    segments = box_segments(
        canvas,
        notice_rows([metrics]),
        advance=metrics.line_advance,
        padding=QUOTE_PADDING_Y,
        spacing_after=Spacing.MESSAGE_BOX_BOTTOM,
    )
    left = canvas.content_left
    for top, height, piece in segments:
        canvas.draw_box(canvas.content_width, height, x=left, y=top, fill=QUOTE_FILL)
        canvas.draw_box(QUOTE_RULE_WIDTH, height, x=left, y=top, fill=ctx.theme.BORDER)
        canvas.draw_text(
            "\n".join(line for line, _ in piece),
            font=ctx.fonts.italic,
            size=size,
            color=ctx.theme.TEXT,
            x=left + inner_left,
            y=top + QUOTE_PADDING_Y,
            max_width=text_width,
            line_height=line_height,
            wrap=False,
        )


def audio_file_name(src: str) -> str:
    """Last path segment of the audio reference, without a query string."""
    cleaned = src.split("?", 1)[0].split("#", 1)[0].rstrip("/")
    return PurePosixPath(cleaned).name or src


def render_audio(ctx: RenderContext, block: AudioBlock) -> None:
    paragraphs = [AUDIO_NOTICE]
    src = block.src.strip()
    name = audio_file_name(src) if src else block.caption.strip()
    if name:
        paragraphs.append(f"Audio name to find: {name}")
    draw_notice(ctx, paragraphs, "info", icon=ctx.icon("info"))


def render_unknown(ctx: RenderContext, block: UnknownBlock) -> None:
    if block.reason and block.reason != "unsupported content type":
        text = f"Malformed {block.kind} block: {block.reason}."
    else:
        text = f"Unknown content type: {block.kind}"
    draw_notice(ctx, [text], "warning", icon=ctx.icon("warning"))


def render_failed(ctx: RenderContext, kind: str) -> None:
    draw_notice(ctx, [f"Could not render {kind} block."], "error", icon=ctx.icon("error"))
