"""Route content blocks to their renderers and contain per-block failures."""

from __future__ import annotations

from collections.abc import Iterable

from pagewright.context import RenderContext
from pagewright.layout import LayoutError
from pagewright.log import get_logger
from pagewright.model import (
    AudioBlock,
    ChartBlock,
    CodeBlock,
    ContentBlock,
    DividerBlock,
    ImageBlock,
    ImageCompareBlock,
    ImageGridBlock,
    ListBlock,
    MathBlock,
    MessageBoxBlock,
    TableBlock,
    TextBlock,
    TitleBlock,
    UnknownBlock,
    YoutubeBlock,
    block_kind,
)

from .boxes import render_audio, render_failed, render_message_box, render_unknown
from .charts import render_chart, render_math
from .code import render_code
from .media import render_image, render_image_compare, render_image_grid
from .tables import render_table
from .text import render_divider, render_list, render_text, render_title, render_youtube

logger = get_logger(__name__)


def _route(ctx: RenderContext, block: ContentBlock) -> None:
    match block:
        case TitleBlock():
            render_title(ctx, block)
        case TextBlock():
            render_text(ctx, block)
        case ListBlock():
            render_list(ctx, block)
        case TableBlock():
            render_table(ctx, block)
        case MessageBoxBlock():
            render_message_box(ctx, block)
        case DividerBlock():
            render_divider(ctx, block)
        case ImageBlock():
            render_image(ctx, block)
        case ImageCompareBlock():
            render_image_compare(ctx, block)
        case ImageGridBlock():
            render_image_grid(ctx, block)
        case CodeBlock():
            render_code(ctx, block)
        case ChartBlock():
            render_chart(ctx, block)
        case MathBlock():
            render_math(ctx, block)
        case AudioBlock():
            render_audio(ctx, block)
        case YoutubeBlock():
            render_youtube(ctx, block)
        case UnknownBlock():
            logger.warning("unknown block '%s' at %s: %s", block.kind, ctx.position(), block.reason)
            render_unknown(ctx, block)
        case _:
            logger.warning("unrenderable object %r at %s", type(block).__name__, ctx.position())
            render_unknown(ctx, UnknownBlock(kind=type(block).__name__))


def render_block(ctx: RenderContext, block: ContentBlock) -> None:
    """Render one block; a failing renderer is replaced by an error box.

    LayoutError signals a broken canvas contract and always propagates.
    """
    try:
        _route(ctx, block)
    except LayoutError:
        raise
    except Exception:  # noqa: BLE001
        kind = block_kind(block)
        logger.exception("failed to render %s block at %s", kind, ctx.position())
        render_failed(ctx, kind)


def render_blocks(ctx: RenderContext, blocks: Iterable[ContentBlock]) -> None:
    for index, block in enumerate(blocks, start=1):
        ctx.trail.append(f"block {index} ({block_kind(block)})")
        try:
            render_block(ctx, block)
        finally:
            ctx.trail.pop()
