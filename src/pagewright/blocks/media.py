"""Image, image comparison and image grid renderers."""

from __future__ import annotations

import math

from pagewright.assets import AssetError
from pagewright.config import FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import RasterImage, aligned_x, measure_and_wrap
from pagewright.log import get_logger
from pagewright.model import ImageBlock, ImageCompareBlock, ImageGridBlock, ImageRef

from .common import alignment_or, clamp, compact_line_height, parse_color

logger = get_logger(__name__)

MIN_SCALE = 0.1
MAX_SCALE = 1.0
CAPTION_GAP = 6
COMPARE_GAP = 12
SLIDER_WIDTH = 2
GRID_GAP = 5
GRID_MIN_WIDTH = 100
GRID_CAPTION_GAP = 4
# Grid rows never grow taller than this multiple of the cell width.
GRID_MAX_ASPECT = 1.5


def grid_columns(count: int) -> int:
    if count <= 1:
        return 1
    if count == 2:
        return 2
    if count <= 6:
        return 3
    if count <= 12:
        return 4
    return min(5, math.ceil(math.sqrt(count)))


def grid_shape(count: int) -> tuple[int, int]:
    """Return (columns, rows) for a grid of count images."""
    columns = grid_columns(count)
    return columns, math.ceil(count / columns) if count else 0


def placeholder_text(src: str) -> str:
    return f"[Image could not be embedded: {src}]"


def _try_load(ctx: RenderContext, ref: ImageRef) -> RasterImage | None:
    try:
        return ctx.load_image(ref.src)
    except AssetError as exc:
        logger.warning("image '%s' skipped at %s: %s", ref.src, ctx.position(), exc)
        return None


def _caption_height(ctx: RenderContext, caption: str, width: float) -> float:
    if not caption:
        return 0.0
    size = FontSizes.CAPTION
    return measure_and_wrap(caption, ctx.fonts.italic, size, width, compact_line_height(size)).height


def _placeholder_height(ctx: RenderContext, src: str, width: float) -> float:
    size = FontSizes.CAPTION
    text = placeholder_text(src)
    return measure_and_wrap(text, ctx.fonts.mono, size, width, compact_line_height(size)).height


def _draw_placeholder(
    ctx: RenderContext, src: str, *, align: str = "left", y: float | None = None
) -> None:
    size = FontSizes.CAPTION
    ctx.canvas.draw_text(
        placeholder_text(src),
        font=ctx.fonts.mono,
        size=size,
        color=ctx.theme.TEXT_MUTED,
        align=align,
        y=y,
        line_height=compact_line_height(size),
    )


def _draw_caption(
    ctx: RenderContext,
    caption: str,
    *,
    y: float | None = None,
    align: str = "center",
) -> None:
    if not caption:
        return
    size = FontSizes.CAPTION
    ctx.canvas.draw_text(
        caption,
        font=ctx.fonts.italic,
        size=size,
        color=ctx.theme.TEXT_MUTED,
        align=align,
        y=y,
        line_height=compact_line_height(size),
        ensure_space=False,
    )


def scaled_width(content_width: float, scale: float) -> float:
    scale = clamp(scale, MIN_SCALE, MAX_SCALE)
    return max(1, min(content_width, round(content_width * scale)))


def render_image(ctx: RenderContext, block: ImageBlock) -> None:
    canvas = ctx.canvas
    align = alignment_or(block.alignment, "center")
    image = _try_load(ctx, block.image)
    if image is None:
        _draw_placeholder(ctx, block.image.src, align=align)
        canvas.move_y(Spacing.IMAGE_BOTTOM)
        return

    caption = block.image.alt.strip()
    caption_block = _caption_height(ctx, caption, canvas.content_width)
    if caption_block:
        caption_block += CAPTION_GAP
    max_height = canvas.body_height - caption_block - Spacing.IMAGE_BOTTOM
    width, height = canvas.fit_image(
        image, width=scaled_width(canvas.content_width, block.scale), max_height=max_height
    )

    canvas.ensure_block(height + caption_block + Spacing.IMAGE_BOTTOM)
    canvas.draw_image(image, width=width, height=height, align=align, ensure_space=False)
    if caption:
        canvas.move_y(CAPTION_GAP)
        _draw_caption(ctx, caption, align=align)
    canvas.move_y(Spacing.IMAGE_BOTTOM)


def _compare_captions(block: ImageCompareBlock) -> tuple[str, str]:
    return block.before.alt.strip() or "Before", block.after.alt.strip() or "After"


def _render_side_by_side(ctx: RenderContext, block: ImageCompareBlock) -> None:
    canvas = ctx.canvas
    align = alignment_or(block.alignment, "center")
    total_width = scaled_width(canvas.content_width, block.scale)
    half = (total_width - COMPARE_GAP) / 2
    captions = _compare_captions(block)
    caption_height = max(_caption_height(ctx, caption, half) for caption in captions)
    max_height = canvas.body_height - caption_height - CAPTION_GAP - Spacing.IMAGE_BOTTOM

    sides = []
    for ref in (block.before, block.after):
        image = _try_load(ctx, ref)
        if image is None:
            sides.append((ref, None, _placeholder_height(ctx, ref.src, half)))
        else:
            _, height = canvas.fit_image(image, width=half, max_width=half, max_height=max_height)
            sides.append((ref, image, height))
    row_height = max(height for _, _, height in sides)
    total = row_height + CAPTION_GAP + caption_height

    canvas.ensure_block(total + Spacing.IMAGE_BOTTOM)
    top = canvas.cursor_y
    left = aligned_x(align, canvas.content_left, canvas.content_width, total_width)
    for index, ((ref, image, _), caption) in enumerate(zip(sides, captions, strict=True)):
        column_left = left + index * (half + COMPARE_GAP)
        with canvas.region(column_left, top, half, total):
            if image is None:
                _draw_placeholder(ctx, ref.src)
            else:
                canvas.draw_image(image, width=half, align="center", max_height=max_height)
            _draw_caption(ctx, caption, y=top + row_height + CAPTION_GAP)
    canvas.move_y(total + Spacing.IMAGE_BOTTOM)


def slider_caption(block: ImageCompareBlock, position: float) -> str:
    before, after = _compare_captions(block)
    if block.show_percentage:
        return f"{before} | {position:g}% | {after}"
    return f"{before} | {after}"


def _render_slider(ctx: RenderContext, block: ImageCompareBlock) -> None:
    canvas = ctx.canvas
    align = alignment_or(block.alignment, "center")
    before = _try_load(ctx, block.before)
    after = _try_load(ctx, block.after)
    if before is None or after is None:
        for ref, image in ((block.before, before), (block.after, after)):
            if image is None:
                _draw_placeholder(ctx, ref.src, align=align)
        canvas.move_y(Spacing.IMAGE_BOTTOM)
        return

    position = clamp(block.slider_position, 0.0, 100.0)
    caption = slider_caption(block, position)
    caption_height = _caption_height(ctx, caption, canvas.content_width) + CAPTION_GAP
    width, height = canvas.fit_image(
        before,
        width=scaled_width(canvas.content_width, block.scale),
        max_height=canvas.body_height - caption_height - Spacing.IMAGE_BOTTOM,
    )

    canvas.ensure_block(height + caption_height + Spacing.IMAGE_BOTTOM)
    top = canvas.cursor_y
    left = aligned_x(align, canvas.content_left, canvas.content_width, width)
    split = left + width * position / 100

    canvas.draw_image(before, width=width, height=height, x=left, y=top)
    # The after image only paints right of the split line.
    if left + width - split > 0:
        with canvas.clip(split, top, left + width - split, height):
            canvas.draw_image(after, width=width, height=height, x=left, y=top)
    canvas.draw_rule(
        color=parse_color(block.slider_color, ctx.theme.SLIDER),
        x=split,
        y=top,
        length=height,
        vertical=True,
        thickness=SLIDER_WIDTH,
    )
    canvas.move_y(height + CAPTION_GAP)
    _draw_caption(ctx, caption, align=align)
    canvas.move_y(Spacing.IMAGE_BOTTOM)


def render_image_compare(ctx: RenderContext, block: ImageCompareBlock) -> None:
    if block.mode == "slider":
        _render_slider(ctx, block)
    else:
        _render_side_by_side(ctx, block)


def grid_cell_width(content_width: float, scale: float, columns: int) -> int:
    scale = clamp(scale, MIN_SCALE, MAX_SCALE)
    grid_width = min(content_width, max(GRID_MIN_WIDTH, content_width * scale))
    return math.floor((grid_width - GRID_GAP * (columns - 1)) / columns)


def render_image_grid(ctx: RenderContext, block: ImageGridBlock) -> None:
    if not block.images:
        return

    canvas = ctx.canvas
    columns, _ = grid_shape(len(block.images))
    cell = grid_cell_width(canvas.content_width, block.scale, columns)
    grid_width = columns * cell + GRID_GAP * (columns - 1)
    grid_left = aligned_x("center", canvas.content_left, canvas.content_width, grid_width)
    loaded = [(ref, _try_load(ctx, ref)) for ref in block.images]

    for start in range(0, len(loaded), columns):
        row = loaded[start : start + columns]
        heights = [
            min(cell / image.aspect, cell * GRID_MAX_ASPECT)
            if image is not None
            else _placeholder_height(ctx, ref.src, cell)
            for ref, image in row
        ]
        image_height = max(heights)
        caption_height = max(_caption_height(ctx, ref.alt.strip(), cell) for ref, _ in row)
        if caption_height:
            caption_height += GRID_CAPTION_GAP
        row_height = image_height + caption_height

        canvas.ensure_block(row_height + GRID_GAP)
        top = canvas.cursor_y
        for index, (ref, image) in enumerate(row):
            with canvas.region(grid_left + index * (cell + GRID_GAP), top, cell, row_height):
                if image is None:
                    _draw_placeholder(ctx, ref.src)
                else:
                    canvas.draw_image(image, width=cell, align="center", max_height=image_height)
                _draw_caption(ctx, ref.alt.strip(), y=top + image_height + GRID_CAPTION_GAP)
        canvas.move_y(row_height + GRID_GAP)
    canvas.move_y(Spacing.IMAGE_BOTTOM - GRID_GAP)
