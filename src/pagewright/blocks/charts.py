"""Chart and math renderers backed by the raster cache."""

from __future__ import annotations

from pagewright.config import FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import aligned_x
from pagewright.log import get_logger
from pagewright.model import ChartBlock, MathBlock
from pagewright.raster import RasterError, normalize_chart_type, rasterize_chart, rasterize_math

from .common import alignment_or, clamp

logger = get_logger(__name__)

CHART_MIN_HEIGHT = 180
RADIAL_MIN_HEIGHT = 220
CHART_ASPECT = 0.56
RADIAL_TYPES = ("radar", "polarArea")
MATH_SIZE = 14
MATH_BOTTOM = 10


def chart_size(chart: ChartBlock, content_width: float) -> tuple[int, int]:
    """Return the drawn (width, height) of a chart in points."""
    scale = clamp(chart.scale * 1.25, 0.5, 1.0)
    width = round(content_width * scale)
    radial = normalize_chart_type(chart.chart_type) in RADIAL_TYPES
    minimum = RADIAL_MIN_HEIGHT if radial else CHART_MIN_HEIGHT
    return width, max(minimum, round(width * CHART_ASPECT))


def render_chart(ctx: RenderContext, block: ChartBlock) -> None:
    canvas = ctx.canvas
    align = alignment_or(block.alignment, "center")
    width, height = chart_size(block, canvas.content_width)

    canvas.ensure_block(height + Spacing.IMAGE_BOTTOM)
    try:
        image = rasterize_chart(ctx.rasters, block, width, height)
    except RasterError as exc:
        logger.warning("chart replaced by placeholder at %s: %s", ctx.position(), exc)
        _chart_placeholder(ctx, block, width, height, align)
    else:
        canvas.draw_image(image, width=width, height=height, align=align, ensure_space=False)
    canvas.move_y(Spacing.IMAGE_BOTTOM)


def _chart_placeholder(
    ctx: RenderContext, block: ChartBlock, width: float, height: float, align: str
) -> None:
    canvas = ctx.canvas
    left = aligned_x(align, canvas.content_left, canvas.content_width, width)
    top = canvas.cursor_y
    canvas.draw_box(width, height, x=left, y=top, stroke=ctx.theme.BORDER)
    label = f"[Chart: {block.title.strip() or normalize_chart_type(block.chart_type)}]"
    size = FontSizes.BODY
    canvas.draw_text(
        label,
        font=ctx.fonts.mono,
        size=size,
        color=ctx.theme.TEXT_MUTED,
        align="center",
        x=left,
        y=top + (height - size) / 2,
        max_width=width,
        line_height=1.0,
    )
    canvas.move_y(height)


def _hex(color) -> str:
    return "#" + color.hexval()[2:]


def render_math(ctx: RenderContext, block: MathBlock) -> None:
    expression = block.expression.strip()
    if not expression:
        return

    canvas = ctx.canvas
    align = alignment_or(block.alignment, "center")
    try:
        image = rasterize_math(ctx.rasters, expression, size=MATH_SIZE, color=_hex(ctx.theme.TEXT))
    except RasterError as exc:
        logger.warning("math shown as source at %s: %s", ctx.position(), exc)
        canvas.draw_text(
            expression,
            font=ctx.fonts.mono,
            size=FontSizes.CODE,
            color=ctx.theme.TEXT,
            align=align,
            spacing_after=MATH_BOTTOM,
        )
        return

    canvas.draw_image(image, align=align)
    canvas.move_y(MATH_BOTTOM)
