"""Renderers for every content block kind."""

from .boxes import render_audio, render_failed, render_message_box, render_unknown
from .charts import chart_size, render_chart, render_math
from .code import layout_code_lines, render_code
from .dispatch import render_block, render_blocks
from .media import grid_columns, grid_shape, render_image, render_image_compare, render_image_grid
from .tables import render_table
from .text import (
    render_divider,
    render_list,
    render_text,
    render_title,
    render_youtube,
    title_reserve,
)

__all__ = [
    "chart_size",
    "grid_columns",
    "grid_shape",
    "layout_code_lines",
    "render_audio",
    "render_block",
    "render_blocks",
    "render_chart",
    "render_code",
    "render_divider",
    "render_failed",
    "render_image",
    "render_image_compare",
    "render_image_grid",
    "render_list",
    "render_math",
    "render_message_box",
    "render_table",
    "render_text",
    "render_title",
    "render_unknown",
    "render_youtube",
    "title_reserve",
]
