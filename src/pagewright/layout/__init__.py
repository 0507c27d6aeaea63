"""Layout core: measurement, page/cursor model and drawing primitives."""

from .canvas import ALIGNMENTS, PageCanvas, aligned_x, check_alignment
from .contracts import (
    Bookmark,
    Box,
    ClipUnsupportedError,
    LayoutError,
    Link,
    Page,
    PageOperation,
    Picture,
    RasterImage,
    Rect,
    Region,
    Rule,
    TextRun,
)
from .measure import Font, TextMetrics, measure_and_wrap, measure_lines, split_token, wrap_text

__all__ = [
    "ALIGNMENTS",
    "Bookmark",
    "Box",
    "ClipUnsupportedError",
    "Font",
    "LayoutError",
    "Link",
    "Page",
    "PageCanvas",
    "PageOperation",
    "Picture",
    "RasterImage",
    "Rect",
    "Region",
    "Rule",
    "TextMetrics",
    "TextRun",
    "aligned_x",
    "check_alignment",
    "measure_and_wrap",
    "measure_lines",
    "split_token",
    "wrap_text",
]
