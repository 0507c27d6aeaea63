"""Drawing primitives, the ReportLab adapter and page serialization."""

from __future__ import annotations

import io
from collections.abc import Sequence
from typing import Any, Protocol

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .layout import Box, ClipUnsupportedError, Link, Page, PageOperation, Picture, Rule, TextRun
from .log import get_logger

logger = get_logger(__name__)


class DrawingPrimitives(Protocol):
    """Backend drawing calls the serializer replays finished pages through."""

    def set_page_size(self, width: float, height: float) -> None: ...
    def set_fill_color(self, color: Any) -> None: ...
    def set_stroke_color(self, color: Any) -> None: ...
    def set_line_width(self, width: float) -> None: ...
    def set_dash(self, pattern: Sequence[float]) -> None: ...
    def set_font(self, font_name: str, size: float) -> None: ...
    def draw_string(self, x: float, y: float, text: str) -> None: ...
    def line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...
    def rect(
        self, x: float, y: float, width: float, height: float, *, fill: int = 0, stroke: int = 1
    ) -> None: ...
    def round_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        *,
        fill: int = 0,
        stroke: int = 1,
    ) -> None: ...
    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None: ...
    def clip_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def link_url(self, url: str, rect: tuple[float, float, float, float]) -> None: ...
    def link_rect(self, destination: str, rect: tuple[float, float, float, float]) -> None: ...
    def bookmark_page(self, key: str, *, top: float | None = None) -> None: ...
    def add_outline_entry(self, title: str, key: str, *, level: int) -> None: ...
    def save_state(self) -> None: ...
    def restore_state(self) -> None: ...
    def set_title(self, title: str) -> None: ...
    def show_page(self) -> None: ...
    def save(self) -> None: ...


class ReportLabPrimitives:
    """ReportLab-backed implementation of DrawingPrimitives."""

    def __init__(self, target: canvas.Canvas) -> None:
        self._target = target

    def set_page_size(self, width: float, height: float) -> None:
        self._target.setPageSize((width, height))

    def set_fill_color(self, color: Any) -> None:
        self._target.setFillColor(color)

    def set_stroke_color(self, color: Any) -> None:
        self._target.setStrokeColor(color)

    def set_line_width(self, width: float) -> None:
        self._target.setLineWidth(width)

    def set_dash(self, pattern: Sequence[float]) -> None:
        self._target.setDash(list(pattern))

    def set_font(self, font_name: str, size: float) -> None:
        self._target.setFont(font_name, size)

    def draw_string(self, x: float, y: float, text: str) -> None:
        self._target.drawString(x, y, text)

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._target.line(x1, y1, x2, y2)

    def rect(
        self, x: float, y: float, width: float, height: float, *, fill: int = 0, stroke: int = 1
    ) -> None:
        self._target.rect(x, y, width, height, fill=fill, stroke=stroke)

    def round_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        radius: float,
        *,
        fill: int = 0,
        stroke: int = 1,
    ) -> None:
        self._target.roundRect(x, y, width, height, radius, fill=fill, stroke=stroke)

    def draw_image(self, data: bytes, x: float, y: float, width: float, height: float) -> None:
        self._target.drawImage(
            ImageReader(io.BytesIO(data)), x, y, width=width, height=height, mask="auto"
        )

    def clip_rect(self, x: float, y: float, width: float, height: float) -> None:
        path = self._target.beginPath()
        path.rect(x, y, width, height)
        self._target.clipPath(path, stroke=0, fill=0)

    def link_url(self, url: str, rect: tuple[float, float, float, float]) -> None:
        self._target.linkURL(url, rect, relative=0, thickness=0)

    def link_rect(self, destination: str, rect: tuple[float, float, float, float]) -> None:
        self._target.linkRect("", destination, rect, thickness=0)

    def bookmark_page(self, key: str, *, top: float | None = None) -> None:
        if top is None:
            self._target.bookmarkPage(key)
        else:
            self._target.bookmarkPage(key, fit="XYZ", left=0, top=top)

    def add_outline_entry(self, title: str, key: str, *, level: int) -> None:
        self._target.addOutlineEntry(title, key, level=level)

    def save_state(self) -> None:
        self._target.saveState()

    def restore_state(self) -> None:
        self._target.restoreState()

    def set_title(self, title: str) -> None:
        self._target.setTitle(title)

    def show_page(self) -> None:
        self._target.showPage()

    def save(self) -> None:
        self._target.save()


def create_reportlab_primitives(
    output_path: str,
    *,
    pagesize: tuple[float, float],
) -> ReportLabPrimitives:
    """Create a ReportLab-backed primitives renderer."""
    return ReportLabPrimitives(canvas.Canvas(output_path, pagesize=pagesize))


def _rect_tuple(op: Box | Link | Picture) -> tuple[float, float, float, float]:
    return (op.rect.left, op.rect.bottom, op.rect.right, op.rect.top)


def _draw(pdf: DrawingPrimitives, op: PageOperation) -> None:
    if isinstance(op, TextRun):
        pdf.set_fill_color(op.color)
        pdf.set_font(op.font_name, op.size)
        pdf.draw_string(op.x, op.y, op.text)
    elif isinstance(op, Box):
        fill = int(op.fill is not None)
        stroke = int(op.stroke is not None and op.stroke_width > 0)
        if not fill and not stroke:
            return
        if fill:
            pdf.set_fill_color(op.fill)
        if stroke:
            pdf.set_stroke_color(op.stroke)
            pdf.set_line_width(op.stroke_width)
        rect = op.rect
        if op.radius > 0:
            pdf.round_rect(
                rect.left, rect.bottom, rect.width, rect.height, op.radius, fill=fill, stroke=stroke
            )
        else:
            pdf.rect(rect.left, rect.bottom, rect.width, rect.height, fill=fill, stroke=stroke)
    elif isinstance(op, Rule):
        pdf.save_state()
        pdf.set_stroke_color(op.color)
        pdf.set_line_width(op.thickness)
        if op.dash:
            pdf.set_dash(op.dash)
        pdf.line(op.x1, op.y1, op.x2, op.y2)
        pdf.restore_state()
    elif isinstance(op, Picture):
        rect = op.rect
        pdf.draw_image(op.image.data, rect.left, rect.bottom, rect.width, rect.height)
    elif isinstance(op, Link):
        if op.url is not None:
            pdf.link_url(op.url, _rect_tuple(op))
        else:
            pdf.link_rect(op.destination, _rect_tuple(op))


def replay_operation(pdf: DrawingPrimitives, op: PageOperation) -> None:
    """Draw one recorded operation, honoring its clip rectangle."""
    if op.clip is None:
        _draw(pdf, op)
        return
    clip = op.clip
    pdf.save_state()
    pdf.clip_rect(clip.left, clip.bottom, clip.width, clip.height)
    _draw(pdf, op)
    pdf.restore_state()


def write_pages(pages: Sequence[Page], pdf: DrawingPrimitives, *, title: str = "") -> None:
    """Replay finished pages onto a backend, one backend page per canvas page.

    Raises ClipUnsupportedError before anything is drawn when a clipped
    operation exists and the backend has no clip_rect.
    """
    needs_clip = any(op.clip is not None for page in pages for op in page.operations)
    if needs_clip and not callable(getattr(pdf, "clip_rect", None)):
        msg = f"{type(pdf).__name__} cannot clip; clipped drawing would leak outside its bounds."
        raise ClipUnsupportedError(msg)

    if title:
        pdf.set_title(title)
    for page in pages:
        pdf.set_page_size(page.width, page.height)
        for op in page.operations:
            replay_operation(pdf, op)
        for bookmark in page.bookmarks:
            pdf.bookmark_page(bookmark.key, top=bookmark.y)
            pdf.add_outline_entry(bookmark.title, bookmark.key, level=bookmark.level)
        pdf.show_page()
    logger.debug("wrote %d pages", len(pages))
