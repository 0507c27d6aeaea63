"""Page/cursor model, region scoping and drawing primitives."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from pagewright.config import LINE_HEIGHT, ORPHAN_LINES
from pagewright.log import get_logger

from .contracts import (
    Bookmark,
    Box,
    Color,
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
from .measure import Font, TextMetrics, measure_and_wrap, measure_lines

logger = get_logger(__name__)

ALIGNMENTS = ("left", "center", "right")

# Float slack for "does it fit" comparisons; rows of equal height must tile exactly.
_EPSILON = 1e-6


def check_alignment(align: str) -> str:
    if align not in ALIGNMENTS:
        msg = f"unknown alignment '{align}'. Valid alignments: {', '.join(ALIGNMENTS)}."
        raise ValueError(msg)
    return align


def aligned_x(align: str, left: float, available: float, width: float) -> float:
    """Return the left edge of an item of `width` aligned inside `available`."""
    check_alignment(align)
    if align == "center":
        return left + (available - width) / 2
    if align == "right":
        return left + available - width
    return left


class PageCanvas:
    """Records drawing operations onto an unbounded sequence of pages.

    Positions passed in and out are top-down: y grows from the top edge of
    the page. The cursor always stays within the active region; only the
    root region (the page body inside the margins) ever starts new pages.
    """

    def __init__(self, *, page_width: float, page_height: float, margin: float) -> None:
        if margin < 0:
            msg = f"margin must be >= 0, got {margin}."
            raise ValueError(msg)
        if page_width - 2 * margin <= 0 or page_height - 2 * margin <= 0:
            msg = "page body inside the margins must have positive width and height."
            raise ValueError(msg)

        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.pages: list[Page] = []
        self._root = Region(margin, margin, page_width - 2 * margin, page_height - 2 * margin)
        self._regions: list[Region] = []
        self._clips: list[Rect] = []
        self._new_page_hooks: list[Callable[[PageCanvas], None]] = []
        self._y = self._root.y
        self._append_page()

    # -- pages and cursor -------------------------------------------------

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def active_region(self) -> Region:
        return self._regions[-1] if self._regions else self._root

    @property
    def in_region(self) -> bool:
        return bool(self._regions)

    @property
    def region_depth(self) -> int:
        return len(self._regions)

    @property
    def content_left(self) -> float:
        return self.active_region.x

    @property
    def content_right(self) -> float:
        return self.active_region.right

    @property
    def content_width(self) -> float:
        return self.active_region.width

    @property
    def top(self) -> float:
        return self.active_region.y

    @property
    def bottom(self) -> float:
        return self.active_region.bottom

    @property
    def body_height(self) -> float:
        return self._root.height

    @property
    def cursor_y(self) -> float:
        return self._y

    @cursor_y.setter
    def cursor_y(self, value: float) -> None:
        self._y = min(max(value, self.top), self.bottom)

    @property
    def remaining(self) -> float:
        return self.bottom - self._y

    def move_y(self, delta: float) -> None:
        self.cursor_y = self._y + delta

    def on_new_page(self, hook: Callable[[PageCanvas], None]) -> None:
        """Run hook for the current page and for every page added later.

        Hooks draw at explicit positions; the cursor is reset afterwards.
        """
        self._new_page_hooks.append(hook)
        saved_y = self._y
        hook(self)
        self._y = saved_y

    def add_page(self) -> Page:
        if self._regions or self._clips:
            msg = "cannot start a new page while a region or clip scope is active."
            raise LayoutError(msg)
        return self._append_page()

    def _append_page(self) -> Page:
        page = Page(number=len(self.pages) + 1, width=self.page_width, height=self.page_height)
        self.pages.append(page)
        self._y = self._root.y
        logger.debug("started page %d", page.number)
        for hook in self._new_page_hooks:
            hook(self)
        self._y = self._root.y
        return page

    def ensure_block(self, min_height: float, *, keep_together: bool = True) -> bool:
        """Reserve room for a layout unit; return True when a page was added.

        Inside a region this never paginates. With keep_together=False the
        caller splits its own content, so a page is only started when no room
        is left at all.
        """
        if min_height < 0:
            msg = f"min_height must be >= 0, got {min_height}."
            raise LayoutError(msg)
        if self._regions:
            return False
        if self._y + min_height <= self.bottom + _EPSILON:
            return False
        if not keep_together and self.bottom - self._y > _EPSILON:
            return False
        self.add_page()
        return True

    # -- scopes -------------------------------------------------------------

    @contextmanager
    def region(self, x: float, y: float, width: float, height: float) -> Iterator[Region]:
        """Push a sub-frame with the cursor at its top; restore on exit."""
        if width <= 0:
            msg = f"region width must be positive, got {width}."
            raise LayoutError(msg)
        if height < 0:
            msg = f"region height must be >= 0, got {height}."
            raise LayoutError(msg)

        frame = Region(x, y, width, height)
        saved_y = self._y
        self._regions.append(frame)
        self._y = y
        try:
            yield frame
        finally:
            self._regions.pop()
            self._y = saved_y

    @contextmanager
    def clip(self, x: float, y: float, width: float, height: float) -> Iterator[Rect]:
        """Discard drawing outside the rectangle until the scope exits."""
        if width <= 0 or height <= 0:
            msg = f"clip rectangle must have positive size, got {width}x{height}."
            raise LayoutError(msg)

        rect = self.page_rect(x, y, width, height)
        if self._clips:
            # An empty overlap leaves a zero-area clip that rejects everything.
            overlap = rect.intersection(self._clips[-1])
            rect = overlap or Rect(rect.left, rect.bottom, rect.left, rect.bottom)
        self._clips.append(rect)
        try:
            yield rect
        finally:
            self._clips.pop()

    # -- coordinate conversion ---------------------------------------------

    def to_page_y(self, y: float) -> float:
        return self.page_height - y

    def page_rect(self, x: float, y: float, width: float, height: float) -> Rect:
        """Convert a top-down box into page space."""
        return Rect(
            left=x,
            bottom=self.page_height - (y + height),
            right=x + width,
            top=self.page_height - y,
        )

    def _emit(self, operation: PageOperation) -> bool:
        clip = self._clips[-1] if self._clips else None
        if clip is not None:
            if operation.bounds.intersection(clip) is None:
                return False
            operation = replace(operation, clip=clip)
        self.page.operations.append(operation)
        return True

    # -- primitives -----------------------------------------------------------

    def draw_text(
        self,
        text: str,
        *,
        font: Font,
        size: float,
        color: Color,
        align: str = "left",
        x: float | None = None,
        y: float | None = None,
        max_width: float | None = None,
        line_height: float = LINE_HEIGHT,
        spacing_before: float = 0.0,
        spacing_after: float = 0.0,
        ensure_space: bool = True,
        keep_together: bool = True,
        advance_cursor: bool = True,
        wrap: bool = True,
    ) -> TextMetrics:
        """Wrap and draw text; an explicit y draws in place without touching the cursor.

        With wrap=False the text is drawn line for line as given, keeping its
        whitespace; callers pre-break lines to fit.
        """
        left = self.content_left if x is None else x
        width = self.content_right - left if max_width is None else max_width
        if width <= 0:
            msg = f"text width must be positive, got {width}."
            raise LayoutError(msg)
        check_alignment(align)

        if wrap:
            metrics = measure_and_wrap(text, font, size, width, line_height)
        else:
            metrics = measure_lines(text, font, size, line_height)

        if y is not None:
            line_top = y + spacing_before
            for line in metrics.lines:
                self._draw_line(line, left, line_top, width, font, size, color, align)
                line_top += metrics.line_advance
            return metrics

        if ensure_space:
            if keep_together:
                self.ensure_block(spacing_before + metrics.height + spacing_after)
            else:
                leading = min(metrics.line_count, ORPHAN_LINES) * metrics.line_advance
                self.ensure_block(spacing_before + leading)

        start = self._y
        self.move_y(spacing_before)
        for line in metrics.lines:
            if ensure_space and not keep_together:
                self.ensure_block(metrics.line_advance)
            self._draw_line(line, left, self._y, width, font, size, color, align)
            self.move_y(metrics.line_advance)
        self.move_y(spacing_after)

        if not advance_cursor:
            self._y = start
        return metrics

    def _draw_line(
        self,
        line: str,
        left: float,
        top: float,
        width: float,
        font: Font,
        size: float,
        color: Color,
        align: str,
    ) -> None:
        if not line:
            return
        line_width = font.width(line, size)
        self._emit(
            TextRun(
                x=aligned_x(align, left, width, line_width),
                y=self.to_page_y(top + size),
                text=line,
                font_name=font.name,
                size=size,
                color=color,
                width=line_width,
            )
        )

    def draw_box(
        self,
        width: float,
        height: float,
        *,
        x: float | None = None,
        y: float | None = None,
        fill: Color | None = None,
        stroke: Color | None = None,
        stroke_width: float = 1.0,
        radius: float = 0.0,
        ensure_space: bool = True,
        advance_cursor: bool = True,
    ) -> Rect:
        if width <= 0 or height < 0:
            msg = f"box must have positive width and non-negative height, got {width}x{height}."
            raise LayoutError(msg)

        left = self.content_left if x is None else x
        if y is None:
            if ensure_space:
                self.ensure_block(height)
            top = self._y
        else:
            top = y

        rect = self.page_rect(left, top, width, height)
        self._emit(
            Box(
                rect=rect,
                fill=fill,
                stroke=stroke,
                stroke_width=stroke_width if stroke is not None else 0.0,
                radius=radius,
            )
        )
        if y is None and advance_cursor:
            self.move_y(height)
        return rect

    def draw_rule(
        self,
        *,
        color: Color,
        length: float | None = None,
        x: float | None = None,
        y: float | None = None,
        vertical: bool = False,
        thickness: float = 1.0,
        dash: tuple[float, ...] | None = None,
        spacing_before: float = 0.0,
        spacing_after: float = 0.0,
        ensure_space: bool = True,
        advance_cursor: bool = True,
    ) -> None:
        left = self.content_left if x is None else x
        start_top = self._y if y is None else y
        if vertical:
            extent = length if length is not None else self.bottom - start_top - spacing_before
            consumed = spacing_before + extent + spacing_after
        else:
            extent = length if length is not None else self.content_right - left
            consumed = spacing_before + thickness + spacing_after
        if extent <= 0:
            msg = f"rule length must be positive, got {extent}."
            raise LayoutError(msg)

        if y is None and ensure_space and self.ensure_block(consumed):
            start_top = self._y
        top = start_top + spacing_before

        if vertical:
            rule = Rule(
                x1=left,
                y1=self.to_page_y(top),
                x2=left,
                y2=self.to_page_y(top + extent),
                color=color,
                thickness=thickness,
                dash=dash,
            )
        else:
            middle = self.to_page_y(top + thickness / 2)
            rule = Rule(
                x1=left,
                y1=middle,
                x2=left + extent,
                y2=middle,
                color=color,
                thickness=thickness,
                dash=dash,
            )
        self._emit(rule)
        if y is None and advance_cursor:
            self.move_y(consumed)

    def fit_image(
        self,
        image: RasterImage,
        *,
        width: float | None = None,
        height: float | None = None,
        max_width: float | None = None,
        max_height: float | None = None,
    ) -> tuple[float, float]:
        """Return the drawn size: aspect preserved, shrunk to the limits."""
        limit_w = self.content_width if max_width is None else max_width
        limit_h = self.body_height if max_height is None else max_height
        if width is None and height is None:
            width = min(image.natural_width, limit_w)
            height = width / image.aspect
        elif width is None:
            width = height * image.aspect
        elif height is None:
            height = width / image.aspect
        if width <= 0 or height <= 0:
            msg = f"image size must be positive, got {width}x{height}."
            raise LayoutError(msg)

        scale = min(1.0, limit_w / width, limit_h / height)
        return width * scale, height * scale

    def draw_image(
        self,
        image: RasterImage,
        *,
        width: float | None = None,
        height: float | None = None,
        x: float | None = None,
        y: float | None = None,
        align: str = "left",
        max_width: float | None = None,
        max_height: float | None = None,
        ensure_space: bool = True,
        advance_cursor: bool = True,
    ) -> Rect:
        """Draw an image aligned against the active region."""
        draw_w, draw_h = self.fit_image(
            image, width=width, height=height, max_width=max_width, max_height=max_height
        )
        left = aligned_x(align, self.content_left, self.content_width, draw_w) if x is None else x

        if y is None:
            if ensure_space:
                self.ensure_block(draw_h)
            top = self._y
        else:
            top = y

        rect = self.page_rect(left, top, draw_w, draw_h)
        self._emit(Picture(rect=rect, image=image))
        if y is None and advance_cursor:
            self.move_y(draw_h)
        return rect

    def add_link(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        url: str | None = None,
        destination: str | None = None,
    ) -> None:
        if (url is None) == (destination is None):
            msg = "a link needs exactly one of url or destination."
            raise ValueError(msg)
        self._emit(Link(rect=self.page_rect(x, y, width, height), url=url, destination=destination))

    def add_bookmark(self, key: str, title: str, *, level: int = 0) -> None:
        """Mark the cursor position as an outline destination."""
        self.page.bookmarks.append(
            Bookmark(key=key, title=title, level=level, y=self.to_page_y(self._y))
        )
