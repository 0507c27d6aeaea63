"""Page-space value types shared by the canvas and the serializer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

Color = Any


class LayoutError(RuntimeError):
    """A renderer broke a canvas contract (bad region, unbalanced scope, ...)."""


class ClipUnsupportedError(LayoutError):
    """The drawing backend cannot honor a clip rectangle."""


@dataclass(frozen=True)
class Rect:
    """Simple rectangle bounds in page units (origin bottom-left)."""

    left: float
    bottom: float
    right: float
    top: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    def intersection(self, other: Rect) -> Rect | None:
        """Return the overlap of both rects, or None when they do not touch."""
        left = max(self.left, other.left)
        bottom = max(self.bottom, other.bottom)
        right = min(self.right, other.right)
        top = min(self.top, other.top)
        if right <= left or top <= bottom:
            return None
        return Rect(left=left, bottom=bottom, right=right, top=top)


@dataclass(frozen=True)
class Region:
    """Top-down frame: origin at (x, y) measured from the page's top-left."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Decoded raster with its natural pixel size."""

    key: str
    data: bytes
    width_px: int
    height_px: int
    dpi: float = 72.0

    @property
    def aspect(self) -> float:
        return self.width_px / self.height_px

    @property
    def natural_width(self) -> float:
        return self.width_px * 72.0 / self.dpi

    @property
    def natural_height(self) -> float:
        return self.height_px * 72.0 / self.dpi


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    font_name: str
    size: float
    color: Color
    width: float
    clip: Rect | None = None

    @property
    def bounds(self) -> Rect:
        # Baseline sits at y; descenders stay within a quarter of the size.
        return Rect(self.x, self.y - self.size * 0.25, self.x + self.width, self.y + self.size)


@dataclass(frozen=True)
class Box:
    rect: Rect
    fill: Color | None = None
    stroke: Color | None = None
    stroke_width: float = 1.0
    radius: float = 0.0
    clip: Rect | None = None

    @property
    def bounds(self) -> Rect:
        return self.rect


@dataclass(frozen=True)
class Rule:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color
    thickness: float = 1.0
    dash: tuple[float, ...] | None = None
    clip: Rect | None = None

    @property
    def bounds(self) -> Rect:
        pad = self.thickness / 2
        return Rect(
            min(self.x1, self.x2) - pad,
            min(self.y1, self.y2) - pad,
            max(self.x1, self.x2) + pad,
            max(self.y1, self.y2) + pad,
        )


@dataclass(frozen=True)
class Picture:
    rect: Rect
    image: RasterImage
    clip: Rect | None = None

    @property
    def bounds(self) -> Rect:
        return self.rect


@dataclass(frozen=True)
class Link:
    rect: Rect
    url: str | None = None
    destination: str | None = None
    clip: Rect | None = None

    @property
    def bounds(self) -> Rect:
        return self.rect


PageOperation = Union[TextRun, Box, Rule, Picture, Link]


@dataclass(frozen=True)
class Bookmark:
    key: str
    title: str
    level: int
    y: float


@dataclass
class Page:
    """One finished (or in-progress) page of recorded operations."""

    number: int
    width: float
    height: float
    operations: list[PageOperation] = field(default_factory=list)
    bookmarks: list[Bookmark] = field(default_factory=list)

    def texts(self) -> list[str]:
        return [op.text for op in self.operations if isinstance(op, TextRun)]
