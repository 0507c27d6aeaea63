"""Render context shared by every block renderer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .assets import AssetResolver, load_image
from .layout import Font, PageCanvas, RasterImage
from .raster import RasterCache


@dataclass(frozen=True)
class FontSet:
    regular: Font
    italic: Font
    bold: Font
    mono: Font

    @classmethod
    def from_theme(cls, theme: type) -> FontSet:
        return cls(
            regular=Font(theme.FONT_REGULAR),
            italic=Font(theme.FONT_ITALIC),
            bold=Font(theme.FONT_BOLD),
            mono=Font(theme.FONT_MONO),
        )


@dataclass(frozen=True)
class RenderContext:
    """Everything one document render needs; never shared between renders."""

    canvas: PageCanvas
    fonts: FontSet
    theme: type
    rasters: RasterCache
    assets: AssetResolver = field(default_factory=AssetResolver)
    icons: Mapping[str, RasterImage] = field(default_factory=dict)
    trail: list[str] = field(default_factory=list)

    def position(self) -> str:
        """Tree position of the block being rendered, for diagnostics."""
        return " > ".join(self.trail) or "document"

    def icon(self, key: str) -> RasterImage | None:
        return self.icons.get(key)

    def load_image(self, src: str) -> RasterImage:
        return load_image(self.assets, self.rasters, src)
