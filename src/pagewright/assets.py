"""Asset resolution, image decoding and icon lookup."""

from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from PIL import Image, ImageDraw, UnidentifiedImageError

from .config import MESSAGE_BOX_PALETTES
from .layout import RasterImage
from .log import get_logger
from .raster import RasterCache

logger = get_logger(__name__)

ICON_KEYS = ("info", "warning", "error", "success", "neutral")

_PASSTHROUGH_FORMATS = frozenset({"PNG", "JPEG"})
_REMOTE_SCHEMES = frozenset({"http", "https", "ftp", "data"})


class AssetError(Exception):
    """An image or media asset could not be resolved or decoded."""


@dataclass(frozen=True)
class AssetResolver:
    """Map block `src` values to files under an asset root."""

    root: Path | None = None

    def resolve(self, src: str) -> Path:
        if not src or not src.strip():
            msg = "asset reference is empty."
            raise AssetError(msg)
        if urlparse(src).scheme.lower() in _REMOTE_SCHEMES:
            msg = f"remote asset '{src}' is not fetched."
            raise AssetError(msg)

        cleaned = src.split("?", 1)[0].split("#", 1)[0]
        if self.root is None:
            path = Path(cleaned)
        else:
            root = self.root.resolve()
            path = (root / cleaned.lstrip("/")).resolve()
            if path != root and root not in path.parents:
                msg = f"asset '{src}' points outside the asset root."
                raise AssetError(msg)

        if not path.is_file():
            msg = f"asset '{src}' was not found."
            raise AssetError(msg)
        return path


def decode_image(data: bytes, *, key: str) -> RasterImage:
    """Decode image bytes; formats other than PNG/JPEG are re-encoded as PNG."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            width, height = image.size
            if image.format not in _PASSTHROUGH_FORMATS:
                buffer = io.BytesIO()
                image.convert("RGBA").save(buffer, format="PNG")
                data = buffer.getvalue()
    except (UnidentifiedImageError, OSError) as exc:
        msg = f"could not decode image: {exc}"
        raise AssetError(msg) from exc

    if width <= 0 or height <= 0:
        msg = f"image has no pixels ({width}x{height})."
        raise AssetError(msg)
    return RasterImage(key=key, data=data, width_px=width, height_px=height)


def load_image(resolver: AssetResolver, cache: RasterCache, src: str) -> RasterImage:
    """Resolve, read and decode an image, sharing decoded results by content."""
    path = resolver.resolve(src)
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"could not read asset '{src}': {exc}"
        raise AssetError(msg) from exc

    key = f"image:{hashlib.sha256(data).hexdigest()}"
    return cache.get_or_create(key, lambda: decode_image(data, key=key))


def _rgb(color) -> tuple[int, int, int]:
    return (round(color.red * 255), round(color.green * 255), round(color.blue * 255))


def _draw_icon(kind: str, size: int) -> bytes:
    _, _, accent = MESSAGE_BOX_PALETTES[kind]
    fill = _rgb(accent)
    white = (255, 255, 255, 255)
    stroke = max(2, size // 10)

    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    edge = size - 1
    middle = size / 2

    if kind == "warning":
        draw.polygon([(middle, 1), (edge, edge), (1, edge)], fill=fill)
        draw.line([(middle, size * 0.36), (middle, size * 0.66)], fill=white, width=stroke)
        dot = stroke
        draw.ellipse([middle - dot, size * 0.76, middle + dot, size * 0.76 + 2 * dot], fill=white)
    else:
        draw.ellipse([1, 1, edge, edge], fill=fill)
        if kind == "info":
            dot = stroke
            draw.ellipse([middle - dot, size * 0.22, middle + dot, size * 0.22 + 2 * dot], fill=white)
            draw.line([(middle, size * 0.42), (middle, size * 0.78)], fill=white, width=stroke)
        elif kind == "error":
            low, high = size * 0.3, size * 0.7
            draw.line([(low, low), (high, high)], fill=white, width=stroke)
            draw.line([(low, high), (high, low)], fill=white, width=stroke)
        elif kind == "success":
            draw.line(
                [(size * 0.28, size * 0.52), (size * 0.44, size * 0.68), (size * 0.74, size * 0.34)],
                fill=white,
                width=stroke,
                joint="curve",
            )
        else:
            draw.line([(size * 0.3, middle), (size * 0.7, middle)], fill=white, width=stroke)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def build_icons(cache: RasterCache, *, size: int = 64) -> dict[str, RasterImage]:
    """Return one icon per message box kind, keyed by its semantic name."""
    icons: dict[str, RasterImage] = {}
    for kind in ICON_KEYS:
        key = f"icon:{kind}:{size}"
        icons[kind] = cache.get_or_create(
            key, lambda kind=kind, key=key: decode_image(_draw_icon(kind, size), key=key)
        )
    return icons
