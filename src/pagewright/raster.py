"""Content-keyed raster cache plus chart and math rasterization."""

from __future__ import annotations

import hashlib
import io
import json
import math
import re
from collections.abc import Callable
from typing import Any

import matplotlib

matplotlib.use("Agg")

from matplotlib import colors as mpl_colors  # noqa: E402
from matplotlib import mathtext  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.font_manager import FontProperties  # noqa: E402
from PIL import Image  # noqa: E402

from .layout import RasterImage  # noqa: E402
from .log import get_logger  # noqa: E402
from .model import ChartBlock  # noqa: E402

logger = get_logger(__name__)

CHART_TYPES = ("bar", "line", "scatter", "bubble", "pie", "doughnut", "radar", "polarArea")
CHART_PIXEL_RATIO = 2
MATH_DPI = 288

_PALETTE = ("#36A2EB", "#FF6384", "#FF9F40", "#FFCD56", "#4BC0C0", "#9966FF", "#C9CBCF")
_CSS_RGB = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)",
    re.IGNORECASE,
)


class RasterError(Exception):
    """Chart or math rasterization failed."""


class RasterCache:
    """Append-only map from a content key to a rendered raster.

    Safe to share between sequential renders; entries never change once stored.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RasterImage] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_or_create(self, key: str, factory: Callable[[], RasterImage]) -> RasterImage:
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        image = factory()
        self._entries[key] = image
        logger.debug("cached raster %s (%dx%d)", key[:24], image.width_px, image.height_px)
        return image


def _digest(payload: Any) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def normalize_chart_type(chart_type: str) -> str:
    return chart_type if chart_type in CHART_TYPES else "bar"


def chart_cache_key(chart: ChartBlock, width_px: int, height_px: int) -> str:
    """Hash the fields that change the picture, not their serialized order."""
    payload = {
        "type": normalize_chart_type(chart.chart_type),
        "title": chart.title,
        "labels": list(chart.labels),
        "datasets": [
            {
                "label": dataset.label,
                "data": list(dataset.data),
                "background": dataset.background_color,
                "border": dataset.border_color,
            }
            for dataset in chart.datasets
        ],
        "size": [width_px, height_px],
    }
    return f"chart:{_digest(payload)}"


def css_color(value: str | None, index: int) -> Any:
    """Translate a CSS color (hex, name, rgb(), rgba()) for matplotlib."""
    fallback = _PALETTE[index % len(_PALETTE)]
    if not value:
        return fallback
    match = _CSS_RGB.fullmatch(value.strip())
    if match:
        red, green, blue = (min(255.0, float(part)) / 255 for part in match.group(1, 2, 3))
        alpha = min(1.0, float(match.group(4))) if match.group(4) else 1.0
        return (red, green, blue, alpha)
    if mpl_colors.is_color_like(value):
        return value
    return fallback


def _category_ticks(ax: Any, labels: tuple[str, ...]) -> None:
    ax.set_xticks(list(range(len(labels))))
    ax.set_xticklabels(labels)


def _plot_bar(ax: Any, chart: ChartBlock) -> None:
    width = 0.8 / len(chart.datasets)
    for index, dataset in enumerate(chart.datasets):
        positions = [slot - 0.4 + width * (index + 0.5) for slot in range(len(dataset.data))]
        ax.bar(
            positions,
            dataset.data,
            width=width,
            label=dataset.label or None,
            color=css_color(dataset.background_color, index),
            edgecolor=css_color(dataset.border_color, index),
        )
    _category_ticks(ax, chart.labels)


def _plot_line(ax: Any, chart: ChartBlock) -> None:
    for index, dataset in enumerate(chart.datasets):
        ax.plot(
            list(range(len(dataset.data))),
            dataset.data,
            marker="o",
            label=dataset.label or None,
            color=css_color(dataset.border_color or dataset.background_color, index),
        )
    _category_ticks(ax, chart.labels)


def _plot_scatter(ax: Any, chart: ChartBlock, *, bubbles: bool = False) -> None:
    for index, dataset in enumerate(chart.datasets):
        sizes = [max(20.0, abs(value) * 12) for value in dataset.data] if bubbles else None
        ax.scatter(
            list(range(len(dataset.data))),
            dataset.data,
            s=sizes,
            alpha=0.6 if bubbles else 1.0,
            label=dataset.label or None,
            color=css_color(dataset.background_color, index),
        )
    _category_ticks(ax, chart.labels)


def _plot_pie(ax: Any, chart: ChartBlock, *, hole: bool = False) -> None:
    values = [max(0.0, value) for value in chart.datasets[0].data]
    if not any(values):
        msg = "pie chart has no positive values."
        raise RasterError(msg)
    labels = [chart.labels[i] if i < len(chart.labels) else "" for i in range(len(values))]
    ax.pie(
        values,
        labels=labels,
        colors=[css_color(None, index) for index in range(len(values))],
        wedgeprops={"width": 0.45} if hole else None,
    )
    ax.set_aspect("equal")


def _angles(count: int) -> list[float]:
    return [2 * math.pi * index / count for index in range(count)]


def _plot_radar(ax: Any, chart: ChartBlock) -> None:
    count = max(len(dataset.data) for dataset in chart.datasets)
    angles = _angles(count)
    for index, dataset in enumerate(chart.datasets):
        values = list(dataset.data) + [0.0] * (count - len(dataset.data))
        color = css_color(dataset.border_color or dataset.background_color, index)
        ax.plot(angles + angles[:1], values + values[:1], color=color, label=dataset.label or None)
        ax.fill(angles + angles[:1], values + values[:1], color=color, alpha=0.2)
    ax.set_xticks(angles)
    ax.set_xticklabels([chart.labels[i] if i < len(chart.labels) else "" for i in range(count)])


def _plot_polar_area(ax: Any, chart: ChartBlock) -> None:
    values = list(chart.datasets[0].data)
    if not values:
        msg = "polar area chart has no values in its first dataset."
        raise RasterError(msg)
    angles = _angles(len(values))
    ax.bar(
        angles,
        values,
        width=2 * math.pi / len(values),
        alpha=0.6,
        color=[css_color(None, index) for index in range(len(values))],
    )
    ax.set_xticks(angles)
    ax.set_xticklabels([chart.labels[i] if i < len(chart.labels) else "" for i in range(len(values))])


def render_chart_png(chart: ChartBlock, width_px: int, height_px: int, *, dpi: int = 144) -> bytes:
    """Draw the chart with matplotlib and return PNG bytes of exactly the given size."""
    if not chart.datasets or not any(dataset.data for dataset in chart.datasets):
        msg = "chart has no data."
        raise RasterError(msg)

    kind = normalize_chart_type(chart.chart_type)
    figure = Figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
    ax = figure.add_subplot(projection="polar" if kind in ("radar", "polarArea") else None)

    if kind == "line":
        _plot_line(ax, chart)
    elif kind in ("scatter", "bubble"):
        _plot_scatter(ax, chart, bubbles=(kind == "bubble"))
    elif kind in ("pie", "doughnut"):
        _plot_pie(ax, chart, hole=(kind == "doughnut"))
    elif kind == "radar":
        _plot_radar(ax, chart)
    elif kind == "polarArea":
        _plot_polar_area(ax, chart)
    else:
        _plot_bar(ax, chart)

    if chart.title:
        ax.set_title(chart.title)
    if kind not in ("pie", "doughnut", "polarArea") and any(d.label for d in chart.datasets):
        ax.legend(fontsize="small")
    figure.tight_layout()

    buffer = io.BytesIO()
    figure.savefig(buffer, format="png", dpi=dpi, facecolor="white")
    return buffer.getvalue()


def rasterize_chart(
    cache: RasterCache,
    chart: ChartBlock,
    width: float,
    height: float,
) -> RasterImage:
    """Return the cached raster for a chart drawn at width x height points."""
    width_px = round(width * CHART_PIXEL_RATIO)
    height_px = round(height * CHART_PIXEL_RATIO)
    key = chart_cache_key(chart, width_px, height_px)

    def build() -> RasterImage:
        try:
            data = render_chart_png(chart, width_px, height_px)
        except (ValueError, TypeError, RuntimeError, ArithmeticError, IndexError) as exc:
            msg = f"chart rendering failed: {exc}"
            raise RasterError(msg) from exc
        return RasterImage(
            key=key,
            data=data,
            width_px=width_px,
            height_px=height_px,
            dpi=72.0 * CHART_PIXEL_RATIO,
        )

    return cache.get_or_create(key, build)


def render_math_png(expression: str, *, size: float, color: str, dpi: int = MATH_DPI) -> bytes:
    buffer = io.BytesIO()
    mathtext.math_to_image(
        f"${expression}$",
        buffer,
        prop=FontProperties(size=size),
        dpi=dpi,
        format="png",
        color=color,
    )
    return buffer.getvalue()


def rasterize_math(
    cache: RasterCache,
    expression: str,
    *,
    size: float = 14,
    color: str = "#374151",
    dpi: int = MATH_DPI,
) -> RasterImage:
    """Typeset a LaTeX expression with mathtext; natural size is in points."""
    key = f"math:{_digest([expression, size, color, dpi])}"

    def build() -> RasterImage:
        try:
            data = render_math_png(expression, size=size, color=color, dpi=dpi)
            with Image.open(io.BytesIO(data)) as image:
                width_px, height_px = image.size
        except (ValueError, RuntimeError, OSError) as exc:
            msg = f"math rendering failed for '{expression}': {exc}"
            raise RasterError(msg) from exc
        return RasterImage(key=key, data=data, width_px=width_px, height_px=height_px, dpi=dpi)

    return cache.get_or_create(key, build)
