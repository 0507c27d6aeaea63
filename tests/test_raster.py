"""Tests for chart and math rasterization and the raster cache."""

from __future__ import annotations

import unittest
from unittest import mock

from pagewright.blocks import chart_size, render_block, render_chart, render_math
from pagewright.config import Spacing
from pagewright.layout import Picture
from pagewright.model import ChartBlock, ChartDataset, MathBlock
from pagewright.raster import (
    CHART_TYPES,
    RasterCache,
    RasterError,
    chart_cache_key,
    css_color,
    normalize_chart_type,
    rasterize_chart,
    rasterize_math,
)
from pagewright.rendering import create_context

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _chart(
    chart_type: str = "bar", *, data: tuple[float, ...] = (3, 1, 2), title: str = ""
) -> ChartBlock:
    return ChartBlock(
        chart_type=chart_type,
        labels=("a", "b", "c"),
        datasets=(ChartDataset(label="series", data=data, background_color="rgba(54, 162, 235, 0.5)"),),
        title=title,
    )


class ChartCacheTests(unittest.TestCase):
    def test_identical_charts_share_one_raster(self) -> None:
        cache = RasterCache()
        first = rasterize_chart(cache, _chart(), 300, 180)
        second = rasterize_chart(cache, _chart(), 300, 180)

        self.assertIs(first, second)
        self.assertEqual(cache.misses, 1)
        self.assertEqual(cache.hits, 1)
        self.assertEqual(len(cache), 1)
        self.assertIn(chart_cache_key(_chart(), 600, 360), cache)
        self.assertNotIn(chart_cache_key(_chart(), 600, 400), cache)

    def test_key_tracks_content_and_size(self) -> None:
        base = chart_cache_key(_chart(), 600, 360)
        self.assertEqual(base, chart_cache_key(_chart(), 600, 360))
        self.assertNotEqual(base, chart_cache_key(_chart(data=(3, 1, 4)), 600, 360))
        self.assertNotEqual(base, chart_cache_key(_chart(), 600, 400))
        self.assertNotEqual(base, chart_cache_key(_chart("line"), 600, 360))

    def test_every_chart_type_produces_png(self) -> None:
        cache = RasterCache()
        for chart_type in CHART_TYPES:
            with self.subTest(chart_type=chart_type):
                image = rasterize_chart(cache, _chart(chart_type), 200, 120)
                self.assertTrue(image.data.startswith(PNG_SIGNATURE))
                self.assertEqual((image.width_px, image.height_px), (400, 240))
                self.assertAlmostEqual(image.natural_width, 200)
                self.assertAlmostEqual(image.natural_height, 120)

    def test_unknown_chart_type_falls_back_to_bar(self) -> None:
        self.assertEqual(normalize_chart_type("polarArea"), "polarArea")
        self.assertEqual(normalize_chart_type("sunburst"), "bar")

    def test_css_colors_are_translated(self) -> None:
        self.assertEqual(css_color("rgba(255, 0, 0, 0.5)", 0), (1.0, 0.0, 0.0, 0.5))
        self.assertEqual(css_color("#123456", 0), "#123456")
        self.assertEqual(css_color(None, 1), "#FF6384")
        self.assertEqual(css_color("not-a-color", 0), "#36A2EB")


class ChartBlockTests(unittest.TestCase):
    def test_chart_size_respects_minimum_heights(self) -> None:
        self.assertEqual(chart_size(_chart(), 515.28), (515, 288))
        width, height = chart_size(ChartBlock("radar", (), (), scale=0.1), 515.28)
        self.assertEqual(width, 258)
        self.assertEqual(height, 220)
        self.assertEqual(chart_size(ChartBlock("bar", (), (), scale=0.1), 515.28)[1], 180)

    def test_polar_area_with_empty_first_dataset_keeps_reserved_space(self) -> None:
        chart = ChartBlock(
            "polarArea",
            ("a", "b"),
            (ChartDataset("x", ()), ChartDataset("y", (1.0, 2.0))),
        )
        ctx = create_context()
        start = ctx.canvas.cursor_y
        with self.assertLogs("pagewright", level="WARNING"):
            render_block(ctx, chart)

        _, height = chart_size(chart, ctx.canvas.content_width)
        self.assertEqual(ctx.canvas.page.texts(), ["[Chart: polarArea]"])
        self.assertAlmostEqual(ctx.canvas.cursor_y, start + height + Spacing.IMAGE_BOTTOM)

    def test_arithmetic_failure_becomes_raster_error(self) -> None:
        failure = ZeroDivisionError("float division by zero")
        with mock.patch("pagewright.raster.render_chart_png", side_effect=failure):
            with self.assertRaisesRegex(RasterError, "float division by zero"):
                rasterize_chart(RasterCache(), _chart(), 200, 120)

    def test_render_chart_draws_cached_picture(self) -> None:
        ctx = create_context()
        render_chart(ctx, _chart(title="Usage"))
        render_chart(ctx, _chart(title="Usage"))

        pictures = [op for op in ctx.canvas.page.operations if isinstance(op, Picture)]
        self.assertEqual(len(pictures), 2)
        self.assertIs(pictures[0].image, pictures[1].image)


class MathTests(unittest.TestCase):
    def test_expression_is_rasterized_once(self) -> None:
        cache = RasterCache()
        image = rasterize_math(cache, r"\frac{a}{b} + x^2")

        self.assertTrue(image.data.startswith(PNG_SIGNATURE))
        self.assertGreater(image.width_px, 0)
        self.assertIs(image, rasterize_math(cache, r"\frac{a}{b} + x^2"))

    def test_invalid_expression_raises_raster_error(self) -> None:
        with self.assertRaises(RasterError):
            rasterize_math(RasterCache(), r"\frac{a")

    def test_render_math_falls_back_to_source_text(self) -> None:
        ctx = create_context()
        with self.assertLogs("pagewright", level="WARNING"):
            render_math(ctx, MathBlock(expression=r"\frac{a"))

        self.assertEqual(ctx.canvas.page.texts(), [r"\frac{a"])

    def test_render_math_draws_picture(self) -> None:
        ctx = create_context()
        render_math(ctx, MathBlock(expression="E = mc^2"))
        self.assertIsInstance(ctx.canvas.page.operations[0], Picture)


if __name__ == "__main__":
    unittest.main()
