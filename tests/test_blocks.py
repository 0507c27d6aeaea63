"""Tests for text, table, box and code block renderers."""

from __future__ import annotations

import unittest
from unittest import mock

from pagewright.blocks import (
    layout_code_lines,
    render_block,
    render_blocks,
    render_code,
    render_divider,
    render_list,
    render_message_box,
    render_table,
    render_text,
    render_title,
    render_youtube,
)
from pagewright.blocks.text import TITLE_BOTTOM_SPACING, strip_emphasis
from pagewright.config import TITLE_LINE_HEIGHT, Spacing
from pagewright.context import RenderContext
from pagewright.layout import Box, Font, LayoutError, Link, Picture, Rule, TextRun
from pagewright.model import (
    AudioBlock,
    CodeBlock,
    CodeSection,
    DividerBlock,
    ListBlock,
    MessageBoxBlock,
    TableBlock,
    TableCell,
    TextBlock,
    TitleBlock,
    UnknownBlock,
    YoutubeBlock,
)
from pagewright.rendering import create_context


def _texts(ctx: RenderContext) -> list[str]:
    return [text for page in ctx.canvas.pages for text in page.texts()]


def _runs(ctx: RenderContext, page: int = 0) -> list[TextRun]:
    return [op for op in ctx.canvas.pages[page].operations if isinstance(op, TextRun)]


class TitleAndTextTests(unittest.TestCase):
    def test_title_on_empty_page_sits_below_top_spacing(self) -> None:
        ctx = create_context()
        canvas = ctx.canvas
        top = canvas.top
        render_title(ctx, TitleBlock(text="Setup Guide", level=1))

        run = _runs(ctx)[0]
        self.assertEqual(run.text, "Setup Guide")
        self.assertEqual(run.size, 24)
        self.assertAlmostEqual(run.y, canvas.to_page_y(top + Spacing.TITLE_TOP + 24))
        title_height = 24 * TITLE_LINE_HEIGHT
        self.assertAlmostEqual(
            canvas.cursor_y, top + Spacing.TITLE_TOP + title_height + TITLE_BOTTOM_SPACING["medium"]
        )

    def test_underlined_title_draws_rule(self) -> None:
        ctx = create_context()
        render_title(ctx, TitleBlock(text="Chapter", level=2, underline=True))
        rules = [op for op in ctx.canvas.page.operations if isinstance(op, Rule)]
        self.assertEqual(len(rules), 1)
        self.assertEqual(rules[0].thickness, 2)

    def test_title_near_page_bottom_moves_to_next_page(self) -> None:
        ctx = create_context()
        ctx.canvas.cursor_y = ctx.canvas.bottom - 40
        render_title(ctx, TitleBlock(text="Late heading", level=2))
        self.assertEqual(ctx.canvas.page_count, 2)
        self.assertEqual(ctx.canvas.pages[1].texts(), ["Late heading"])

    def test_empty_title_renders_nothing(self) -> None:
        ctx = create_context()
        render_title(ctx, TitleBlock(text="   "))
        self.assertEqual(ctx.canvas.page.operations, [])
        self.assertEqual(ctx.canvas.cursor_y, ctx.canvas.top)

    def test_text_strips_emphasis_markers(self) -> None:
        self.assertEqual(strip_emphasis("a **bold** and *soft* word"), "a bold and soft word")
        ctx = create_context()
        render_text(ctx, TextBlock(text="Use **care** here"))
        self.assertEqual(_texts(ctx), ["Use care here"])

    def test_long_paragraph_flows_onto_next_page(self) -> None:
        ctx = create_context()
        ctx.canvas.cursor_y = ctx.canvas.bottom - 60
        render_text(ctx, TextBlock(text="\n".join(f"line {n}" for n in range(10))))

        self.assertEqual(ctx.canvas.page_count, 2)
        self.assertTrue(ctx.canvas.pages[0].texts())
        self.assertEqual(_texts(ctx), [f"line {n}" for n in range(10)])


class ListTests(unittest.TestCase):
    def test_ordered_markers_start_at_start_number(self) -> None:
        ctx = create_context()
        render_list(ctx, ListBlock(items=("alpha", "beta"), ordered=True, start_number=3))
        self.assertEqual(_texts(ctx), ["3.", "alpha", "4.", "beta"])

    def test_wrapped_lines_hang_under_item_text(self) -> None:
        ctx = create_context()
        long_item = " ".join(["wrapping"] * 40)
        render_list(ctx, ListBlock(items=(long_item, "short")))

        runs = _runs(ctx)
        bullets = [run for run in runs if run.text == "•"]
        bodies = [run for run in runs if run.text != "•"]
        self.assertEqual(len(bullets), 2)
        self.assertGreater(len(bodies), 2)
        self.assertEqual({run.x for run in bodies}, {bodies[0].x})
        font = Font("Helvetica")
        self.assertAlmostEqual(bodies[0].x - ctx.canvas.content_left, font.width("•", 11) + 6)

    def test_item_taller_than_a_page_breaks_between_lines(self) -> None:
        ctx = create_context()
        canvas = ctx.canvas
        words = [f"word{n}" for n in range(1200)]
        render_list(ctx, ListBlock(items=(" ".join(words),)))

        self.assertGreater(canvas.page_count, 1)
        bodies = []
        for page in canvas.pages:
            runs = [op for op in page.operations if isinstance(op, TextRun) and op.text != "•"]
            self.assertEqual(len({run.y for run in runs}), len(runs))
            for run in runs:
                self.assertGreaterEqual(run.y, canvas.margin)
            bodies.extend(run.text for run in runs)
        self.assertEqual(" ".join(bodies).split(), words)

    def test_empty_items_are_skipped(self) -> None:
        ctx = create_context()
        render_list(ctx, ListBlock(items=("", "  ")))
        self.assertEqual(ctx.canvas.page.operations, [])


class TableTests(unittest.TestCase):
    def _table(self, body_rows: int) -> TableBlock:
        header = tuple(TableCell(content=name) for name in ("Name", "Type", "Notes"))
        rows = [header] + [
            tuple(TableCell(content=f"r{index}c{column}") for column in range(3))
            for index in range(body_rows)
        ]
        return TableBlock(rows=tuple(rows))

    def test_rows_are_never_split_across_pages(self) -> None:
        ctx = create_context()
        canvas = ctx.canvas
        canvas.cursor_y = canvas.bottom - 200
        render_table(ctx, self._table(49))

        # 50 rows of 25 units: 8 fit the remaining 200, 30 fill page two, 12 land on page three.
        self.assertEqual(canvas.page_count, 3)
        cells = [
            op for page in canvas.pages for op in page.operations if isinstance(op, Box)
        ]
        self.assertEqual(len(cells), 150)
        for page in canvas.pages:
            for op in page.operations:
                if isinstance(op, Box):
                    self.assertAlmostEqual(op.rect.height, 25)
                    self.assertGreaterEqual(op.rect.bottom, canvas.margin - 1e-6)
                    self.assertLessEqual(op.rect.top, canvas.page_height - canvas.margin + 1e-6)
        per_page = [
            sum(isinstance(op, Box) for op in page.operations) // 3 for page in canvas.pages
        ]
        self.assertEqual(per_page, [8, 30, 12])

    def test_row_taller_than_page_is_clipped_to_body(self) -> None:
        ctx = create_context()
        canvas = ctx.canvas
        tall = "\n".join(f"line {n}" for n in range(80))
        render_table(ctx, TableBlock(rows=((TableCell("short"), TableCell(tall)),)))

        self.assertEqual(canvas.page_count, 1)
        operations = canvas.page.operations
        self.assertTrue(operations)
        for op in operations:
            self.assertIsNotNone(op.clip)
            self.assertAlmostEqual(op.clip.bottom, canvas.margin)
        texts = canvas.page.texts()
        self.assertIn("line 0", texts)
        self.assertNotIn("line 79", texts)

    def test_ragged_rows_are_padded(self) -> None:
        ctx = create_context()
        block = TableBlock(
            rows=((TableCell("a"), TableCell("b"), TableCell("c")), (TableCell("only"),))
        )
        render_table(ctx, block)
        boxes = [op for op in ctx.canvas.page.operations if isinstance(op, Box)]
        self.assertEqual(len(boxes), 6)

    def test_matrix_corner_uses_corner_fill(self) -> None:
        ctx = create_context()
        block = TableBlock(
            rows=((TableCell(""), TableCell("x")), (TableCell("y"), TableCell("1"))),
            kind="matrix",
        )
        render_table(ctx, block)
        boxes = [op for op in ctx.canvas.page.operations if isinstance(op, Box)]
        self.assertEqual(boxes[0].fill, ctx.theme.TABLE_CORNER)
        self.assertEqual(boxes[1].fill, ctx.theme.TABLE_HEADER)
        self.assertEqual(boxes[2].fill, ctx.theme.TABLE_HEADER)
        self.assertIsNone(boxes[3].fill)


class BoxTests(unittest.TestCase):
    def test_message_box_draws_box_icon_and_text(self) -> None:
        ctx = create_context()
        render_message_box(ctx, MessageBoxBlock(text="Heads up", kind="warning"))
        kinds = [type(op).__name__ for op in ctx.canvas.page.operations]
        self.assertEqual(kinds, ["Box", "Picture", "TextRun"])
        self.assertEqual(_texts(ctx), ["Heads up"])

    def test_message_box_without_icon(self) -> None:
        ctx = create_context()
        render_message_box(ctx, MessageBoxBlock(text="Plain", kind="neutral", show_icon=False))
        kinds = [type(op).__name__ for op in ctx.canvas.page.operations]
        self.assertEqual(kinds, ["Box", "TextRun"])

    def test_message_box_taller_than_a_page_continues_on_next_page(self) -> None:
        ctx = create_context()
        canvas = ctx.canvas
        words = [f"note{n}" for n in range(1500)]
        render_message_box(ctx, MessageBoxBlock(text=" ".join(words), kind="info"))

        self.assertGreater(canvas.page_count, 1)
        texts = []
        for page in canvas.pages:
            boxes = [op for op in page.operations if isinstance(op, Box)]
            runs = [op for op in page.operations if isinstance(op, TextRun)]
            self.assertEqual(len(boxes), 1)
            self.assertEqual(len({run.y for run in runs}), len(runs))
            self.assertGreaterEqual(boxes[0].rect.bottom, canvas.margin - 1e-6)
            for run in runs:
                self.assertGreater(run.y, boxes[0].rect.bottom)
                self.assertLess(run.y, boxes[0].rect.top)
            texts.extend(run.text for run in runs)
        self.assertEqual(" ".join(texts).split(), words)
        pictures = [op for page in canvas.pages for op in page.operations if isinstance(op, Picture)]
        self.assertEqual(len(pictures), 1)

    def test_long_quote_keeps_its_rule_on_every_page(self) -> None:
        ctx = create_context()
        render_message_box(ctx, MessageBoxBlock(text=" ".join(["quoted"] * 1500), kind="quote"))

        self.assertGreater(ctx.canvas.page_count, 1)
        for page in ctx.canvas.pages:
            fill, rule = [op for op in page.operations if isinstance(op, Box)]
            self.assertAlmostEqual(rule.rect.width, 4)
            self.assertAlmostEqual(rule.rect.height, fill.rect.height)
            self.assertGreaterEqual(fill.rect.bottom, ctx.canvas.margin - 1e-6)

    def test_quote_uses_italic_text(self) -> None:
        ctx = create_context()
        render_message_box(ctx, MessageBoxBlock(text="Wise words", kind="quote"))
        self.assertEqual(_runs(ctx)[0].font_name, "Helvetica-Oblique")

    def test_audio_notice_names_the_file(self) -> None:
        ctx = create_context()
        render_block(ctx, AudioBlock(src="/media/intro-track.mp3?v=2"))
        self.assertEqual(
            _texts(ctx),
            ["Audio player available only in browser version.", "Audio name to find: intro-track.mp3"],
        )

    def test_divider_with_label_splits_rule(self) -> None:
        ctx = create_context()
        render_divider(ctx, DividerBlock(style="dashed", label="Part two"))
        rules = [op for op in ctx.canvas.page.operations if isinstance(op, Rule)]
        self.assertEqual(len(rules), 2)
        self.assertEqual(rules[0].dash, (6, 4))
        self.assertEqual(_texts(ctx), ["Part two"])

    def test_youtube_reference_becomes_link(self) -> None:
        ctx = create_context()
        block = YoutubeBlock(video="https://www.youtube.com/watch?v=dQw4w9WgXcQ", caption="Demo")
        render_youtube(ctx, block)
        links = [op for op in ctx.canvas.page.operations if isinstance(op, Link)]
        self.assertEqual(_texts(ctx), ["Demo: https://youtu.be/dQw4w9WgXcQ"])
        self.assertEqual(links[0].url, "https://youtu.be/dQw4w9WgXcQ")


class DispatchTests(unittest.TestCase):
    def test_unknown_block_renders_warning_and_walk_continues(self) -> None:
        ctx = create_context()
        with self.assertLogs("pagewright", level="WARNING"):
            render_blocks(ctx, [UnknownBlock(kind="widget"), TextBlock(text="still here")])
        self.assertEqual(_texts(ctx), ["Unknown content type: widget", "still here"])

    def test_malformed_block_reports_reason(self) -> None:
        ctx = create_context()
        with self.assertLogs("pagewright", level="WARNING"):
            render_block(ctx, UnknownBlock(kind="table", reason="missing 'tableData' object"))
        self.assertEqual(_texts(ctx), ["Malformed table block: missing 'tableData' object."])

    def test_failing_renderer_is_downgraded_to_error_box(self) -> None:
        ctx = create_context()
        with self.assertLogs("pagewright", level="ERROR") as logs:
            render_blocks(ctx, [YoutubeBlock(video="not a video"), TextBlock(text="after")])

        self.assertEqual(_texts(ctx), ["Could not render youtube block.", "after"])
        self.assertIn("block 1 (youtube)", logs.output[0])

    def test_layout_errors_propagate(self) -> None:
        ctx = create_context()
        with mock.patch(
            "pagewright.blocks.dispatch.render_text", side_effect=LayoutError("broken scope")
        ):
            with self.assertRaises(LayoutError):
                render_block(ctx, TextBlock(text="x"))

    def test_trail_is_cleared_after_blocks(self) -> None:
        ctx = create_context()
        ctx.trail.append("Guide")
        render_blocks(ctx, [TextBlock(text="x")])
        self.assertEqual(ctx.trail, ["Guide"])


class CodeTests(unittest.TestCase):
    def test_long_lines_wrap_without_numbers_on_continuations(self) -> None:
        font = Font("Courier")
        source = "short\n" + "y" * 50 + "\n\tindented"
        lines = layout_code_lines(source, font, 10, font.width("y" * 20, 10))

        self.assertEqual([line.number for line in lines], [1, 2, None, None, 3])
        self.assertEqual(lines[-1].text, "  indented")

    def test_line_numbers_render_in_gutter(self) -> None:
        ctx = create_context()
        block = CodeBlock(
            sections=(CodeSection(content="a = 1\nb = 2\n", language="python"),),
            show_line_numbers=True,
        )
        render_code(ctx, block)

        texts = _texts(ctx)
        self.assertEqual(texts[0], "Python")
        self.assertIn("1", texts)
        self.assertIn("2", texts)
        self.assertIn("a = 1", texts)
        numbers = [run for run in _runs(ctx) if run.text == "1"]
        code = [run for run in _runs(ctx) if run.text == "a = 1"]
        self.assertLess(numbers[0].x, code[0].x)

    def test_filename_overrides_language_label(self) -> None:
        ctx = create_context()
        render_code(ctx, CodeBlock(sections=(CodeSection(content="x", filename="setup.py"),)))
        self.assertEqual(_texts(ctx)[0], "setup.py")

    def test_oversized_section_is_split_into_continued_chunks(self) -> None:
        ctx = create_context()
        content = "\n".join(f"line {n}" for n in range(200))
        render_code(ctx, CodeBlock(sections=(CodeSection(content=content, language="bash"),)))

        texts = _texts(ctx)
        self.assertGreater(ctx.canvas.page_count, 2)
        self.assertEqual(texts.count("Bash"), 1)
        self.assertGreaterEqual(texts.count("Bash (continued)"), 2)
        self.assertEqual(
            [text for text in texts if text.startswith("line ")], [f"line {n}" for n in range(200)]
        )

    def test_empty_code_block_renders_nothing(self) -> None:
        ctx = create_context()
        render_code(ctx, CodeBlock(sections=(CodeSection(content="\n\n"),)))
        self.assertEqual(ctx.canvas.page.operations, [])


if __name__ == "__main__":
    unittest.main()
