"""Tests for text measurement and wrapping."""

from __future__ import annotations

import unittest

from pagewright.layout import Font, measure_and_wrap, measure_lines, split_token, wrap_text

HELVETICA = Font("Helvetica")
COURIER = Font("Courier")


class WrapTextTests(unittest.TestCase):
    def test_explicit_newlines_and_blank_lines_are_kept(self) -> None:
        self.assertEqual(wrap_text("first\n\nthird", HELVETICA, 10, 300), ["first", "", "third"])

    def test_carriage_returns_are_normalized(self) -> None:
        self.assertEqual(wrap_text("a\r\nb\rc", HELVETICA, 10, 300), ["a", "b", "c"])

    def test_greedy_packing_respects_max_width(self) -> None:
        text = "the quick brown fox jumps over the lazy dog " * 6
        lines = wrap_text(text, HELVETICA, 11, 120)

        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(HELVETICA.width(line, 11), 120)
        self.assertEqual(" ".join(lines).split(), text.split())

    def test_packing_is_greedy(self) -> None:
        lines = wrap_text("aa bb cc dd", COURIER, 10, COURIER.width("aa bb", 10))
        self.assertEqual(lines, ["aa bb", "cc dd"])

    def test_long_token_is_split_at_character_level(self) -> None:
        token = "x" * 120
        lines = wrap_text(f"start {token} end", HELVETICA, 10, 80)

        self.assertEqual(lines[0], "start")
        self.assertEqual("".join(line for line in lines[1:-1]) + lines[-1].split()[0], token)
        for line in lines:
            self.assertLessEqual(HELVETICA.width(line, 10), 80)

    def test_rewrapping_a_wrapped_line_leaves_it_unchanged(self) -> None:
        text = "wrap these words then " + "z" * 90 + " and keep going with a few more words"
        lines = wrap_text(text, HELVETICA, 10, 90)

        self.assertGreater(len(lines), 3)
        for line in lines:
            with self.subTest(line=line):
                self.assertEqual(wrap_text(line, HELVETICA, 10, 90), [line])

    def test_non_positive_width_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "max_width must be positive"):
            wrap_text("text", HELVETICA, 10, 0)


class SplitTokenTests(unittest.TestCase):
    def test_chunks_reassemble_and_fit(self) -> None:
        token = "abcdefghijklmnopqrstuvwxyz" * 4
        chunks = split_token(token, HELVETICA, 12, 60)

        self.assertEqual("".join(chunks), token)
        for chunk in chunks:
            self.assertLessEqual(HELVETICA.width(chunk, 12), 60)

    def test_chunks_are_longest_fitting_prefixes(self) -> None:
        chunks = split_token("a" * 25, COURIER, 10, COURIER.width("a" * 10, 10))
        self.assertEqual([len(chunk) for chunk in chunks], [10, 10, 5])

    def test_glyph_wider_than_limit_is_emitted_alone(self) -> None:
        self.assertEqual(split_token("WWW", HELVETICA, 20, 1), ["W", "W", "W"])


class MeasureTests(unittest.TestCase):
    def test_height_is_line_count_times_advance(self) -> None:
        metrics = measure_and_wrap("one\ntwo\nthree", HELVETICA, 10, 200, 1.5)

        self.assertEqual(metrics.line_count, 3)
        self.assertAlmostEqual(metrics.line_advance, 15)
        self.assertAlmostEqual(metrics.height, 45)
        self.assertAlmostEqual(metrics.widest, HELVETICA.width("three", 10))

    def test_uses_real_glyph_widths(self) -> None:
        self.assertGreater(HELVETICA.width("WWWW", 10), HELVETICA.width("iiii", 10))

    def test_measure_lines_keeps_indentation(self) -> None:
        metrics = measure_lines("def f():\n    return 1", COURIER, 10, 1.3)
        self.assertEqual(metrics.lines, ("def f():", "    return 1"))
        self.assertAlmostEqual(metrics.height, 26)


if __name__ == "__main__":
    unittest.main()
