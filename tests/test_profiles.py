"""Tests for page size and margin profile resolution."""

from __future__ import annotations

import unittest

from reportlab.lib.pagesizes import LETTER

from pagewright.config import MARGIN, PAGE_HEIGHT, PAGE_WIDTH
from pagewright.profiles import (
    DEFAULT_PAGE_PROFILE,
    evaluate_page_profile_fit,
    resolve_fitted_page_profile,
    resolve_page_profile,
)


class PageProfileTests(unittest.TestCase):
    def test_default_profile_is_a4(self) -> None:
        self.assertEqual(DEFAULT_PAGE_PROFILE.page_width, PAGE_WIDTH)
        self.assertEqual(DEFAULT_PAGE_PROFILE.page_height, PAGE_HEIGHT)
        self.assertEqual(DEFAULT_PAGE_PROFILE.margin, MARGIN)
        self.assertAlmostEqual(DEFAULT_PAGE_PROFILE.content_width, PAGE_WIDTH - 2 * MARGIN)

    def test_letter_and_margin_override(self) -> None:
        profile = resolve_page_profile("letter", margin=54)
        self.assertEqual(profile.pagesize, LETTER)
        self.assertEqual(profile.margin, 54)

    def test_resolve_profile_rejects_unknown_names(self) -> None:
        with self.assertRaisesRegex(
            ValueError, "unknown page size 'b3'. Valid page sizes: a4, a5, letter"
        ):
            resolve_page_profile("b3")

    def test_negative_margin_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "margin must be >= 0"):
            resolve_page_profile(margin=-1)

    def test_fit_evaluation_flags_narrow_body(self) -> None:
        issues = evaluate_page_profile_fit(resolve_page_profile("a5", margin=120))
        self.assertTrue(any("content width" in issue for issue in issues))

    def test_fit_evaluation_flags_margins_that_eat_the_page(self) -> None:
        issues = evaluate_page_profile_fit(resolve_page_profile(margin=400))
        self.assertEqual(issues, ("page body inside the margins is non-positive",))

    def test_fitted_resolution_rejects_non_fitting_margin(self) -> None:
        with self.assertRaisesRegex(ValueError, "page size 'a4' with margin 250 does not fit"):
            resolve_fitted_page_profile("a4", margin=250)
        self.assertEqual(resolve_fitted_page_profile("a5").margin, 30)
