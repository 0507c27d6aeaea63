"""Page size and margin profiles for document rendering."""

from __future__ import annotations

from dataclasses import dataclass, replace

from reportlab.lib.pagesizes import A5, LETTER

from .config import MARGIN, PAGE_HEIGHT, PAGE_WIDTH


@dataclass(frozen=True)
class PageProfile:
    """Physical page configuration: size and uniform margin in points."""

    name: str
    page_width: float
    page_height: float
    margin: float = MARGIN
    min_content_width: float = 200
    min_body_height: float = 200

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def body_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def pagesize(self) -> tuple[float, float]:
        return (self.page_width, self.page_height)


PAGE_PROFILES = {
    "a4": PageProfile(name="A4", page_width=PAGE_WIDTH, page_height=PAGE_HEIGHT),
    "letter": PageProfile(name="US Letter", page_width=LETTER[0], page_height=LETTER[1]),
    "a5": PageProfile(name="A5", page_width=A5[0], page_height=A5[1], margin=30),
}

DEFAULT_PAGE_SIZE = "a4"


def resolve_page_profile(
    name: str = DEFAULT_PAGE_SIZE, *, margin: float | None = None
) -> PageProfile:
    """Resolve a built-in page size name, optionally overriding its margin."""
    if name not in PAGE_PROFILES:
        msg = f"unknown page size '{name}'. Valid page sizes: {', '.join(sorted(PAGE_PROFILES))}."
        raise ValueError(msg)

    profile = PAGE_PROFILES[name]
    if margin is not None:
        if margin < 0:
            msg = f"margin must be >= 0, got {margin}."
            raise ValueError(msg)
        profile = replace(profile, margin=margin)
    return profile


def evaluate_page_profile_fit(profile: PageProfile) -> tuple[str, ...]:
    """Return fit issues for the profile; empty result means the profile is usable."""
    issues: list[str] = []
    if profile.content_width <= 0 or profile.body_height <= 0:
        issues.append("page body inside the margins is non-positive")
        return tuple(issues)
    if profile.content_width < profile.min_content_width:
        issues.append(f"content width {profile.content_width:.1f} < {profile.min_content_width}")
    if profile.body_height < profile.min_body_height:
        issues.append(f"body height {profile.body_height:.1f} < {profile.min_body_height}")
    return tuple(issues)


def resolve_fitted_page_profile(
    name: str = DEFAULT_PAGE_SIZE, *, margin: float | None = None
) -> PageProfile:
    """Resolve a profile and reject margins that leave too little room to lay out content."""
    profile = resolve_page_profile(name, margin=margin)
    issues = evaluate_page_profile_fit(profile)
    if issues:
        msg = f"page size '{name}' with margin {profile.margin} does not fit: {'; '.join(issues)}"
        raise ValueError(msg)
    return profile


DEFAULT_PAGE_PROFILE = resolve_fitted_page_profile()
