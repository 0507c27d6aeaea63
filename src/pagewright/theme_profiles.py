"""Theme profile schema and resolver."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics


@dataclass(frozen=True)
class ThemeProfile:
    """Serializable theme profile values."""

    text: str = "#374151"
    text_muted: str = "#9CA3AF"
    divider: str = "#A8A29E"
    border: str = "#A8A29E"
    link: str = "#25678A"
    title_h1: str = "#57534E"
    title_h2: str = "#1F2937"
    title_h3: str = "#374151"
    title_underline: str = "#D1D5DB"
    code_background: str = "#F8F9FA"
    code_border: str = "#E9ECEF"
    code_label: str = "#6B7280"
    table_header: str = "#696661"
    table_corner: str = "#4A4745"
    table_header_text: str = "#FFFFFF"
    slider: str = "#FFFFFF"
    font_regular: str = "Helvetica"
    font_italic: str = "Helvetica-Oblique"
    font_bold: str = "Helvetica-Bold"
    font_mono: str = "Courier"

    def to_theme_class(self) -> type:
        """Return a runtime Theme-like class with parsed color objects."""
        attributes: dict[str, Any] = {}
        for key, value in vars(self).items():
            parse = _parse_font if key.startswith("font_") else _parse_color
            attributes[key.upper()] = parse(value, key=key)
        return type("Theme", (), attributes)


_BUILTIN_THEME_PROFILES: dict[str, ThemeProfile] = {
    "default": ThemeProfile(),
    "slate": ThemeProfile(
        text="#1E293B",
        text_muted="#64748B",
        divider="#CBD5E1",
        border="#94A3B8",
        link="#2563EB",
        title_h1="#0F172A",
        title_h2="#1E293B",
        title_h3="#334155",
        title_underline="#CBD5E1",
        code_background="#F1F5F9",
        code_border="#E2E8F0",
        code_label="#475569",
        table_header="#334155",
        table_corner="#1E293B",
    ),
    "print": ThemeProfile(
        text="#000000",
        text_muted="#555555",
        divider="#777777",
        border="#777777",
        link="#000000",
        title_h1="#000000",
        title_h2="#000000",
        title_h3="#000000",
        title_underline="#999999",
        code_background="#FFFFFF",
        code_border="#999999",
        code_label="#333333",
        table_header="#DDDDDD",
        table_corner="#BBBBBB",
        table_header_text="#000000",
        slider="#000000",
        font_regular="Times-Roman",
        font_italic="Times-Italic",
        font_bold="Times-Bold",
    ),
}


def available_theme_profiles() -> tuple[str, ...]:
    """Return built-in theme profile names."""
    return tuple(sorted(_BUILTIN_THEME_PROFILES))


def resolve_theme(
    *,
    profile: str = "default",
    theme_file: str | Path | None = None,
) -> type:
    """Resolve one built-in theme plus optional file overrides."""
    if profile not in _BUILTIN_THEME_PROFILES:
        valid = ", ".join(available_theme_profiles())
        msg = f"unknown theme profile '{profile}'. Valid profiles: {valid}."
        raise ValueError(msg)

    resolved_profile = _BUILTIN_THEME_PROFILES[profile]
    if theme_file is not None:
        resolved_profile = replace(resolved_profile, **_load_theme_file(Path(theme_file)))
    return resolved_profile.to_theme_class()


def _load_theme_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"theme file '{path}' does not exist."
        raise ValueError(msg)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"theme file '{path}' is not valid JSON: {exc}."
        raise ValueError(msg) from exc

    if not isinstance(payload, dict):
        msg = "theme file content must be a JSON object."
        raise ValueError(msg)

    allowed = set(ThemeProfile.__dataclass_fields__)
    unknown = sorted(key for key in payload if key not in allowed)
    if unknown:
        msg = f"unknown theme key(s): {', '.join(unknown)}."
        raise ValueError(msg)

    return payload


def _parse_color(raw_value: str, *, key: str) -> colors.Color:
    if not isinstance(raw_value, str) or not raw_value.strip():
        msg = f"theme key '{key}' must be a non-empty color string."
        raise ValueError(msg)
    try:
        if raw_value.startswith("#"):
            return colors.HexColor(raw_value)
        return colors.toColor(raw_value)
    except Exception as exc:  # noqa: BLE001
        msg = f"invalid color value '{raw_value}' for theme key '{key}'."
        raise ValueError(msg) from exc


def _parse_font(raw_value: str, *, key: str) -> str:
    if not isinstance(raw_value, str) or not raw_value.strip():
        msg = f"theme key '{key}' must be a non-empty font name string."
        raise ValueError(msg)
    try:
        pdfmetrics.getFont(raw_value)
    except (KeyError, ValueError) as exc:
        msg = f"unknown font '{raw_value}' for theme key '{key}'."
        raise ValueError(msg) from exc
    return raw_value
