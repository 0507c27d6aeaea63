"""Configuration constants for document layout."""

from reportlab.lib import colors

# A4 in PDF points.
PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89

# Layout
MARGIN = 40
LINE_HEIGHT = 1.4
TITLE_LINE_HEIGHT = 1.2
ORPHAN_LINES = 2

# File output
DEFAULT_OUTPUT_FILENAME = "{stem}.pdf"
STANDALONE_HEADING = "Additional Documentation"


class FontSizes:
    """Font sizes in points per text role."""

    H1 = 24
    H2 = 16
    H3 = 14
    BODY = 11
    ALTERNATIVE = 10
    LIST = 11
    TABLE = 11
    MESSAGE_BOX = 11
    CODE = 10
    CODE_LABEL = 10
    CAPTION = 10
    FOOTER = 8


class Spacing:
    """Vertical gaps in points."""

    SMALL = 5
    MEDIUM = 10
    LARGE = 16
    TITLE_TOP = 4
    TITLE_BOTTOM = 10
    TEXT_BOTTOM = 4
    LIST_BOTTOM = 10
    LIST_ITEM_GAP = 4
    TABLE_BOTTOM = 12
    MESSAGE_BOX_BOTTOM = 12
    DIVIDER_BOTTOM = 20
    IMAGE_BOTTOM = 12
    CODE_BOTTOM = 10


class Theme:
    """Color and font choices for rendering."""

    TEXT = colors.HexColor("#374151")
    TEXT_MUTED = colors.HexColor("#9CA3AF")
    DIVIDER = colors.HexColor("#A8A29E")
    BORDER = colors.HexColor("#A8A29E")
    LINK = colors.HexColor("#25678A")

    TITLE_H1 = colors.HexColor("#57534E")
    TITLE_H2 = colors.HexColor("#1F2937")
    TITLE_H3 = colors.HexColor("#374151")
    TITLE_UNDERLINE = colors.HexColor("#D1D5DB")

    CODE_BACKGROUND = colors.HexColor("#F8F9FA")
    CODE_BORDER = colors.HexColor("#E9ECEF")
    CODE_LABEL = colors.HexColor("#6B7280")

    TABLE_HEADER = colors.HexColor("#696661")
    TABLE_CORNER = colors.HexColor("#4A4745")
    TABLE_HEADER_TEXT = colors.white

    SLIDER = colors.HexColor("#FFFFFF")

    FONT_REGULAR = "Helvetica"
    FONT_ITALIC = "Helvetica-Oblique"
    FONT_BOLD = "Helvetica-Bold"
    FONT_MONO = "Courier"


# Fill, stroke and text colors per message box kind.
MESSAGE_BOX_PALETTES = {
    "info": (
        colors.Color(0.878, 0.949, 1),
        colors.Color(0.761, 0.863, 0.976),
        colors.Color(0.031, 0.188, 0.388),
    ),
    "warning": (
        colors.Color(1, 0.973, 0.863),
        colors.Color(0.992, 0.925, 0.682),
        colors.Color(0.322, 0.255, 0.051),
    ),
    "error": (
        colors.Color(0.992, 0.871, 0.871),
        colors.Color(0.937, 0.631, 0.631),
        colors.Color(0.451, 0.051, 0.051),
    ),
    "success": (
        colors.Color(0.863, 0.945, 0.882),
        colors.Color(0.678, 0.855, 0.737),
        colors.Color(0.031, 0.251, 0.118),
    ),
    "neutral": (
        colors.Color(0.961, 0.961, 0.961),
        colors.Color(0.827, 0.827, 0.827),
        colors.Color(0.106, 0.122, 0.137),
    ),
}

QUOTE_FILL = colors.Color(0.939, 0.927, 0.92)
