"""Table renderer: equal-width columns, rows kept together."""

from __future__ import annotations

from contextlib import nullcontext

from pagewright.config import FontSizes, Spacing
from pagewright.context import RenderContext
from pagewright.layout import measure_and_wrap
from pagewright.model import TableBlock, TableCell

from .common import compact_line_height

TABLE_KINDS = ("vertical", "horizontal", "matrix")
PADDING_X = 8
PADDING_Y = 6
GRID_WIDTH = 0.5
MIN_ROW_HEIGHT = max(22, FontSizes.TABLE + 12)

_EMPTY_CELL = TableCell(content="")


def normalize_rows(block: TableBlock) -> list[tuple[TableCell, ...]]:
    """Pad ragged rows with empty cells up to the widest row."""
    columns = max((len(row) for row in block.rows), default=0)
    return [row + (_EMPTY_CELL,) * (columns - len(row)) for row in block.rows]


def is_header_cell(kind: str, row: int, column: int, cell: TableCell) -> bool:
    if cell.is_header:
        return True
    if kind == "horizontal":
        return column == 0
    if kind == "matrix":
        return row == 0 or column == 0
    return row == 0


def row_height(ctx: RenderContext, row: tuple[TableCell, ...], text_width: float) -> float:
    size = FontSizes.TABLE
    line_height = compact_line_height(size)
    tallest = 0.0
    for cell in row:
        # Bold is wider than regular, so measuring bold never under-reserves.
        metrics = measure_and_wrap(cell.content.strip(), ctx.fonts.bold, size, text_width, line_height)
        tallest = max(tallest, metrics.height)
    return max(MIN_ROW_HEIGHT, tallest + 2 * PADDING_Y)


def _cell_fill(ctx: RenderContext, kind: str, row: int, column: int, header: bool):
    if header and kind == "matrix" and row == 0 and column == 0:
        return ctx.theme.TABLE_CORNER
    if header:
        return ctx.theme.TABLE_HEADER
    return None


def _draw_row(
    ctx: RenderContext,
    kind: str,
    row_index: int,
    row: tuple[TableCell, ...],
    *,
    top: float,
    height: float,
    column_width: float,
    text_width: float,
) -> None:
    canvas = ctx.canvas
    theme = ctx.theme
    for column_index, cell in enumerate(row):
        left = canvas.content_left + column_index * column_width
        header = is_header_cell(kind, row_index, column_index, cell)
        canvas.draw_box(
            column_width,
            height,
            x=left,
            y=top,
            fill=_cell_fill(ctx, kind, row_index, column_index, header),
            stroke=theme.BORDER,
            stroke_width=GRID_WIDTH,
        )
        canvas.draw_text(
            cell.content.strip(),
            font=ctx.fonts.bold if header else ctx.fonts.regular,
            size=FontSizes.TABLE,
            color=theme.TABLE_HEADER_TEXT if header else theme.TEXT,
            x=left + PADDING_X,
            y=top + PADDING_Y,
            max_width=text_width,
            line_height=compact_line_height(FontSizes.TABLE),
        )


def render_table(ctx: RenderContext, block: TableBlock) -> None:
    rows = normalize_rows(block)
    if not rows or not rows[0]:
        return

    canvas = ctx.canvas
    kind = block.kind if block.kind in TABLE_KINDS else "vertical"
    column_width = canvas.content_width / len(rows[0])
    text_width = max(1.0, column_width - 2 * PADDING_X)

    for row_index, row in enumerate(rows):
        height = row_height(ctx, row, text_width)
        # A row taller than the page body starts a fresh page and is cut at the bottom margin.
        canvas.ensure_block(min(height, canvas.body_height))
        top = canvas.cursor_y
        if top + height > canvas.bottom:
            scope = canvas.clip(canvas.content_left, top, canvas.content_width, canvas.bottom - top)
        else:
            scope = nullcontext()
        with scope:
            _draw_row(
                ctx,
                kind,
                row_index,
                row,
                top=top,
                height=height,
                column_width=column_width,
                text_width=text_width,
            )
        canvas.move_y(height)
    canvas.move_y(Spacing.TABLE_BOTTOM)
