"""Depth-first document tree walk, cover page and table of contents."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .blocks import render_blocks, render_divider, render_title, title_reserve
from .config import STANDALONE_HEADING, FontSizes, Spacing
from .context import RenderContext
from .layout import measure_and_wrap
from .log import get_logger
from .model import Category, DividerBlock, Document, TitleBlock

logger = get_logger(__name__)

STANDALONE_KEY = "standalone"
TOC_HEADING = "Contents"
TOC_INDENT = 14
TOC_ENTRY_GAP = 3
BREADCRUMB_SEPARATOR = " > "


@dataclass(frozen=True)
class OutlineEntry:
    """One bookmark in the PDF outline; level 0 is the top."""

    title: str
    level: int
    key: str


@dataclass(frozen=True)
class WalkStep:
    entry: OutlineEntry
    node: Category | Document | None
    depth: int
    path: tuple[str, ...]


def iter_steps(
    categories: Sequence[Category], documents: Sequence[Document] = ()
) -> Iterator[WalkStep]:
    """Yield every category and document in canonical walk order.

    A category comes first, then its documents, then its children. Standalone
    documents follow all categories under a shared heading.
    """
    seen: dict[str, int] = {}

    def unique(key: str) -> str:
        count = seen.get(key, 0)
        seen[key] = count + 1
        return key if count == 0 else f"{key}~{count}"

    def visit(category: Category, depth: int, path: tuple[str, ...]) -> Iterator[WalkStep]:
        category_key = unique(f"cat:{category.id}")
        yield WalkStep(OutlineEntry(category.title, depth, category_key), category, depth, path)
        inner = (*path, category.title)
        for index, document in enumerate(category.documents, start=1):
            entry = OutlineEntry(document.title, depth + 1, unique(f"doc:{category.id}/{index}"))
            yield WalkStep(entry, document, depth + 1, inner)
        for child in category.children:
            yield from visit(child, depth + 1, inner)

    for category in categories:
        yield from visit(category, 0, ())

    if documents:
        heading = OutlineEntry(STANDALONE_HEADING, 0, unique(STANDALONE_KEY))
        yield WalkStep(heading, None, 0, ())
        for index, document in enumerate(documents, start=1):
            entry = OutlineEntry(document.title, 1, unique(f"doc:{STANDALONE_KEY}/{index}"))
            yield WalkStep(entry, document, 1, (STANDALONE_HEADING,))


def iter_outline(
    categories: Sequence[Category], documents: Sequence[Document] = ()
) -> Iterator[OutlineEntry]:
    for step in iter_steps(categories, documents):
        yield step.entry


def _heading(ctx: RenderContext, step: WalkStep, title: TitleBlock) -> None:
    """Draw a title with its bookmark on the page where the title lands."""
    ctx.canvas.ensure_block(title_reserve(ctx, title))
    ctx.canvas.add_bookmark(step.entry.key, step.entry.title, level=step.entry.level)
    render_title(ctx, title)


def _muted(ctx: RenderContext, text: str, *, size: float, spacing_after: float) -> None:
    text = text.strip()
    if text:
        ctx.canvas.draw_text(
            text,
            font=ctx.fonts.regular,
            size=size,
            color=ctx.theme.TEXT_MUTED,
            line_height=1 + 2 / size,
            spacing_after=spacing_after,
            keep_together=False,
        )


def _render_step(ctx: RenderContext, step: WalkStep) -> None:
    node = step.node
    if node is None:
        _heading(ctx, step, TitleBlock(text=step.entry.title, level=1, underline=True))
        return

    if isinstance(node, Category):
        title = TitleBlock(text=node.title, level=min(step.depth + 1, 3), underline=step.depth == 0)
        _heading(ctx, step, title)
        _muted(ctx, node.description, size=FontSizes.BODY, spacing_after=Spacing.MEDIUM)
        render_blocks(ctx, node.blocks)
        return

    _heading(ctx, step, TitleBlock(text=node.title, level=min(step.depth + 1, 3), spacing="small"))
    if step.path:
        _muted(
            ctx,
            BREADCRUMB_SEPARATOR.join(step.path),
            size=FontSizes.ALTERNATIVE,
            spacing_after=Spacing.SMALL,
        )
    _muted(ctx, node.description, size=FontSizes.BODY, spacing_after=Spacing.MEDIUM)
    render_blocks(ctx, node.blocks)


def walk(
    ctx: RenderContext,
    categories: Sequence[Category],
    documents: Sequence[Document] = (),
) -> list[OutlineEntry]:
    """Render the whole tree in canonical order and return the outline it recorded."""
    entries: list[OutlineEntry] = []
    for step in iter_steps(categories, documents):
        ctx.trail[:] = [*step.path, step.entry.title]
        try:
            _render_step(ctx, step)
        finally:
            ctx.trail.clear()
        entries.append(step.entry)
        logger.debug("rendered %s through page %d", step.entry.key, ctx.canvas.page_count)
    return entries


def render_table_of_contents(ctx: RenderContext, entries: Sequence[OutlineEntry]) -> None:
    """List outline entries, indented by level and linked to their bookmarks."""
    canvas = ctx.canvas
    render_title(ctx, TitleBlock(text=TOC_HEADING, level=2))
    size = FontSizes.BODY
    line_height = 1 + 2 / size
    for entry in entries:
        indent = TOC_INDENT * entry.level
        font = ctx.fonts.bold if entry.level == 0 else ctx.fonts.regular
        width = canvas.content_width - indent
        metrics = measure_and_wrap(entry.title, font, size, width, line_height)
        canvas.ensure_block(metrics.height + TOC_ENTRY_GAP)
        left = canvas.content_left + indent
        top = canvas.cursor_y
        canvas.draw_text(
            entry.title,
            font=font,
            size=size,
            color=ctx.theme.LINK,
            x=left,
            max_width=width,
            line_height=line_height,
            spacing_after=TOC_ENTRY_GAP,
            ensure_space=False,
        )
        canvas.add_link(left, top, metrics.widest, metrics.height, destination=entry.key)


def render_cover(
    ctx: RenderContext,
    title: str,
    *,
    version: str = "",
    entries: Sequence[OutlineEntry] = (),
) -> None:
    """Cover page: document title, optional version line, divider and contents."""
    render_title(ctx, TitleBlock(text=title, level=1))
    if version.strip():
        _muted(ctx, f"Version {version.strip()}", size=FontSizes.BODY, spacing_after=Spacing.MEDIUM)
    render_divider(ctx, DividerBlock())
    if entries:
        render_table_of_contents(ctx, entries)
