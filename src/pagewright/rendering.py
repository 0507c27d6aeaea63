"""Orchestration: document tree in, laid-out pages or a PDF file out."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from .assets import AssetResolver, build_icons
from .config import FontSizes, Theme
from .context import FontSet, RenderContext
from .drawing import create_reportlab_primitives, write_pages
from .layout import Page, PageCanvas
from .log import get_logger
from .model import DocumentTree, tree_from_mapping
from .profiles import DEFAULT_PAGE_PROFILE, PageProfile, resolve_fitted_page_profile
from .raster import RasterCache
from .walker import iter_outline, render_cover, walk

logger = get_logger(__name__)


def load_tree(path: str | Path) -> DocumentTree:
    """Read a loader JSON file into a DocumentTree."""
    source = Path(path)
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"input file '{source}' is not valid JSON: {exc}."
        raise ValueError(msg) from exc
    return tree_from_mapping(payload)


def create_context(
    *,
    profile: PageProfile = DEFAULT_PAGE_PROFILE,
    theme: type = Theme,
    assets_root: str | Path | None = None,
    rasters: RasterCache | None = None,
) -> RenderContext:
    """Build a fresh canvas and context for one render."""
    rasters = RasterCache() if rasters is None else rasters
    return RenderContext(
        canvas=PageCanvas(
            page_width=profile.page_width,
            page_height=profile.page_height,
            margin=profile.margin,
        ),
        fonts=FontSet.from_theme(theme),
        theme=theme,
        rasters=rasters,
        assets=AssetResolver(root=Path(assets_root) if assets_root is not None else None),
        icons=build_icons(rasters),
    )


def page_number_footer(ctx: RenderContext) -> Callable[[PageCanvas], None]:
    """Return a new-page hook that writes "Page N" centered in the bottom margin."""
    size = FontSizes.FOOTER

    def draw(canvas: PageCanvas) -> None:
        canvas.draw_text(
            f"Page {canvas.page_count}",
            font=ctx.fonts.regular,
            size=size,
            color=ctx.theme.TEXT_MUTED,
            align="center",
            y=canvas.page_height - (canvas.margin + size) / 2,
            line_height=1.0,
        )

    return draw


def render_document(
    tree: DocumentTree,
    *,
    profile: PageProfile = DEFAULT_PAGE_PROFILE,
    theme: type = Theme,
    assets_root: str | Path | None = None,
    rasters: RasterCache | None = None,
    include_toc: bool = True,
    page_numbers: bool = True,
) -> list[Page]:
    """Lay out the cover and the whole tree; return the finished pages."""
    ctx = create_context(profile=profile, theme=theme, assets_root=assets_root, rasters=rasters)
    canvas = ctx.canvas
    if page_numbers:
        canvas.on_new_page(page_number_footer(ctx))

    entries = list(iter_outline(tree.categories, tree.standalone_documents))
    render_cover(ctx, tree.title, version=tree.version, entries=entries if include_toc else ())
    if entries:
        canvas.add_page()
    walk(ctx, tree.categories, tree.standalone_documents)

    logger.info(
        "laid out %d pages (%d rasters cached, %d cache hits)",
        canvas.page_count,
        len(ctx.rasters),
        ctx.rasters.hits,
    )
    return canvas.pages


def generate_pdf(
    tree: DocumentTree,
    output_path: str | Path,
    *,
    page_size: str = "a4",
    margin: float | None = None,
    theme: type = Theme,
    assets_root: str | Path | None = None,
    include_toc: bool = True,
    page_numbers: bool = True,
) -> Path:
    """Generate a PDF for the tree and return the output path."""
    profile = resolve_fitted_page_profile(page_size, margin=margin)
    pages = render_document(
        tree,
        profile=profile,
        theme=theme,
        assets_root=assets_root,
        include_toc=include_toc,
        page_numbers=page_numbers,
    )

    destination = Path(output_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    pdf = create_reportlab_primitives(str(destination), pagesize=profile.pagesize)
    write_pages(pages, pdf, title=tree.title)
    pdf.save()
    logger.info("wrote %s", destination)
    return destination
