"""CLI for rendering a documentation tree to PDF."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_OUTPUT_FILENAME
from .log import get_logger, set_log_level
from .profiles import DEFAULT_PAGE_SIZE, PAGE_PROFILES
from .rendering import generate_pdf, load_tree
from .theme_profiles import available_theme_profiles, resolve_theme

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a documentation tree JSON file to PDF.")
    parser.add_argument("input", type=Path, help="Document tree JSON file.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output PDF path. Default: <input stem>.pdf next to the input.",
    )
    parser.add_argument(
        "--page-size",
        choices=sorted(PAGE_PROFILES),
        default=DEFAULT_PAGE_SIZE,
        help="Page size profile.",
    )
    parser.add_argument(
        "--margin",
        type=float,
        default=None,
        help="Page margin in points. Default is profile-specific.",
    )
    parser.add_argument(
        "--theme-profile",
        choices=available_theme_profiles(),
        default="default",
        help="Built-in theme profile name.",
    )
    parser.add_argument(
        "--theme-file",
        type=Path,
        default=None,
        help="JSON file with theme overrides.",
    )
    parser.add_argument(
        "--assets-root",
        type=Path,
        default=None,
        help="Directory image and media paths resolve against. Default: the input's directory.",
    )
    parser.add_argument(
        "--no-toc",
        action="store_true",
        help="Leave the table of contents off the cover page.",
    )
    parser.add_argument(
        "--no-page-numbers",
        action="store_true",
        help="Do not print page numbers in the footer.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    set_log_level(args.log_level)

    input_path: Path = args.input
    output_path = args.output or input_path.with_name(
        DEFAULT_OUTPUT_FILENAME.format(stem=input_path.stem)
    )
    assets_root = args.assets_root or input_path.resolve().parent

    try:
        theme = resolve_theme(profile=args.theme_profile, theme_file=args.theme_file)
        tree = load_tree(input_path)
        destination = generate_pdf(
            tree,
            output_path,
            page_size=args.page_size,
            margin=args.margin,
            theme=theme,
            assets_root=assets_root,
            include_toc=not args.no_toc,
            page_numbers=not args.no_page_numbers,
        )
    except (ValueError, OSError) as exc:
        logger.debug("generation failed", exc_info=True)
        parser.exit(status=2, message=f"error: {exc}\n")

    print(f"Generated PDF at: {destination}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
