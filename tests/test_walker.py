"""Tests for the tree walk, outline, cover page and page footers."""

from __future__ import annotations

import unittest

from pagewright.config import STANDALONE_HEADING
from pagewright.layout import Link
from pagewright.model import Category, Document, DocumentTree, TextBlock, UnknownBlock
from pagewright.rendering import create_context, render_document
from pagewright.walker import OutlineEntry, iter_outline, walk


def _tree() -> DocumentTree:
    advanced = Category(
        id="advanced",
        title="Advanced",
        documents=(Document(title="Tuning", blocks=(TextBlock(text="Tune carefully."),)),),
    )
    intro = Category(
        id="intro",
        title="Intro",
        description="Start here.",
        blocks=(TextBlock(text="Welcome."),),
        documents=(Document(title="Install", blocks=(TextBlock(text="Run the installer."),)),),
        children=(advanced,),
    )
    return DocumentTree(
        title="Handbook",
        version="2.1",
        categories=(intro,),
        standalone_documents=(Document(title="FAQ", blocks=(TextBlock(text="Ask away."),)),),
    )


def _all_texts(pages) -> list[str]:
    return [text for page in pages for text in page.texts()]


class OutlineTests(unittest.TestCase):
    def test_outline_follows_canonical_order(self) -> None:
        tree = _tree()
        entries = list(iter_outline(tree.categories, tree.standalone_documents))

        self.assertEqual(
            entries,
            [
                OutlineEntry("Intro", 0, "cat:intro"),
                OutlineEntry("Install", 1, "doc:intro/1"),
                OutlineEntry("Advanced", 1, "cat:advanced"),
                OutlineEntry("Tuning", 2, "doc:advanced/1"),
                OutlineEntry(STANDALONE_HEADING, 0, "standalone"),
                OutlineEntry("FAQ", 1, "doc:standalone/1"),
            ],
        )

    def test_duplicate_ids_get_distinct_keys(self) -> None:
        categories = (Category(id="x", title="One"), Category(id="x", title="Two"))
        keys = [entry.key for entry in iter_outline(categories)]
        self.assertEqual(keys, ["cat:x", "cat:x~1"])

    def test_no_standalone_heading_without_standalone_documents(self) -> None:
        entries = list(iter_outline((Category(id="a", title="A"),)))
        self.assertEqual([entry.title for entry in entries], ["A"])


class WalkTests(unittest.TestCase):
    def test_walk_records_what_the_outline_predicts(self) -> None:
        tree = _tree()
        ctx = create_context()
        entries = walk(ctx, tree.categories, tree.standalone_documents)

        self.assertEqual(entries, list(iter_outline(tree.categories, tree.standalone_documents)))
        bookmarks = [mark for page in ctx.canvas.pages for mark in page.bookmarks]
        self.assertEqual([mark.key for mark in bookmarks], [entry.key for entry in entries])
        self.assertEqual([mark.level for mark in bookmarks], [entry.level for entry in entries])
        self.assertEqual(ctx.trail, [])

    def test_content_is_rendered_depth_first(self) -> None:
        tree = _tree()
        ctx = create_context()
        walk(ctx, tree.categories, tree.standalone_documents)

        texts = _all_texts(ctx.canvas.pages)
        order = ["Intro", "Welcome.", "Install", "Run the installer.", "Advanced", "Tuning", "FAQ"]
        positions = [texts.index(text) for text in order]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("Start here.", texts)

    def test_documents_show_breadcrumb(self) -> None:
        tree = _tree()
        ctx = create_context()
        walk(ctx, tree.categories, tree.standalone_documents)

        texts = _all_texts(ctx.canvas.pages)
        self.assertIn("Intro > Advanced", texts)
        self.assertEqual(texts[texts.index("Tuning") + 1], "Intro > Advanced")
        self.assertEqual(texts[texts.index("FAQ") + 1], STANDALONE_HEADING)

    def test_unknown_block_does_not_abort_the_walk(self) -> None:
        blocks = (UnknownBlock(kind="widget"), TextBlock(text="after"))
        document = Document(title="Mixed", blocks=blocks)
        ctx = create_context()
        with self.assertLogs("pagewright", level="WARNING"):
            walk(ctx, (Category(id="c", title="Cat", documents=(document,)),))

        texts = _all_texts(ctx.canvas.pages)
        self.assertIn("Unknown content type: widget", texts)
        self.assertEqual(texts[-1], "after")

    def test_heading_moves_with_its_bookmark(self) -> None:
        ctx = create_context()
        ctx.canvas.cursor_y = ctx.canvas.bottom - 30
        walk(ctx, (Category(id="late", title="Late"),))

        self.assertEqual(ctx.canvas.page_count, 2)
        self.assertEqual(ctx.canvas.pages[0].bookmarks, [])
        self.assertEqual(ctx.canvas.pages[1].bookmarks[0].key, "cat:late")
        self.assertEqual(ctx.canvas.pages[1].texts(), ["Late"])


class DocumentTests(unittest.TestCase):
    def test_cover_lists_contents_with_links(self) -> None:
        pages = render_document(_tree())

        cover = pages[0]
        self.assertIn("Handbook", cover.texts())
        self.assertIn("Version 2.1", cover.texts())
        self.assertIn("Contents", cover.texts())
        links = [op for op in cover.operations if isinstance(op, Link)]
        self.assertEqual(
            [link.destination for link in links],
            [entry.key for entry in iter_outline(_tree().categories, _tree().standalone_documents)],
        )
        self.assertEqual(cover.bookmarks, [])
        self.assertEqual(pages[1].bookmarks[0].key, "cat:intro")

    def test_contents_can_be_left_out(self) -> None:
        pages = render_document(_tree(), include_toc=False)
        self.assertNotIn("Contents", pages[0].texts())
        self.assertFalse(any(isinstance(op, Link) for op in pages[0].operations))

    def test_every_page_gets_a_number(self) -> None:
        long_document = Document(
            title="Long", blocks=tuple(TextBlock(text=f"Paragraph {n}") for n in range(120))
        )
        category = Category(id="c", title="C", documents=(long_document,))
        tree = DocumentTree(title="Big", categories=(category,))
        pages = render_document(tree)

        self.assertGreater(len(pages), 2)
        for number, page in enumerate(pages, start=1):
            self.assertIn(f"Page {number}", page.texts())

    def test_page_numbers_can_be_turned_off(self) -> None:
        pages = render_document(_tree(), page_numbers=False)
        self.assertFalse(any(text.startswith("Page ") for text in _all_texts(pages)))

    def test_empty_tree_is_just_a_cover(self) -> None:
        pages = render_document(DocumentTree(title="Empty"))
        self.assertEqual(len(pages), 1)
        self.assertIn("Empty", pages[0].texts())


if __name__ == "__main__":
    unittest.main()
