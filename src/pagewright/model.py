"""Content block data model and parsing from loader mappings."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class TitleBlock:
    text: str
    level: int = 1
    spacing: str = "medium"
    underline: bool = False
    alignment: str = "left"


@dataclass(frozen=True)
class TextBlock:
    text: str
    spacing: str = "medium"
    alignment: str = "left"


@dataclass(frozen=True)
class ListBlock:
    items: tuple[str, ...]
    ordered: bool = False
    start_number: int = 1


@dataclass(frozen=True)
class TableCell:
    content: str
    is_header: bool = False


@dataclass(frozen=True)
class TableBlock:
    rows: tuple[tuple[TableCell, ...], ...]
    kind: str = "vertical"


@dataclass(frozen=True)
class MessageBoxBlock:
    text: str
    kind: str = "info"
    size: str = "medium"
    show_icon: bool = True


@dataclass(frozen=True)
class DividerBlock:
    style: str = "line"
    spacing: str = ""
    label: str = ""


@dataclass(frozen=True)
class ImageRef:
    src: str
    alt: str = ""


@dataclass(frozen=True)
class ImageBlock:
    image: ImageRef
    scale: float = 1.0
    alignment: str = "center"


@dataclass(frozen=True)
class ImageCompareBlock:
    before: ImageRef
    after: ImageRef
    mode: str = "individual"
    scale: float = 1.0
    alignment: str = "center"
    slider_position: float = 50.0
    slider_color: str | None = None
    show_percentage: bool = True


@dataclass(frozen=True)
class ImageGridBlock:
    images: tuple[ImageRef, ...]
    scale: float = 1.0


@dataclass(frozen=True)
class CodeSection:
    content: str
    language: str = "plaintext"
    filename: str = ""


@dataclass(frozen=True)
class CodeBlock:
    sections: tuple[CodeSection, ...]
    show_line_numbers: bool = False


@dataclass(frozen=True)
class ChartDataset:
    label: str
    data: tuple[float, ...]
    background_color: str | None = None
    border_color: str | None = None


@dataclass(frozen=True)
class ChartBlock:
    chart_type: str
    labels: tuple[str, ...]
    datasets: tuple[ChartDataset, ...]
    title: str = ""
    scale: float = 1.0
    alignment: str = "center"


@dataclass(frozen=True)
class MathBlock:
    expression: str
    alignment: str = "center"


@dataclass(frozen=True)
class AudioBlock:
    src: str
    caption: str = ""


@dataclass(frozen=True)
class YoutubeBlock:
    video: str
    caption: str = ""
    alignment: str = "left"


@dataclass(frozen=True)
class UnknownBlock:
    """Placeholder for content that could not be parsed into a known kind."""

    kind: str
    reason: str = ""


ContentBlock = Union[
    TitleBlock,
    TextBlock,
    ListBlock,
    TableBlock,
    MessageBoxBlock,
    DividerBlock,
    ImageBlock,
    ImageCompareBlock,
    ImageGridBlock,
    CodeBlock,
    ChartBlock,
    MathBlock,
    AudioBlock,
    YoutubeBlock,
    UnknownBlock,
]

BLOCK_KINDS: dict[type, str] = {
    TitleBlock: "title",
    TextBlock: "text",
    ListBlock: "list",
    TableBlock: "table",
    MessageBoxBlock: "messageBox",
    DividerBlock: "divider",
    ImageBlock: "image",
    ImageCompareBlock: "imageCompare",
    ImageGridBlock: "imageGrid",
    CodeBlock: "code",
    ChartBlock: "chart",
    MathBlock: "math",
    AudioBlock: "audio",
    YoutubeBlock: "youtube",
}


def block_kind(block: ContentBlock) -> str:
    if isinstance(block, UnknownBlock):
        return block.kind
    return BLOCK_KINDS.get(type(block), type(block).__name__)


@dataclass(frozen=True)
class Document:
    title: str
    id: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    blocks: tuple[ContentBlock, ...] = ()


@dataclass(frozen=True)
class Category:
    id: str
    title: str
    description: str = ""
    blocks: tuple[ContentBlock, ...] = ()
    documents: tuple[Document, ...] = ()
    children: tuple[Category, ...] = ()


@dataclass(frozen=True)
class DocumentTree:
    """Parsed loader output: root categories plus standalone documents."""

    title: str
    categories: tuple[Category, ...] = ()
    standalone_documents: tuple[Document, ...] = ()
    version: str = ""


_YOUTUBE_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")
_YOUTUBE_URL = re.compile(r"(?:youtu\.be/|[?&]v=|/embed/|/shorts/)([A-Za-z0-9_-]{11})")


def extract_youtube_id(value: str) -> str | None:
    """Return the 11-character video id from an id or a YouTube URL."""
    candidate = value.strip()
    if _YOUTUBE_ID.match(candidate):
        return candidate
    match = _YOUTUBE_URL.search(candidate)
    return match.group(1) if match else None


class _MalformedBlock(Exception):
    pass


def _payload(item: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    payload = item.get(key)
    if not isinstance(payload, Mapping):
        msg = f"missing '{key}' object"
        raise _MalformedBlock(msg)
    return payload


def _text(payload: Mapping[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key, default)
    if value is None:
        return default
    if not isinstance(value, (str, int, float)):
        msg = f"'{key}' must be a string"
        raise _MalformedBlock(msg)
    return str(value)


def _number(payload: Mapping[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        msg = f"'{key}' must be a number"
        raise _MalformedBlock(msg) from exc
    if not math.isfinite(number):
        msg = f"'{key}' must be a finite number"
        raise _MalformedBlock(msg)
    return number


def _sequence(payload: Mapping[str, Any], key: str) -> Sequence[Any]:
    value = payload.get(key) or ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        msg = f"'{key}' must be a list"
        raise _MalformedBlock(msg)
    return value


def _image_ref(value: Any) -> ImageRef:
    if isinstance(value, str):
        return ImageRef(src=value)
    if not isinstance(value, Mapping) or not value.get("src"):
        msg = "image reference needs a 'src'"
        raise _MalformedBlock(msg)
    return ImageRef(src=str(value["src"]), alt=_text(value, "alt") or _text(value, "caption"))


def _parse_title(data: Mapping[str, Any]) -> TitleBlock:
    return TitleBlock(
        text=_text(data, "text"),
        level=int(_number(data, "level", 1)),
        spacing=_text(data, "spacing", "medium"),
        underline=bool(data.get("underline", False)),
        alignment=_text(data, "alignment", "left"),
    )


def _parse_text(data: Mapping[str, Any]) -> TextBlock:
    return TextBlock(
        text=_text(data, "text"),
        spacing=_text(data, "spacing", "medium"),
        alignment=_text(data, "alignment", "left"),
    )


def _parse_list(data: Mapping[str, Any]) -> ListBlock:
    return ListBlock(
        items=tuple(str(item) for item in _sequence(data, "items")),
        ordered=_text(data, "type", "ul") == "ol",
        start_number=int(_number(data, "startNumber", 1)),
    )


def _parse_table(data: Mapping[str, Any]) -> TableBlock:
    rows: list[tuple[TableCell, ...]] = []
    for raw_row in _sequence(data, "data"):
        if isinstance(raw_row, (str, bytes)) or not isinstance(raw_row, Sequence):
            msg = "table rows must be lists"
            raise _MalformedBlock(msg)
        cells = []
        for raw_cell in raw_row:
            if isinstance(raw_cell, Mapping):
                cells.append(
                    TableCell(
                        content=_text(raw_cell, "content"),
                        is_header=bool(raw_cell.get("isHeader", False)),
                    )
                )
            else:
                cells.append(TableCell(content="" if raw_cell is None else str(raw_cell)))
        rows.append(tuple(cells))
    return TableBlock(rows=tuple(rows), kind=_text(data, "type", "vertical"))


def _parse_message_box(data: Mapping[str, Any]) -> MessageBoxBlock:
    return MessageBoxBlock(
        text=_text(data, "text"),
        kind=_text(data, "type", "info"),
        size=_text(data, "size", "medium"),
        show_icon=bool(data.get("showIcon", True)),
    )


def _parse_divider(data: Mapping[str, Any]) -> DividerBlock:
    return DividerBlock(
        style=_text(data, "type", "line"),
        spacing=_text(data, "spacing"),
        label=_text(data, "text") or _text(data, "label"),
    )


def _parse_image(data: Mapping[str, Any]) -> ImageBlock:
    return ImageBlock(
        image=_image_ref(data.get("image")),
        scale=_number(data, "scale", 1.0),
        alignment=_text(data, "alignment", "center"),
    )


def _parse_image_compare(data: Mapping[str, Any]) -> ImageCompareBlock:
    return ImageCompareBlock(
        before=_image_ref(data.get("beforeImage")),
        after=_image_ref(data.get("afterImage")),
        mode=_text(data, "type", "individual"),
        scale=_number(data, "scale", 1.0),
        alignment=_text(data, "alignment", "center"),
        slider_position=_number(data, "sliderPosition", 50.0),
        slider_color=_text(data, "sliderColor") or None,
        show_percentage=bool(data.get("showPercentage", True)),
    )


def _parse_image_grid(data: Mapping[str, Any]) -> ImageGridBlock:
    return ImageGridBlock(
        images=tuple(_image_ref(image) for image in _sequence(data, "images")),
        scale=_number(data, "scale", 1.0),
    )


def _parse_code(data: Mapping[str, Any]) -> CodeBlock:
    raw_sections = _sequence(data, "sections")
    if raw_sections:
        sections = tuple(
            CodeSection(
                content=_text(section, "content"),
                language=_text(section, "language", "plaintext") or "plaintext",
                filename=_text(section, "filename"),
            )
            for section in raw_sections
            if isinstance(section, Mapping)
        )
    else:
        sections = (
            CodeSection(
                content=_text(data, "content"),
                language=_text(data, "language", "plaintext") or "plaintext",
                filename=_text(data, "name"),
            ),
        )
    return CodeBlock(sections=sections, show_line_numbers=bool(data.get("showLineNumbers", False)))


def _parse_chart(data: Mapping[str, Any]) -> ChartBlock:
    datasets = []
    for raw in _sequence(data, "datasets"):
        if not isinstance(raw, Mapping):
            msg = "chart datasets must be objects"
            raise _MalformedBlock(msg)
        try:
            values = tuple(float(value) for value in _sequence(raw, "data"))
        except (TypeError, ValueError) as exc:
            msg = "chart dataset values must be numbers"
            raise _MalformedBlock(msg) from exc
        if not all(math.isfinite(value) for value in values):
            msg = "chart dataset values must be finite"
            raise _MalformedBlock(msg)
        datasets.append(
            ChartDataset(
                label=_text(raw, "label"),
                data=values,
                background_color=_text(raw, "backgroundColor") or None,
                border_color=_text(raw, "borderColor") or None,
            )
        )
    return ChartBlock(
        chart_type=_text(data, "type", "bar") or "bar",
        labels=tuple(str(label) for label in _sequence(data, "labels")),
        datasets=tuple(datasets),
        title=_text(data, "title"),
        scale=_number(data, "scale", 1.0),
        alignment=_text(data, "alignment", "center"),
    )


def _parse_math(data: Mapping[str, Any]) -> MathBlock:
    return MathBlock(
        expression=_text(data, "expression") or _text(data, "content"),
        alignment=_text(data, "alignment", "center"),
    )


def _parse_audio(data: Mapping[str, Any]) -> AudioBlock:
    return AudioBlock(src=_text(data, "src"), caption=_text(data, "caption"))


def _parse_youtube(data: Mapping[str, Any]) -> YoutubeBlock:
    return YoutubeBlock(
        video=_text(data, "youtubeVideoId"),
        caption=_text(data, "caption"),
        alignment=_text(data, "alignment", "left"),
    )


_PARSERS = {
    "title": ("titleData", _parse_title),
    "text": ("textData", _parse_text),
    "list": ("listData", _parse_list),
    "table": ("tableData", _parse_table),
    "messageBox": ("messageBoxData", _parse_message_box),
    "divider": ("dividerData", _parse_divider),
    "image": ("imageData", _parse_image),
    "imageCompare": ("imageCompareData", _parse_image_compare),
    "imageGrid": ("imageGridData", _parse_image_grid),
    "imageCarousel": ("imageCarouselData", _parse_image_grid),
    "code": ("codeData", _parse_code),
    "chart": ("chartData", _parse_chart),
    "math": ("mathData", _parse_math),
    "audio": ("audioData", _parse_audio),
    "youtube": ("youtubeData", _parse_youtube),
}


def block_from_mapping(item: Any) -> ContentBlock:
    """Parse one content item; anything unusable becomes an UnknownBlock."""
    if not isinstance(item, Mapping):
        return UnknownBlock(kind="invalid", reason="content item is not an object")
    kind = item.get("type")
    if not isinstance(kind, str) or not kind:
        return UnknownBlock(kind="missing", reason="content item has no 'type'")
    if kind not in _PARSERS:
        return UnknownBlock(kind=kind, reason="unsupported content type")

    payload_key, parse = _PARSERS[kind]
    try:
        return parse(_payload(item, payload_key))
    except _MalformedBlock as exc:
        return UnknownBlock(kind=kind, reason=str(exc))


def _blocks(raw: Mapping[str, Any]) -> tuple[ContentBlock, ...]:
    content = raw.get("content") or ()
    if isinstance(content, (str, bytes)) or not isinstance(content, Sequence):
        msg = "'content' must be a list of content items."
        raise ValueError(msg)
    return tuple(block_from_mapping(item) for item in content)


def _required_text(raw: Mapping[str, Any], key: str, *, owner: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        msg = f"{owner} is missing a non-empty '{key}'."
        raise ValueError(msg)
    return value


def document_from_mapping(raw: Any) -> Document:
    if not isinstance(raw, Mapping):
        msg = "document entries must be JSON objects."
        raise ValueError(msg)
    tags = raw.get("tags") or ()
    return Document(
        title=_required_text(raw, "title", owner="document"),
        id=str(raw.get("id", "")),
        description=str(raw.get("description") or ""),
        tags=tuple(str(tag) for tag in tags),
        blocks=_blocks(raw),
    )


def category_from_mapping(raw: Any) -> Category:
    if not isinstance(raw, Mapping):
        msg = "category entries must be JSON objects."
        raise ValueError(msg)
    return Category(
        id=_required_text(raw, "id", owner="category"),
        title=_required_text(raw, "title", owner=f"category '{raw.get('id')}'"),
        description=str(raw.get("description") or ""),
        blocks=_blocks(raw),
        documents=tuple(document_from_mapping(doc) for doc in raw.get("docs") or ()),
        children=tuple(category_from_mapping(child) for child in raw.get("children") or ()),
    )


def tree_from_mapping(raw: Any) -> DocumentTree:
    """Parse the loader's tree payload into a DocumentTree."""
    if not isinstance(raw, Mapping):
        msg = "document tree must be a JSON object."
        raise ValueError(msg)
    return DocumentTree(
        title=str(raw.get("title") or "Documentation"),
        version=str(raw.get("version") or ""),
        categories=tuple(category_from_mapping(item) for item in raw.get("categories") or ()),
        standalone_documents=tuple(
            document_from_mapping(item) for item in raw.get("standaloneDocs") or ()
        ),
    )
