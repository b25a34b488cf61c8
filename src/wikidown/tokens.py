"""AST node types produced by the parser and consumed by renderers.

Every node is a frozen dataclass carrying a ``type`` tag that names its
variant. Child sequences are tuples, so a parsed tree is immutable and each
node belongs to exactly one parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, Literal, Union

Align = Literal["left", "center", "right"]


# -- inline -------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    type: ClassVar[str] = "text"
    content: str


@dataclass(frozen=True)
class Bold:
    type: ClassVar[str] = "bold"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class Italic:
    type: ClassVar[str] = "italic"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class BoldItalic:
    type: ClassVar[str] = "bold_italic"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class Strikethrough:
    type: ClassVar[str] = "strikethrough"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class Highlight:
    type: ClassVar[str] = "highlight"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class Code:
    type: ClassVar[str] = "code"
    content: str


@dataclass(frozen=True)
class Link:
    type: ClassVar[str] = "link"
    href: str
    children: tuple[InlineToken, ...]
    title: str | None = None


@dataclass(frozen=True)
class Image:
    type: ClassVar[str] = "image"
    src: str
    alt: str
    title: str | None = None


@dataclass(frozen=True)
class WikiLink:
    """``[[target]]`` or ``[[target|display]]``."""

    type: ClassVar[str] = "wikilink"
    target: str
    display: str | None = None


@dataclass(frozen=True)
class Embed:
    """``![[target]]``. Renderers show a placeholder; nothing is fetched."""

    type: ClassVar[str] = "embed"
    target: str


@dataclass(frozen=True)
class LineBreak:
    type: ClassVar[str] = "linebreak"


InlineToken = Union[
    Text,
    Bold,
    Italic,
    BoldItalic,
    Strikethrough,
    Highlight,
    Code,
    Link,
    Image,
    WikiLink,
    Embed,
    LineBreak,
]

# Inline variants whose payload is a nested inline sequence.
CONTAINER_INLINE = (Bold, Italic, BoldItalic, Strikethrough, Highlight, Link)


# -- block --------------------------------------------------------------------


@dataclass(frozen=True)
class TableCell:
    children: tuple[InlineToken, ...]
    align: Align | None = None


@dataclass(frozen=True)
class ListItem:
    """A list entry. ``checked`` is None for plain items, a bool for tasks."""

    children: tuple[BlockToken, ...]
    checked: bool | None = None


@dataclass(frozen=True)
class Paragraph:
    type: ClassVar[str] = "paragraph"
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class Heading:
    type: ClassVar[str] = "heading"
    level: int
    children: tuple[InlineToken, ...]


@dataclass(frozen=True)
class CodeBlock:
    type: ClassVar[str] = "code_block"
    content: str
    language: str | None = None


@dataclass(frozen=True)
class Blockquote:
    type: ClassVar[str] = "blockquote"
    children: tuple[BlockToken, ...]


@dataclass(frozen=True)
class Callout:
    """Obsidian admonition: ``> [!kind]- Title``."""

    type: ClassVar[str] = "callout"
    kind: str
    children: tuple[BlockToken, ...]
    title: str | None = None
    foldable: bool = False


@dataclass(frozen=True)
class List:
    type: ClassVar[str] = "list"
    items: tuple[ListItem, ...]
    ordered: bool = False
    start: int | None = None


@dataclass(frozen=True)
class Table:
    type: ClassVar[str] = "table"
    header: tuple[TableCell, ...]
    rows: tuple[tuple[TableCell, ...], ...]


@dataclass(frozen=True)
class HorizontalRule:
    type: ClassVar[str] = "horizontal_rule"


@dataclass(frozen=True)
class Html:
    """Raw HTML block, passed to renderers verbatim and unsanitized."""

    type: ClassVar[str] = "html"
    content: str


BlockToken = Union[
    Paragraph,
    Heading,
    CodeBlock,
    Blockquote,
    Callout,
    List,
    Table,
    HorizontalRule,
    Html,
]


@dataclass(frozen=True)
class ParseResult:
    frontmatter: dict[str, Any] = field(default_factory=dict)
    tokens: tuple[BlockToken, ...] = ()


def iter_inline(blocks: tuple[BlockToken, ...] | list[BlockToken]) -> Iterator[InlineToken]:
    """Yield every inline token under ``blocks`` in document order.

    Descends into nested blocks, list items, table cells and the children of
    container inlines (emphasis and link text).
    """
    for block in blocks:
        if isinstance(block, (Paragraph, Heading)):
            yield from _walk_inline(block.children)
        elif isinstance(block, (Blockquote, Callout)):
            yield from iter_inline(block.children)
        elif isinstance(block, List):
            for item in block.items:
                yield from iter_inline(item.children)
        elif isinstance(block, Table):
            for cell in block.header:
                yield from _walk_inline(cell.children)
            for row in block.rows:
                for cell in row:
                    yield from _walk_inline(cell.children)


def _walk_inline(tokens: tuple[InlineToken, ...]) -> Iterator[InlineToken]:
    for token in tokens:
        yield token
        if isinstance(token, CONTAINER_INLINE):
            yield from _walk_inline(token.children)
