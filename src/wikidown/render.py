"""Generic tree renderer.

``render`` knows nothing about output formats. A ``Renderer`` supplies one
function per token type plus ``join``, which combines sibling outputs. Render
functions that own nested content call back into the ``RenderContext`` they
receive, which is how arbitrary nesting is handled.

Example, rendering to a string::

    html = render(parse(text), create_html_renderer())
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from wikidown.tokens import (
    BlockToken,
    InlineToken,
    ListItem,
    ParseResult,
    TableCell,
)

T = TypeVar("T")


class RendererConfigError(TypeError):
    """Raised when a renderer override names an unknown token type."""


@dataclass(frozen=True)
class RenderContext(Generic[T]):
    """Callbacks handed to every render function."""

    render_inline: Callable[[Sequence[InlineToken]], T]
    render_blocks: Callable[[Sequence[BlockToken]], T]
    render_list_item: Callable[[ListItem], T]
    render_table_cell: Callable[[TableCell, bool], T]


@dataclass(frozen=True)
class InlineRenderers(Generic[T]):
    text: Callable[[str, RenderContext[T]], T]
    bold: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    italic: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    bold_italic: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    strikethrough: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    highlight: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    code: Callable[[str, RenderContext[T]], T]
    # (href, title, children, ctx)
    link: Callable[[str, Optional[str], Sequence[InlineToken], RenderContext[T]], T]
    # (src, alt, title, ctx)
    image: Callable[[str, str, Optional[str], RenderContext[T]], T]
    # (target, display, ctx)
    wikilink: Callable[[str, Optional[str], RenderContext[T]], T]
    embed: Callable[[str, RenderContext[T]], T]
    linebreak: Callable[[RenderContext[T]], T]


@dataclass(frozen=True)
class BlockRenderers(Generic[T]):
    paragraph: Callable[[Sequence[InlineToken], RenderContext[T]], T]
    heading: Callable[[int, Sequence[InlineToken], RenderContext[T]], T]
    # (content, language, ctx)
    code_block: Callable[[str, Optional[str], RenderContext[T]], T]
    blockquote: Callable[[Sequence[BlockToken], RenderContext[T]], T]
    # (kind, title, foldable, children, ctx)
    callout: Callable[
        [str, Optional[str], bool, Sequence[BlockToken], RenderContext[T]], T
    ]
    # (ordered, start, items, ctx)
    list: Callable[[bool, Optional[int], Sequence[ListItem], RenderContext[T]], T]
    # (checked, children, ctx)
    list_item: Callable[[Optional[bool], Sequence[BlockToken], RenderContext[T]], T]
    # (header, rows, ctx)
    table: Callable[
        [Sequence[TableCell], Sequence[Sequence[TableCell]], RenderContext[T]], T
    ]
    # (children, align, is_header, ctx)
    table_cell: Callable[
        [Sequence[InlineToken], Optional[str], bool, RenderContext[T]], T
    ]
    horizontal_rule: Callable[[RenderContext[T]], T]
    html: Callable[[str, RenderContext[T]], T]


@dataclass(frozen=True)
class Renderer(Generic[T]):
    """A complete render table. Every field is required."""

    inline: InlineRenderers[T]
    block: BlockRenderers[T]
    join: Callable[[list[T]], T]

    def override(self, **entries: Callable[..., Any]) -> Renderer[T]:
        """Return a copy with the named render functions replaced.

        Keys are token type names (``bold``, ``wikilink``, ``table_cell``...)
        or ``join``; each one is looked up in the inline table first, then the
        block table.
        """
        inline_fields = {f.name for f in dataclasses.fields(InlineRenderers)}
        block_fields = {f.name for f in dataclasses.fields(BlockRenderers)}

        inline_updates: dict[str, Callable[..., Any]] = {}
        block_updates: dict[str, Callable[..., Any]] = {}
        join = self.join
        for name, fn in entries.items():
            if name == "join":
                join = fn
            elif name in inline_fields:
                inline_updates[name] = fn
            elif name in block_fields:
                block_updates[name] = fn
            else:
                raise RendererConfigError(f"Unknown render function: {name!r}")

        return Renderer(
            inline=dataclasses.replace(self.inline, **inline_updates),
            block=dataclasses.replace(self.block, **block_updates),
            join=join,
        )


# token type -> call into the matching render function with the token's fields
_INLINE_DISPATCH: dict[str, Callable[[Any, InlineRenderers, RenderContext], Any]] = {
    "text": lambda t, fns, ctx: fns.text(t.content, ctx),
    "bold": lambda t, fns, ctx: fns.bold(t.children, ctx),
    "italic": lambda t, fns, ctx: fns.italic(t.children, ctx),
    "bold_italic": lambda t, fns, ctx: fns.bold_italic(t.children, ctx),
    "strikethrough": lambda t, fns, ctx: fns.strikethrough(t.children, ctx),
    "highlight": lambda t, fns, ctx: fns.highlight(t.children, ctx),
    "code": lambda t, fns, ctx: fns.code(t.content, ctx),
    "link": lambda t, fns, ctx: fns.link(t.href, t.title, t.children, ctx),
    "image": lambda t, fns, ctx: fns.image(t.src, t.alt, t.title, ctx),
    "wikilink": lambda t, fns, ctx: fns.wikilink(t.target, t.display, ctx),
    "embed": lambda t, fns, ctx: fns.embed(t.target, ctx),
    "linebreak": lambda t, fns, ctx: fns.linebreak(ctx),
}

_BLOCK_DISPATCH: dict[str, Callable[[Any, BlockRenderers, RenderContext], Any]] = {
    "paragraph": lambda t, fns, ctx: fns.paragraph(t.children, ctx),
    "heading": lambda t, fns, ctx: fns.heading(t.level, t.children, ctx),
    "code_block": lambda t, fns, ctx: fns.code_block(t.content, t.language, ctx),
    "blockquote": lambda t, fns, ctx: fns.blockquote(t.children, ctx),
    "callout": lambda t, fns, ctx: fns.callout(
        t.kind, t.title, t.foldable, t.children, ctx
    ),
    "list": lambda t, fns, ctx: fns.list(t.ordered, t.start, t.items, ctx),
    "table": lambda t, fns, ctx: fns.table(t.header, t.rows, ctx),
    "horizontal_rule": lambda t, fns, ctx: fns.horizontal_rule(ctx),
    "html": lambda t, fns, ctx: fns.html(t.content, ctx),
}


def _dispatch_inline(token: InlineToken, r: Renderer[T], ctx: RenderContext[T]) -> T:
    try:
        call = _INLINE_DISPATCH[token.type]
    except (AttributeError, KeyError):
        raise TypeError(f"Not an inline token: {token!r}") from None
    return call(token, r.inline, ctx)


def _dispatch_block(token: BlockToken, r: Renderer[T], ctx: RenderContext[T]) -> T:
    try:
        call = _BLOCK_DISPATCH[token.type]
    except (AttributeError, KeyError):
        raise TypeError(f"Not a block token: {token!r}") from None
    return call(token, r.block, ctx)


def make_context(renderer: Renderer[T]) -> RenderContext[T]:
    """Build the context whose callbacks recurse through ``renderer``."""

    def render_inline(tokens: Sequence[InlineToken]) -> T:
        return renderer.join([_dispatch_inline(t, renderer, ctx) for t in tokens])

    def render_blocks(tokens: Sequence[BlockToken]) -> T:
        return renderer.join([_dispatch_block(t, renderer, ctx) for t in tokens])

    def render_list_item(item: ListItem) -> T:
        return renderer.block.list_item(item.checked, item.children, ctx)

    def render_table_cell(cell: TableCell, is_header: bool) -> T:
        return renderer.block.table_cell(cell.children, cell.align, is_header, ctx)

    ctx = RenderContext(
        render_inline=render_inline,
        render_blocks=render_blocks,
        render_list_item=render_list_item,
        render_table_cell=render_table_cell,
    )
    return ctx


def render(result: ParseResult, renderer: Renderer[T]) -> T:
    """Render a parsed document with ``renderer``."""
    return make_context(renderer).render_blocks(result.tokens)
