"""Ready-made renderer configurations: HTML, plain text and a JSON-ready tree."""

from __future__ import annotations

import re
from html import escape
from typing import Any, Callable, Optional
from urllib.parse import quote

from wikidown.parser import parse
from wikidown.render import BlockRenderers, InlineRenderers, Renderer, render

_WHITESPACE_RE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Page name to URL slug: ``My Page`` -> ``my-page``."""
    return _WHITESPACE_RE.sub("-", name.strip().lower())


def unslugify(slug: str) -> str:
    """URL slug back to a display name: ``verdant-kingdom`` -> ``Verdant Kingdom``."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)


def wikilink_href(target: str, base_path: str = "/pages") -> str:
    slug = quote(slugify(target), safe="")
    return f"{base_path.rstrip('/')}/{slug}"


def _attr(name: str, value: Optional[str]) -> str:
    if value is None:
        return ""
    return f' {name}="{escape(value)}"'


def _align_style(align: Optional[str]) -> str:
    return f' style="text-align:{align}"' if align else ""


def _checkbox(checked: Optional[bool]) -> str:
    if checked is None:
        return ""
    return f'<input type="checkbox"{" checked" if checked else ""} disabled /> '


def create_html_renderer(
    wiki_base_path: str = "/pages",
    overrides: Optional[dict[str, Callable[..., Any]]] = None,
) -> Renderer[str]:
    """Build a Renderer producing an HTML string.

    Text and attribute values are escaped. Raw HTML blocks are emitted as-is.

    Args:
        wiki_base_path: URL prefix for ``[[wikilinks]]``.
        overrides: Render functions to use instead of the defaults, keyed by
            token type (see ``Renderer.override``).
    """

    def link(href, title, children, ctx):
        external = href.startswith(("http://", "https://"))
        extra = ' target="_blank" rel="noopener noreferrer"' if external else ""
        return (
            f'<a href="{escape(href)}"{_attr("title", title)}{extra}>'
            f"{ctx.render_inline(children)}</a>"
        )

    def wikilink(target, display, ctx):
        href = wikilink_href(target, wiki_base_path)
        label = display if display is not None else target
        return f'<a href="{escape(href)}" class="wikilink">{escape(label)}</a>'

    def list_(ordered, start, items, ctx):
        tag = "ol" if ordered else "ul"
        start_attr = f' start="{start}"' if ordered and start not in (None, 1) else ""
        body = "".join(ctx.render_list_item(item) for item in items)
        return f"<{tag}{start_attr}>{body}</{tag}>"

    def table(header, rows, ctx):
        head = "".join(ctx.render_table_cell(cell, True) for cell in header)
        body = "".join(
            "<tr>" + "".join(ctx.render_table_cell(cell, False) for cell in row) + "</tr>"
            for row in rows
        )
        return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"

    def table_cell(children, align, is_header, ctx):
        tag = "th" if is_header else "td"
        return f"<{tag}{_align_style(align)}>{ctx.render_inline(children)}</{tag}>"

    def callout(kind, title, foldable, children, ctx):
        fold = ' data-foldable="true"' if foldable else ""
        heading = f'<div class="callout-title">{escape(title)}</div>' if title else ""
        return (
            f'<aside class="callout" data-callout="{escape(kind)}"{fold}>{heading}'
            f'<div class="callout-content">{ctx.render_blocks(children)}</div></aside>'
        )

    def code_block(content, language, ctx):
        cls = f' class="language-{escape(language)}"' if language else ""
        return f"<pre><code{cls}>{escape(content)}</code></pre>"

    renderer = Renderer(
        inline=InlineRenderers(
            text=lambda content, ctx: escape(content, quote=False),
            bold=lambda children, ctx: f"<strong>{ctx.render_inline(children)}</strong>",
            italic=lambda children, ctx: f"<em>{ctx.render_inline(children)}</em>",
            bold_italic=lambda children, ctx: (
                f"<strong><em>{ctx.render_inline(children)}</em></strong>"
            ),
            strikethrough=lambda children, ctx: f"<del>{ctx.render_inline(children)}</del>",
            highlight=lambda children, ctx: f"<mark>{ctx.render_inline(children)}</mark>",
            code=lambda content, ctx: f"<code>{escape(content)}</code>",
            link=link,
            image=lambda src, alt, title, ctx: (
                f'<img src="{escape(src)}" alt="{escape(alt)}"{_attr("title", title)} />'
            ),
            wikilink=wikilink,
            embed=lambda target, ctx: (
                f'<div class="embed" data-embed="{escape(target)}">'
                f"[Embedded: {escape(target)}]</div>"
            ),
            linebreak=lambda ctx: "<br />",
        ),
        block=BlockRenderers(
            paragraph=lambda children, ctx: f"<p>{ctx.render_inline(children)}</p>",
            heading=lambda level, children, ctx: (
                f"<h{level}>{ctx.render_inline(children)}</h{level}>"
            ),
            code_block=code_block,
            blockquote=lambda children, ctx: (
                f"<blockquote>{ctx.render_blocks(children)}</blockquote>"
            ),
            callout=callout,
            list=list_,
            list_item=lambda checked, children, ctx: (
                f"<li>{_checkbox(checked)}{ctx.render_blocks(children)}</li>"
            ),
            table=table,
            table_cell=table_cell,
            horizontal_rule=lambda ctx: "<hr />",
            html=lambda content, ctx: content,
        ),
        join="".join,
    )
    if overrides:
        renderer = renderer.override(**overrides)
    return renderer


def create_text_renderer() -> Renderer[str]:
    """Build a Renderer that keeps only the readable text, in reading order.

    Markup is dropped. Every block ends with a blank line; list items, table
    rows and line breaks are separated by single newlines.
    """

    def children_text(children, ctx):
        return ctx.render_inline(children)

    def block(text: str) -> str:
        return f"{text}\n\n" if text else ""

    def table(header, rows, ctx):
        lines = [" ".join(ctx.render_table_cell(cell, True) for cell in header)]
        for row in rows:
            lines.append(" ".join(ctx.render_table_cell(cell, False) for cell in row))
        return block("\n".join(lines))

    def callout(kind, title, foldable, children, ctx):
        return block(title or "") + ctx.render_blocks(children)

    def list_(ordered, start, items, ctx):
        return block("\n".join(ctx.render_list_item(item) for item in items))

    return Renderer(
        inline=InlineRenderers(
            text=lambda content, ctx: content,
            bold=children_text,
            italic=children_text,
            bold_italic=children_text,
            strikethrough=children_text,
            highlight=children_text,
            code=lambda content, ctx: content,
            link=lambda href, title, children, ctx: ctx.render_inline(children),
            image=lambda src, alt, title, ctx: alt,
            wikilink=lambda target, display, ctx: display if display is not None else target,
            embed=lambda target, ctx: "",
            linebreak=lambda ctx: "\n",
        ),
        block=BlockRenderers(
            paragraph=lambda children, ctx: block(ctx.render_inline(children)),
            heading=lambda level, children, ctx: block(ctx.render_inline(children)),
            code_block=lambda content, language, ctx: block(content),
            blockquote=lambda children, ctx: ctx.render_blocks(children),
            callout=callout,
            list=list_,
            list_item=lambda checked, children, ctx: ctx.render_blocks(children).strip(),
            table=table,
            table_cell=lambda children, align, is_header, ctx: ctx.render_inline(children),
            horizontal_rule=lambda ctx: "",
            html=lambda content, ctx: "",
        ),
        join="".join,
    )


def create_tree_renderer() -> Renderer[list]:
    """Build a Renderer that turns the AST into JSON-ready dicts.

    Each token becomes a one-element list holding ``{"type": ..., ...}``;
    ``join`` concatenates the lists, so rendering a document yields the list
    of its top-level blocks.
    """

    def node(node_type: str, /, **fields: Any) -> list:
        return [{"type": node_type, **{k: v for k, v in fields.items() if v is not None}}]

    def cell(children, align, is_header, ctx):
        return node("table_cell", align=align, header=is_header,
                    children=ctx.render_inline(children))

    def emphasis(kind: str):
        return lambda children, ctx: node(kind, children=ctx.render_inline(children))

    return Renderer(
        inline=InlineRenderers(
            text=lambda content, ctx: node("text", content=content),
            bold=emphasis("bold"),
            italic=emphasis("italic"),
            bold_italic=emphasis("bold_italic"),
            strikethrough=emphasis("strikethrough"),
            highlight=emphasis("highlight"),
            code=lambda content, ctx: node("code", content=content),
            link=lambda href, title, children, ctx: node(
                "link", href=href, title=title, children=ctx.render_inline(children)
            ),
            image=lambda src, alt, title, ctx: node("image", src=src, alt=alt, title=title),
            wikilink=lambda target, display, ctx: node(
                "wikilink", target=target, display=display
            ),
            embed=lambda target, ctx: node("embed", target=target),
            linebreak=lambda ctx: node("linebreak"),
        ),
        block=BlockRenderers(
            paragraph=lambda children, ctx: node(
                "paragraph", children=ctx.render_inline(children)
            ),
            heading=lambda level, children, ctx: node(
                "heading", level=level, children=ctx.render_inline(children)
            ),
            code_block=lambda content, language, ctx: node(
                "code_block", language=language, content=content
            ),
            blockquote=lambda children, ctx: node(
                "blockquote", children=ctx.render_blocks(children)
            ),
            callout=lambda kind, title, foldable, children, ctx: node(
                "callout", kind=kind, title=title, foldable=foldable,
                children=ctx.render_blocks(children),
            ),
            list=lambda ordered, start, items, ctx: node(
                "list", ordered=ordered, start=start,
                items=[entry for item in items for entry in ctx.render_list_item(item)],
            ),
            list_item=lambda checked, children, ctx: node(
                "list_item", checked=checked, children=ctx.render_blocks(children)
            ),
            table=lambda header, rows, ctx: node(
                "table",
                header=[c for h in header for c in ctx.render_table_cell(h, True)],
                rows=[
                    [c for r in row for c in ctx.render_table_cell(r, False)]
                    for row in rows
                ],
            ),
            table_cell=cell,
            horizontal_rule=lambda ctx: node("horizontal_rule"),
            html=lambda content, ctx: node("html", content=content),
        ),
        join=lambda parts: [entry for part in parts for entry in part],
    )


def to_html(markdown: str, wiki_base_path: str = "/pages") -> str:
    return render(parse(markdown), create_html_renderer(wiki_base_path))


def to_text(markdown: str) -> str:
    return render(parse(markdown), create_text_renderer()).strip()


def to_tree(markdown: str) -> dict[str, Any]:
    """Parse ``markdown`` into ``{"frontmatter": ..., "tokens": [...]}``."""
    result = parse(markdown)
    return {
        "frontmatter": result.frontmatter,
        "tokens": render(result, create_tree_renderer()),
    }
