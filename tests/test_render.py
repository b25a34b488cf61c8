"""Tests for the generic renderer."""

import pytest

from wikidown.parser import parse
from wikidown.render import (
    BlockRenderers,
    InlineRenderers,
    Renderer,
    RendererConfigError,
    make_context,
    render,
)
from wikidown.renderers import create_html_renderer


def _counting_renderer():
    """A Renderer[int] that counts tokens, to show render() is output-agnostic."""

    def leaf(*args):
        return 1

    def inline_container(children, ctx):
        return 1 + ctx.render_inline(children)

    def block_container(children, ctx):
        return 1 + ctx.render_blocks(children)

    return Renderer(
        inline=InlineRenderers(
            text=leaf,
            bold=inline_container,
            italic=inline_container,
            bold_italic=inline_container,
            strikethrough=inline_container,
            highlight=inline_container,
            code=leaf,
            link=lambda href, title, children, ctx: 1 + ctx.render_inline(children),
            image=leaf,
            wikilink=leaf,
            embed=leaf,
            linebreak=leaf,
        ),
        block=BlockRenderers(
            paragraph=inline_container,
            heading=lambda level, children, ctx: 1 + ctx.render_inline(children),
            code_block=leaf,
            blockquote=block_container,
            callout=lambda kind, title, foldable, children, ctx: 1 + ctx.render_blocks(children),
            list=lambda ordered, start, items, ctx: 1 + sum(ctx.render_list_item(i) for i in items),
            list_item=lambda checked, children, ctx: 1 + ctx.render_blocks(children),
            table=lambda header, rows, ctx: 1 + sum(
                ctx.render_table_cell(c, False) for row in rows for c in row
            ),
            table_cell=lambda children, align, is_header, ctx: ctx.render_inline(children),
            horizontal_rule=leaf,
            html=leaf,
        ),
        join=sum,
    )


def test_render_with_non_string_output():
    # paragraph + bold + text, then list + item + paragraph + wikilink
    result = parse("**x**\n\n- [[A]]")
    assert render(result, _counting_renderer()) == 7


def test_render_is_deterministic():
    source = "# T\n\n> [!note] N\n> - **a** [[B|c]]\n\n| x |\n|---|\n| y |"
    renderer = create_html_renderer()
    assert render(parse(source), renderer) == render(parse(source), renderer)


def test_missing_render_function_is_type_error():
    with pytest.raises(TypeError):
        InlineRenderers(text=lambda content, ctx: content)


def test_override_replaces_entry():
    renderer = create_html_renderer().override(
        bold=lambda children, ctx: f"<b>{ctx.render_inline(children)}</b>"
    )
    assert render(parse("**x** *y*"), renderer) == "<p><b>x</b> <em>y</em></p>"


def test_override_does_not_mutate_original():
    original = create_html_renderer()
    original.override(paragraph=lambda children, ctx: "")
    assert render(parse("x"), original) == "<p>x</p>"


def test_override_join():
    renderer = create_html_renderer().override(join="\n".join)
    assert render(parse("# a\n\nb"), renderer) == "<h1>a</h1>\n<p>b</p>"


def test_override_list_item_and_table_cell():
    renderer = create_html_renderer().override(
        list_item=lambda checked, children, ctx: f"<li data-checked='{checked}'>"
        f"{ctx.render_blocks(children)}</li>",
        table_cell=lambda children, align, is_header, ctx: "H" if is_header else "D",
    )
    assert render(parse("- [x] a"), renderer) == "<ul><li data-checked='True'><p>a</p></li></ul>"
    assert render(parse("| a |\n|---|\n| b |"), renderer) == (
        "<table><thead><tr>H</tr></thead><tbody><tr>D</tr></tbody></table>"
    )


def test_override_unknown_key():
    with pytest.raises(RendererConfigError):
        create_html_renderer().override(footnote=lambda *a: "")


def test_renderer_config_error_is_type_error():
    assert issubclass(RendererConfigError, TypeError)


def test_non_token_raises_type_error():
    ctx = make_context(create_html_renderer())
    with pytest.raises(TypeError):
        ctx.render_blocks(["not a token"])
    with pytest.raises(TypeError):
        ctx.render_inline([object()])
