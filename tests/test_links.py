"""Tests for wikilink collection and the backlink graph."""

from wikidown.links import (
    build_link_graph,
    calculate_backlinks,
    collect_wikilinks,
    normalize_target,
)
from wikidown.parser import parse
from wikidown.vault import Page


def _make_pages():
    """Create simple test pages without actual files."""
    specs = [
        ("Alpha", ["Beta", "gamma"]),
        ("Beta", ["Alpha"]),
        ("Gamma", ["Alpha", "Missing Page"]),
        ("Delta", []),  # isolated
    ]
    return [Page(name=name, content="", links=links) for name, links in specs]


def test_collect_wikilinks_unique_in_order():
    result = parse("See [[B]], [[A|alias]] and [[B#Section]].\n\n- [[C#^block]]")
    assert collect_wikilinks(result) == ["B", "A", "C"]


def test_collect_wikilinks_ignores_code_and_embeds():
    result = parse("`[[Not]]`\n\n```\n[[Nope]]\n```\n\n![[Embedded]] [[Yes]]")
    assert collect_wikilinks(result) == ["Yes"]


def test_collect_wikilinks_in_tables_and_callouts():
    result = parse("> [!info] Info\n> [[One]]\n\n| a |\n|---|\n| [[Two]] |")
    assert collect_wikilinks(result) == ["One", "Two"]


def test_normalize_target():
    assert normalize_target("Note#Heading") == "Note"
    assert normalize_target(" Note ") == "Note"


def test_build_link_graph_nodes():
    G = build_link_graph(_make_pages())
    assert set(G.nodes) == {"alpha", "beta", "gamma", "delta"}
    assert G.nodes["gamma"]["name"] == "Gamma"


def test_build_link_graph_edges():
    G = build_link_graph(_make_pages())
    assert G.has_edge("alpha", "beta")
    assert G.has_edge("alpha", "gamma")  # case-insensitive
    assert not G.has_edge("beta", "gamma")
    assert "missing page" not in G
    assert G.degree("delta") == 0  # isolated


def test_self_links_are_dropped():
    G = build_link_graph([Page(name="Loop", content="", links=["loop"])])
    assert G.number_of_edges() == 0


def test_backlinks_include_sources_and_siblings():
    pages = _make_pages()
    backlinks = calculate_backlinks(pages)

    # Beta is linked from Alpha; Gamma is Alpha's other link
    assert backlinks["Beta"] == ["Alpha", "Gamma"]
    # Gamma is linked from Alpha (sibling Beta)
    assert backlinks["Gamma"] == ["Alpha", "Beta"]
    # Alpha is linked from Beta and Gamma; their other links don't exist or are Alpha
    assert backlinks["Alpha"] == ["Beta", "Gamma"]
    assert backlinks["Delta"] == []


def test_backlinks_written_to_pages():
    pages = _make_pages()
    calculate_backlinks(pages)
    by_name = {p.name: p for p in pages}
    assert by_name["Beta"].backlinks == ["Alpha", "Gamma"]


def test_backlinks_keep_original_casing():
    pages = [
        Page(name="Index", content="", links=["eldspire", "VERDANT KINGDOM"]),
        Page(name="Eldspire", content="", links=[]),
        Page(name="Verdant Kingdom", content="", links=[]),
    ]
    calculate_backlinks(pages)
    assert pages[1].backlinks == ["Index", "Verdant Kingdom"]
