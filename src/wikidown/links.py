"""Wikilink extraction and the backlink graph between pages."""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

from wikidown.tokens import ParseResult, WikiLink, iter_inline

if TYPE_CHECKING:
    from wikidown.vault import Page


def normalize_target(target: str) -> str:
    """Drop heading/block refs: ``Note#Section`` and ``Note#^id`` -> ``Note``."""
    return target.split("#", 1)[0].strip()


def collect_wikilinks(result: ParseResult) -> list[str]:
    """Return the unique wikilink targets of a parsed document, in order.

    Links inside code spans and code blocks are not wikilinks, so they are
    never collected. Embeds are not counted as links.
    """
    targets: list[str] = []
    seen: set[str] = set()
    for token in iter_inline(result.tokens):
        if not isinstance(token, WikiLink):
            continue
        target = normalize_target(token.target)
        if target and target not in seen:
            seen.add(target)
            targets.append(target)
    return targets


def build_link_graph(pages: list[Page]) -> nx.DiGraph:
    """Build a directed graph of wikilinks between pages.

    Nodes are lowercased page names, with the original name kept in the
    ``name`` attribute. An edge ``a -> b`` exists when page ``a`` links to
    page ``b``; links to missing pages and self-links are dropped.
    """
    G = nx.DiGraph()
    for page in pages:
        G.add_node(page.name.lower(), name=page.name)

    for page in pages:
        source = page.name.lower()
        for target_raw in page.links:
            target = target_raw.lower().strip()
            if target in G and target != source:
                G.add_edge(source, target)

    return G


def calculate_backlinks(pages: list[Page]) -> dict[str, list[str]]:
    """Compute backlinks for every page, including siblings.

    A page's backlinks are the pages linking to it, plus its siblings: the
    other pages linked from those same sources (if A links to B and C, C is
    a backlink of B). Matching is case-insensitive; names come back in their
    original casing, sorted. Each page's ``backlinks`` attribute is updated.
    """
    G = build_link_graph(pages)

    backlinks: dict[str, list[str]] = {}
    for page in pages:
        key = page.name.lower()
        related: set[str] = set()
        for source in G.predecessors(key):
            related.add(source)
            related.update(s for s in G.successors(source) if s != key)
        names = sorted(G.nodes[n]["name"] for n in related)
        page.backlinks = names
        backlinks[page.name] = names

    return backlinks
