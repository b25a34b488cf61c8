"""Parse Obsidian-flavoured markdown into a ParseResult tree."""

from __future__ import annotations

from wikidown.blocks import parse_blocks
from wikidown.frontmatter import split_frontmatter
from wikidown.inline import DEFAULT_MAX_DEPTH
from wikidown.tokens import ParseResult


def parse(markdown: str, max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """Parse a markdown document.

    Never raises for string input: malformed or unterminated syntax is kept
    as literal text. Containers nested deeper than ``max_depth`` are
    flattened to plain text.

    Args:
        markdown: The raw document, optionally starting with frontmatter.
        max_depth: Maximum nesting of container blocks and inline emphasis.

    Returns:
        ParseResult with the frontmatter mapping and top-level block tokens.
    """
    text = markdown.replace("\r\n", "\n").replace("\r", "\n")
    frontmatter, body = split_frontmatter(text)
    tokens = parse_blocks(body.split("\n"), max_depth=max_depth)
    return ParseResult(frontmatter=frontmatter, tokens=tuple(tokens))
