"""Block parser: groups document lines into block tokens.

A single cursor walks the lines. At each non-blank line the block rules are
tried in order and the first match consumes as many lines as it owns.
Container blocks (blockquotes, callouts, list items) strip their own prefix
and hand the inner lines back to ``parse_blocks``, so nesting behaves the
same at every depth.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from wikidown.inline import DEFAULT_MAX_DEPTH, parse_inline
from wikidown.tokens import (
    Blockquote,
    BlockToken,
    Callout,
    CodeBlock,
    Heading,
    HorizontalRule,
    Html,
    List,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    Text,
)

logger = logging.getLogger(__name__)

_Parsed = Optional[tuple[BlockToken, int]]

HR_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
CALLOUT_RE = re.compile(r"^>\s*\[!(\w+)\]([-+])?\s*(.*)$")
LIST_ITEM_RE = re.compile(r"^(\s*)([-*+]|\d+\.)\s(.*)$")
TASK_RE = re.compile(r"^\[([ xX])\](?:\s+(.*))?$")
DELIMITER_ROW_RE = re.compile(r"^\s*\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?\s*$")
SETEXT_RE = re.compile(r"^(=+|-+)$")
_HTML_TAG_RE = re.compile(r"^</?([\w-]+)")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")

FENCE_CHARS = ("`", "~")

HTML_BLOCK_TAGS = frozenset(
    """
    address article aside base basefont blockquote body caption center col
    colgroup dd details dialog dir div dl dt fieldset figcaption figure footer
    form frame frameset h1 h2 h3 h4 h5 h6 head header hr html iframe legend li
    link main menu menuitem nav noframes ol optgroup option p param section
    source summary table tbody td tfoot th thead title tr track ul
    """.split()
)


def parse_blocks(
    lines: list[str], depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH
) -> list[BlockToken]:
    """Parse ``lines`` (no trailing newlines) into a list of block tokens."""
    if depth > max_depth:
        logger.debug("block nesting deeper than %d, keeping literal text", max_depth)
        literal = "\n".join(line for line in lines if line.strip())
        return [Paragraph((Text(literal),))] if literal else []

    rules = (
        _try_horizontal_rule,
        _try_heading,
        _try_fenced_code,
        _try_callout,
        _try_blockquote,
        _try_table,
        _try_list,
        _try_html,
    )
    tokens: list[BlockToken] = []
    i = 0
    while i < len(lines):
        if not lines[i].strip():
            i += 1
            continue
        for rule in rules:
            parsed = rule(lines, i, depth, max_depth)
            if parsed is not None:
                break
        else:
            parsed = _parse_paragraph(lines, i, depth, max_depth)
        token, i = parsed
        tokens.append(token)
    return tokens


def _try_horizontal_rule(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    if HR_RE.match(lines[i].strip()):
        return HorizontalRule(), i + 1
    return None


def _try_heading(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    m = HEADING_RE.match(lines[i])
    if not m:
        return None
    children = parse_inline(m.group(2).strip(), max_depth=max_depth)
    return Heading(level=len(m.group(1)), children=tuple(children)), i + 1


def _try_fenced_code(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    line = lines[i]
    fence = _fence_of(line)
    if fence is None:
        return None
    language = line.lstrip(fence[0]).strip() or None
    body: list[str] = []
    i += 1
    while i < len(lines) and not lines[i].startswith(fence):
        body.append(lines[i])
        i += 1
    # Skip the closing fence; an unclosed fence runs to the end of input
    return CodeBlock(content="\n".join(body), language=language), i + 1


def _try_callout(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    m = CALLOUT_RE.match(lines[i])
    if not m:
        return None
    body, end = _quoted_lines(lines, i + 1)
    callout = Callout(
        kind=m.group(1).lower(),
        title=m.group(3).strip() or None,
        foldable=m.group(2) in ("-", "+"),
        children=tuple(parse_blocks(body, depth + 1, max_depth)),
    )
    return callout, end


def _try_blockquote(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    if not lines[i].startswith(">"):
        return None
    body, end = _quoted_lines(lines, i)
    return Blockquote(tuple(parse_blocks(body, depth + 1, max_depth))), end


def _try_table(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    if not is_table_start(lines, i):
        return None
    aligns = [_cell_align(cell) for cell in split_row(lines[i + 1])]

    def to_cells(line: str) -> tuple[TableCell, ...]:
        return tuple(
            TableCell(
                children=tuple(parse_inline(cell, max_depth=max_depth)),
                align=aligns[idx] if idx < len(aligns) else None,
            )
            for idx, cell in enumerate(split_row(line))
        )

    header = to_cells(lines[i])
    rows = []
    i += 2
    while i < len(lines) and "|" in lines[i]:
        rows.append(to_cells(lines[i]))
        i += 1
    return Table(header=header, rows=tuple(rows)), i


def _try_list(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    m = LIST_ITEM_RE.match(lines[i])
    if not m:
        return None
    base_indent = len(m.group(1))
    ordered = _is_ordered(m.group(2))
    start = int(m.group(2)[:-1]) if ordered else None

    items: list[ListItem] = []
    while i < len(lines):
        line = lines[i]
        item_match = LIST_ITEM_RE.match(line)
        if (
            item_match
            and len(item_match.group(1)) == base_indent
            and _is_ordered(item_match.group(2)) == ordered
        ):
            item, i = _parse_list_item(lines, i, item_match, depth, max_depth)
            items.append(item)
        elif not line.strip():
            i += 1
        else:
            break
    return List(items=tuple(items), ordered=ordered, start=start), i


def _parse_list_item(
    lines: list[str], i: int, m: re.Match, depth: int, max_depth: int
) -> tuple[ListItem, int]:
    base_indent = len(m.group(1))
    content_indent = base_indent + len(m.group(2)) + 1
    content = m.group(3)

    checked = None
    task = TASK_RE.match(content)
    if task:
        checked = task.group(1) in "xX"
        content = task.group(2) or ""

    body = [content]
    i += 1
    while i < len(lines):
        line = lines[i]
        if not line.strip():
            # A blank line only continues the item if indented content follows
            j = i + 1
            while j < len(lines) and not lines[j].strip():
                j += 1
            if j < len(lines) and _continues_item(lines[j], base_indent, content_indent):
                body.extend([""] * (j - i))
                i = j
                continue
            break
        if not _continues_item(line, base_indent, content_indent):
            break
        body.append(dedent(line, content_indent))
        i += 1

    children = parse_blocks(body, depth + 1, max_depth)
    return ListItem(children=tuple(children), checked=checked), i


def _continues_item(line: str, base_indent: int, content_indent: int) -> bool:
    nested = LIST_ITEM_RE.match(line)
    if nested:
        return len(nested.group(1)) > base_indent
    return indent_width(line) >= content_indent


def _try_html(lines: list[str], i: int, depth: int, max_depth: int) -> _Parsed:
    if not is_html_start(lines[i]):
        return None
    html = [lines[i]]
    i += 1
    while i < len(lines) and lines[i].strip():
        html.append(lines[i])
        i += 1
    return Html("\n".join(html)), i


def _parse_paragraph(
    lines: list[str], i: int, depth: int, max_depth: int
) -> tuple[BlockToken, int]:
    para: list[str] = []
    while i < len(lines) and lines[i].strip():
        line = lines[i]
        if para and SETEXT_RE.match(line.strip()):
            level = 1 if line.strip()[0] == "=" else 2
            text = " ".join(p.strip() for p in para)
            children = parse_inline(text, max_depth=max_depth)
            return Heading(level=level, children=tuple(children)), i + 1
        if para and starts_block(lines, i):
            break
        para.append(line.lstrip())
        i += 1
    children = parse_inline("\n".join(para), max_depth=max_depth)
    return Paragraph(tuple(children)), i


def starts_block(lines: list[str], i: int) -> bool:
    """True if ``lines[i]`` opens a block other than a paragraph."""
    line = lines[i]
    return bool(
        HEADING_RE.match(line)
        or HR_RE.match(line.strip())
        or _fence_of(line)
        or line.startswith(">")
        or LIST_ITEM_RE.match(line)
        or is_table_start(lines, i)
        or is_html_start(line)
    )


def is_table_start(lines: list[str], i: int) -> bool:
    """A ``|`` line is a table header only if a matching delimiter row follows."""
    if "|" not in lines[i] or i + 1 >= len(lines):
        return False
    delimiter = lines[i + 1]
    if "|" not in delimiter or not DELIMITER_ROW_RE.match(delimiter):
        return False
    return len(split_row(lines[i])) == len(split_row(delimiter))


def is_html_start(line: str) -> bool:
    m = _HTML_TAG_RE.match(line.strip())
    return bool(m) and m.group(1).lower() in HTML_BLOCK_TAGS


def split_row(line: str) -> list[str]:
    """Split a table row on unescaped pipes, ignoring the outer ones."""
    row = line.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|") and not row.endswith("\\|"):
        row = row[:-1]
    return [cell.strip() for cell in _CELL_SPLIT_RE.split(row)]


def _cell_align(cell: str) -> str | None:
    left, right = cell.startswith(":"), cell.endswith(":")
    if left and right:
        return "center"
    if right:
        return "right"
    if left:
        return "left"
    return None


def _fence_of(line: str) -> str | None:
    for char in FENCE_CHARS:
        if line.startswith(char * 3):
            return char * 3
    return None


def _quoted_lines(lines: list[str], i: int) -> tuple[list[str], int]:
    body = []
    while i < len(lines) and lines[i].startswith(">"):
        line = lines[i][1:]
        body.append(line[1:] if line.startswith(" ") else line)
        i += 1
    return body, i


def _is_ordered(marker: str) -> bool:
    return marker[0].isdigit()


def indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def dedent(line: str, width: int) -> str:
    """Remove at most ``width`` leading whitespace characters."""
    k = 0
    while k < width and k < len(line) and line[k] in " \t":
        k += 1
    return line[k:]
