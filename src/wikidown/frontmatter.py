"""Extract the YAML-like frontmatter block at the top of a note."""

from __future__ import annotations

import re
from typing import Any

_DELIMITER = "---"

# Plain decimal literals only: 12, -3, 01234, 2.5, .5, 1e5
_NUMBER_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")
_INTEGER_RE = re.compile(r"^[-+]?\d+$")


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return ``(frontmatter, body)`` for a markdown document.

    Only a restricted YAML subset is understood: ``key: value`` lines,
    ``key:`` followed by ``- item`` lines, inline ``[a, b]`` arrays, quoted
    strings, ``true``/``false`` and numbers. Anything unrecognised is skipped
    rather than reported, so a broken header never blocks rendering the note.

    If the document has no opening or no closing ``---`` it is returned
    unchanged with an empty mapping.
    """
    if not text.startswith(_DELIMITER):
        return {}, text

    end = text.find("\n" + _DELIMITER, len(_DELIMITER))
    if end == -1:
        return {}, text

    header = text[len(_DELIMITER) + 1 : end]
    body = text[end + len(_DELIMITER) + 1 :]
    return _parse_header(header), body.lstrip()


def _parse_header(header: str) -> dict[str, Any]:
    frontmatter: dict[str, Any] = {}
    current_key = ""
    current_list: list[str] | None = None

    for line in header.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("- ") and current_key:
            if current_list is None:
                current_list = []
                frontmatter[current_key] = current_list
            current_list.append(_unquote(stripped[2:].strip()))
            continue

        colon = stripped.find(":")
        if colon <= 0:
            continue

        current_key = stripped[:colon].strip()
        current_list = None
        value = stripped[colon + 1 :].strip()
        if value:
            frontmatter[current_key] = parse_scalar(value)

    return frontmatter


def parse_scalar(value: str) -> Any:
    """Convert a single frontmatter value to str, bool, number or list."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    if value == "true":
        return True
    if value == "false":
        return False
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1].strip()
        if not inner:
            return []
        return [_unquote(item.strip()) for item in inner.split(",")]
    number = _as_number(value)
    if number is not None:
        return number
    return value


def _as_number(value: str) -> int | float | None:
    if not _NUMBER_RE.match(value):
        return None
    if _INTEGER_RE.match(value):
        return int(value)
    return float(value)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value
