"""Inline scanner: turns a run of text into a flat list of inline tokens.

The scanner walks the text once. At each position it tries the rules below
in priority order and takes the first one whose construct is closed further
along; otherwise the character is accumulated as plain text. Unclosed
markers therefore come out as literal text instead of raising.

    1. escape ``\\x``            8. highlight ``==x==``
    2. hard line break           9. strikethrough ``~~x~~``
    3. embed ``![[x]]``         10. bold italic ``***x***`` / ``___x___``
    4. wikilink ``[[x|y]]``     11. bold ``**x**`` / ``__x__``
    5. image ``![a](src "t")``  12. italic ``*x*`` / ``_x_``
    6. link ``[x](href "t")``   13. code, single or double backticks
    7. autolink ``<scheme:x>``
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from wikidown.tokens import (
    Bold,
    BoldItalic,
    Code,
    Embed,
    Highlight,
    Image,
    InlineToken,
    Italic,
    LineBreak,
    Link,
    Strikethrough,
    Text,
    WikiLink,
)

logger = logging.getLogger(__name__)

_Match = Optional[tuple[int, InlineToken]]

DEFAULT_MAX_DEPTH = 64

_TITLED_TARGET_RE = re.compile(r'^(.+?)\s+"(.+)"$', re.DOTALL)
_AUTOLINK_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]{1,31}:[^\s<>]+$")
_HARD_BREAK_RE = re.compile(r" {2,}\n")

# (delimiter, token class) for the symmetric emphasis rules, highest first.
_PAIRED = (
    ("==", Highlight),
    ("~~", Strikethrough),
    ("***", BoldItalic),
    ("___", BoldItalic),
    ("**", Bold),
    ("__", Bold),
)


def parse_inline(
    text: str, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH
) -> list[InlineToken]:
    """Scan ``text`` into inline tokens covering all of it, in order."""
    if depth > max_depth:
        logger.debug("inline nesting deeper than %d, keeping literal text", max_depth)
        return [Text(text)] if text else []
    return _Scanner(text, depth, max_depth).run()


class _Scanner:
    def __init__(self, text: str, depth: int, max_depth: int) -> None:
        self.text = text
        self.depth = depth
        self.max_depth = max_depth
        self.tokens: list[InlineToken] = []
        self.pos = 0
        self.text_start = 0

    def run(self) -> list[InlineToken]:
        rules = (
            self._escape,
            self._hard_break,
            self._embed,
            self._wikilink,
            self._image,
            self._link,
            self._autolink,
            self._paired,
            self._italic,
            self._code,
        )
        while self.pos < len(self.text):
            for rule in rules:
                match = rule(self.pos)
                if match is not None:
                    end, token = match
                    self._push_text(self.pos)
                    self.tokens.append(token)
                    self.pos = self.text_start = end
                    break
            else:
                self.pos += 1
        self._push_text(len(self.text))
        return merge_text(self.tokens)

    def _push_text(self, end: int) -> None:
        if end > self.text_start:
            self.tokens.append(Text(self.text[self.text_start : end]))

    def _children(self, inner: str) -> tuple[InlineToken, ...]:
        return tuple(parse_inline(inner, self.depth + 1, self.max_depth))

    # Each rule returns (end_position, token) or None.

    def _escape(self, i: int) -> _Match:
        text = self.text
        if text[i] == "\\" and i + 1 < len(text) and text[i + 1] != "\n":
            return i + 2, Text(text[i + 1])
        return None

    def _hard_break(self, i: int) -> _Match:
        text = self.text
        if text.startswith("\\\n", i):
            end = i + 2
        else:
            m = _HARD_BREAK_RE.match(text, i) if text[i] == " " else None
            if m is None:
                return None
            end = m.end()
        # A break needs something after it to break onto
        if end >= len(text):
            return None
        return end, LineBreak()

    def _embed(self, i: int) -> _Match:
        if not self.text.startswith("![[", i):
            return None
        close = self.text.find("]]", i + 3)
        if close <= i + 3:
            return None
        return close + 2, Embed(self.text[i + 3 : close])

    def _wikilink(self, i: int) -> _Match:
        if not self.text.startswith("[[", i):
            return None
        close = self.text.find("]]", i + 2)
        if close <= i + 2:
            return None
        inner = self.text[i + 2 : close]
        target, pipe, display = inner.partition("|")
        return close + 2, WikiLink(target, display if pipe else None)

    def _image(self, i: int) -> _Match:
        text = self.text
        if not text.startswith("![", i):
            return None
        alt_end = text.find("]", i + 2)
        if alt_end == -1 or not text.startswith("(", alt_end + 1):
            return None
        src_end = text.find(")", alt_end + 2)
        if src_end == -1:
            return None
        src, title = _split_title(text[alt_end + 2 : src_end])
        return src_end + 1, Image(src=src, alt=text[i + 2 : alt_end], title=title)

    def _link(self, i: int) -> _Match:
        text = self.text
        if text[i] != "[":
            return None
        label_end = find_closing_bracket(text, i)
        if label_end == -1 or not text.startswith("(", label_end + 1):
            return None
        href_end = text.find(")", label_end + 2)
        if href_end == -1:
            return None
        href, title = _split_title(text[label_end + 2 : href_end])
        children = self._children(text[i + 1 : label_end])
        return href_end + 1, Link(href=href, children=children, title=title)

    def _autolink(self, i: int) -> _Match:
        text = self.text
        if text[i] != "<":
            return None
        close = text.find(">", i + 1)
        if close == -1:
            return None
        url = text[i + 1 : close]
        if not _AUTOLINK_RE.match(url):
            return None
        return close + 1, Link(href=url, children=(Text(url),))

    def _paired(self, i: int) -> _Match:
        text = self.text
        for delim, cls in _PAIRED:
            if not text.startswith(delim, i):
                continue
            start = i + len(delim)
            if cls in (Bold, BoldItalic) and start < len(text) and text[start].isspace():
                continue
            end = find_delimiter(text, delim, start)
            if end > start:
                return end + len(delim), cls(self._children(text[start:end]))
        return None

    def _italic(self, i: int) -> _Match:
        text = self.text
        delim = text[i]
        if delim not in "*_":
            return None
        start = i + 1
        if start < len(text) and text[start].isspace():
            return None
        end = find_delimiter(text, delim, start)
        if end <= start or text[end - 1].isspace():
            return None
        return end + 1, Italic(self._children(text[start:end]))

    def _code(self, i: int) -> _Match:
        text = self.text
        if text[i] != "`":
            return None
        delim = "``" if text.startswith("``", i) else "`"
        start = i + len(delim)
        end = find_delimiter(text, delim, start)
        if end <= start:
            return None
        return end + len(delim), Code(text[start:end])


def _split_title(target: str) -> tuple[str, str | None]:
    m = _TITLED_TARGET_RE.match(target)
    if m:
        return m.group(1), m.group(2)
    return target, None


def find_closing_bracket(text: str, start: int) -> int:
    """Index of the ``]`` matching the ``[`` at ``start``, or -1."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] == "[":
            depth += 1
        elif text[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    return -1


def find_delimiter(text: str, delim: str, start: int) -> int:
    """Index of the next unescaped ``delim`` at or after ``start``, or -1."""
    i = start
    while i < len(text):
        idx = text.find(delim, i)
        if idx == -1:
            return -1
        if idx == 0 or text[idx - 1] != "\\":
            return idx
        i = idx + 1
    return -1


def merge_text(tokens: list[InlineToken]) -> list[InlineToken]:
    """Collapse runs of adjacent Text tokens into one."""
    merged: list[InlineToken] = []
    for token in tokens:
        if isinstance(token, Text) and merged and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].content + token.content)
        else:
            merged.append(token)
    return merged
