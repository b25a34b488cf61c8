"""Collect publishable pages from an Obsidian vault."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from wikidown.links import calculate_backlinks, collect_wikilinks
from wikidown.parser import parse

logger = logging.getLogger(__name__)

# Numeric note id such as "04.99.06" or "04.99.1234"
_ID = r"\d{2}\.\d{2}\.\d+"
_ID_PREFIX_RE = re.compile(rf"^{_ID}\s+")

# [[04.99.06 Name]] and [[04.99.06 Name|Display]]
_PREFIXED_WIKILINK_RE = re.compile(rf"\[\[({_ID}\s+)([^\]|]+)(\|[^\]]+)?\]\]")

_TAG_RE = re.compile(r"#\w+")
_DM_SECTION_RE = re.compile(r"@@dm[\s\S]*?@@dm")
_EXTRA_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n")

_SKIP_DIRS = {"node_modules"}


@dataclass
class Page:
    """A vault note selected for publishing."""

    name: str
    content: str  # cleaned markdown, frontmatter included
    links: list[str] = field(default_factory=list)  # wikilink targets
    backlinks: list[str] = field(default_factory=list)
    updated_at: int = 0  # unix seconds

    @property
    def slug(self) -> str:
        return self.name.lower()


def has_publish_tag(content: str, tag: str) -> bool:
    """True if ``#tag`` appears as a whole word (``#wiki`` but not ``#wikipedia``)."""
    return re.search(rf"#{re.escape(tag)}\b", content) is not None


def strip_tags(content: str) -> str:
    """Remove every ``#tag`` and collapse the blank lines left behind."""
    return _EXTRA_BLANK_LINES_RE.sub("\n\n", _TAG_RE.sub("", content)).strip()


def strip_dm_sections(content: str) -> str:
    """Remove private ``@@dm ... @@dm`` sections."""
    return _EXTRA_BLANK_LINES_RE.sub("\n\n", _DM_SECTION_RE.sub("", content)).strip()


def strip_wikilink_prefixes(content: str) -> str:
    """``[[04.99.06 Ashenport|Port]]`` -> ``[[Ashenport|Port]]``."""
    return _PREFIXED_WIKILINK_RE.sub(r"[[\2\3]]", content)


def parse_title(filename: str) -> str:
    """Page name from a file name: drop ``.md`` and any ``dd.dd.dd`` id prefix."""
    name = filename[:-3] if filename.endswith(".md") else filename
    return _ID_PREFIX_RE.sub("", name)


def find_markdown_files(vault: Path) -> list[Path]:
    """All ``.md`` files under ``vault``, skipping hidden and tooling dirs."""
    files: list[Path] = []
    for md_file in sorted(vault.rglob("*.md")):
        parts = md_file.relative_to(vault).parts
        if any(part.startswith(".") or part in _SKIP_DIRS for part in parts[:-1]):
            continue
        if md_file.is_file():
            files.append(md_file)
    return files


def clean_content(content: str) -> str:
    return strip_wikilink_prefixes(strip_dm_sections(strip_tags(content)))


def load_page(path: Path, raw: str | None = None) -> Page:
    """Build a Page from a note, links taken from its parsed wikilinks."""
    if raw is None:
        raw = path.read_text(encoding="utf-8")
    content = clean_content(raw)
    return Page(
        name=parse_title(path.name),
        content=content,
        links=collect_wikilinks(parse(content)),
        updated_at=int(path.stat().st_mtime),
    )


def collect_pages(vault_path: str | Path, tag: str = "wiki") -> list[Page]:
    """Load every note tagged ``#tag`` from a vault and compute backlinks.

    Raises:
        FileNotFoundError: If ``vault_path`` is not a directory.
    """
    vault = Path(vault_path)
    if not vault.is_dir():
        raise FileNotFoundError(f"Vault directory not found: {vault}")

    pages: list[Page] = []
    for md_file in find_markdown_files(vault):
        try:
            raw = md_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable note %s: %s", md_file, e)
            continue
        if not has_publish_tag(raw, tag):
            continue
        pages.append(load_page(md_file, raw))

    calculate_backlinks(pages)
    logger.info("Collected %d pages tagged #%s from %s", len(pages), tag, vault)
    return pages
