"""SQLite store for published pages."""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from wikidown.vault import Page

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    created: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class StoredPage:
    id: int
    name: str
    content: Optional[str]
    backlinks: list[str]
    updated_at: int


class PageStore:
    """Pages keyed by case-insensitive name, markdown stored unrendered."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS pages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                content TEXT,
                backlinks TEXT NOT NULL DEFAULT '[]',
                updated_at INTEGER NOT NULL DEFAULT 0
            );
            CREATE INDEX IF NOT EXISTS idx_pages_lower_name ON pages(LOWER(name));
        """)
        self.conn.commit()

    def _find_id(self, name: str) -> Optional[int]:
        row = self.conn.execute(
            "SELECT id FROM pages WHERE LOWER(name) = LOWER(?)", (name,)
        ).fetchone()
        return row["id"] if row else None

    def sync(self, pages: Iterable[Page]) -> SyncResult:
        """Insert new pages and update existing ones in a single transaction.

        Pages are matched on their lowercased name; an existing row keeps its
        original name. Pages without a name are skipped and reported in
        ``errors``.
        """
        result = SyncResult()
        with self.conn:
            for page in pages:
                if not page.name or not isinstance(page.name, str):
                    result.errors.append("Page missing name")
                    continue

                backlinks = json.dumps(list(page.backlinks or []))
                existing_id = self._find_id(page.name)
                if existing_id is not None:
                    self.conn.execute(
                        "UPDATE pages SET content = ?, backlinks = ?, updated_at = ? WHERE id = ?",
                        (page.content, backlinks, page.updated_at, existing_id),
                    )
                    result.updated += 1
                else:
                    self.conn.execute(
                        "INSERT INTO pages (name, content, backlinks, updated_at) VALUES (?, ?, ?, ?)",
                        (page.name, page.content, backlinks, page.updated_at),
                    )
                    result.created += 1

        logger.info(
            "Synced pages: %d created, %d updated, %d errors",
            result.created, result.updated, len(result.errors),
        )
        return result

    def get(self, name: str) -> Optional[StoredPage]:
        row = self.conn.execute(
            "SELECT * FROM pages WHERE LOWER(name) = LOWER(?)", (name,)
        ).fetchone()
        return self._row_to_page(row) if row else None

    def list_names(self) -> list[str]:
        rows = self.conn.execute("SELECT name FROM pages ORDER BY LOWER(name)").fetchall()
        return [row["name"] for row in rows]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM pages").fetchone()[0]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> PageStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def _row_to_page(row: sqlite3.Row) -> StoredPage:
        return StoredPage(
            id=row["id"],
            name=row["name"],
            content=row["content"],
            backlinks=json.loads(row["backlinks"] or "[]"),
            updated_at=row["updated_at"],
        )
