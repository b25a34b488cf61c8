"""Tests for the SQLite page store."""

import pytest

from wikidown.store import PageStore
from wikidown.vault import Page


@pytest.fixture
def store(tmp_path):
    s = PageStore(tmp_path / "pages.db")
    yield s
    s.close()


def _pages():
    return [
        Page(name="Alpha", content="# Alpha", backlinks=["Beta"], updated_at=100),
        Page(name="beta", content="# Beta", updated_at=200),
    ]


def test_sync_creates_pages(store):
    result = store.sync(_pages())
    assert (result.created, result.updated, result.errors) == (2, 0, [])
    assert store.count() == 2


def test_sync_updates_case_insensitively(store):
    store.sync(_pages())
    result = store.sync([Page(name="ALPHA", content="# New", updated_at=300)])
    assert (result.created, result.updated) == (0, 1)

    page = store.get("alpha")
    assert page.name == "Alpha"  # stored name is kept
    assert page.content == "# New"
    assert page.backlinks == []
    assert page.updated_at == 300
    assert store.count() == 2


def test_sync_reports_nameless_pages(store):
    result = store.sync([Page(name="", content="orphan"), Page(name="Ok", content="")])
    assert result.errors == ["Page missing name"]
    assert result.created == 1


def test_get(store):
    store.sync(_pages())
    page = store.get("ALPHA")
    assert page.content == "# Alpha"
    assert page.backlinks == ["Beta"]
    assert page.updated_at == 100
    assert store.get("missing") is None


def test_list_names_sorted(store):
    store.sync(_pages() + [Page(name="Gamma", content="")])
    assert store.list_names() == ["Alpha", "beta", "Gamma"]


def test_persists_across_connections(tmp_path):
    db_path = tmp_path / "nested" / "wiki.db"
    with PageStore(db_path) as store:
        store.sync(_pages())
    assert store._conn is None

    with PageStore(db_path) as reopened:
        assert reopened.count() == 2
        assert reopened.get("beta").content == "# Beta"
