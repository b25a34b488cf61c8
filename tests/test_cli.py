"""Tests for the wikidown CLI."""

import json
from textwrap import dedent

import pytest
import yaml
from click.testing import CliRunner

from wikidown.cli import main


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("VAULT_PATH", "PUBLISH_TAG", "DB_PATH", "WIKI_BASE_PATH", "MAX_DEPTH", "LOG_LEVEL"):
        monkeypatch.delenv(f"WIKIDOWN_{name}", raising=False)
    return CliRunner()


@pytest.fixture
def note(tmp_path):
    path = tmp_path / "note.md"
    path.write_text(
        dedent("""\
        ---
        title: Note
        tags: [a, b]
        ---
        # Hi

        See [[Other Page]] and [[Third|3rd]].
        """)
    )
    return path


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    (root / "01.01.01 Alpha.md").write_text("# Alpha\nLinks to [[Beta]] #wiki")
    (root / "Beta.md").write_text("# Beta\nBack to [[Alpha]] #wiki")
    (root / "Private.md").write_text("# Private\nnot published")
    return root


def test_render_html(runner, note):
    result = runner.invoke(main, ["render", str(note)])
    assert result.exit_code == 0, result.output
    assert "<h1>Hi</h1>" in result.output
    assert 'href="/pages/other-page"' in result.output


def test_render_base_path(runner, note):
    result = runner.invoke(main, ["render", str(note), "--base-path", "/wiki"])
    assert 'href="/wiki/third"' in result.output


def test_render_text(runner, note):
    result = runner.invoke(main, ["render", str(note), "--format", "text"])
    assert result.output == "Hi\n\nSee Other Page and 3rd.\n"


def test_render_json(runner, note):
    result = runner.invoke(main, ["render", str(note), "--format", "json"])
    tree = json.loads(result.output)
    assert tree["frontmatter"] == {"title": "Note", "tags": ["a", "b"]}
    assert tree["tokens"][0] == {
        "type": "heading",
        "level": 1,
        "children": [{"type": "text", "content": "Hi"}],
    }


def test_frontmatter(runner, note):
    result = runner.invoke(main, ["frontmatter", str(note)])
    assert result.exit_code == 0
    assert yaml.safe_load(result.output) == {"title": "Note", "tags": ["a", "b"]}


def test_links(runner, note):
    result = runner.invoke(main, ["links", str(note)])
    assert result.output.splitlines() == ["Other Page", "Third"]


def test_sync_and_show(runner, vault, tmp_path):
    db = str(tmp_path / "wiki.db")
    result = runner.invoke(main, ["sync", str(vault), "--db", db])
    assert result.exit_code == 0, result.output
    assert "Created 2, updated 0" in result.output

    result = runner.invoke(main, ["sync", str(vault), "--db", db])
    assert "Created 0, updated 2" in result.output

    result = runner.invoke(main, ["show", "ALPHA", "--db", db])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("Alpha\n\nLinks to Beta")
    assert "Backlinks: Beta" in result.output


def test_show_missing_page(runner, tmp_path):
    result = runner.invoke(main, ["show", "Nowhere", "--db", str(tmp_path / "empty.db")])
    assert result.exit_code == 1
    assert "Page not found: Nowhere" in result.output


def test_stats(runner, vault):
    result = runner.invoke(main, ["stats", str(vault)])
    assert result.exit_code == 0, result.output
    assert "Pages: 2" in result.output
    assert "Wikilinks between pages: 2" in result.output
    assert "Connected components: 1" in result.output


def test_invalid_config_is_reported(runner, tmp_path, note):
    (tmp_path / "wikidown.yaml").write_text("publish_tag: [broken\n")
    result = runner.invoke(main, ["render", str(note)])
    assert result.exit_code == 1
    assert "Invalid wikidown.yaml" in result.output
