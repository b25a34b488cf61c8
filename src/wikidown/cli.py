"""CLI entrypoint for wikidown."""

from __future__ import annotations

import json
from pathlib import Path

import click
import networkx as nx
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from wikidown._logging import configure_logging
from wikidown.config import Settings, load_config
from wikidown.links import build_link_graph, collect_wikilinks
from wikidown.parser import parse
from wikidown.render import render
from wikidown.renderers import (
    create_html_renderer,
    create_text_renderer,
    create_tree_renderer,
)
from wikidown.store import PageStore
from wikidown.vault import collect_pages

console = Console()

FORMATS = ["html", "text", "json"]


def _render_markdown(markdown: str, fmt: str, settings: Settings, base_path: str | None) -> str:
    result = parse(markdown, max_depth=settings.max_depth)
    if fmt == "html":
        return render(result, create_html_renderer(base_path or settings.wiki_base_path))
    if fmt == "text":
        return render(result, create_text_renderer()).strip()
    tree = {"frontmatter": result.frontmatter, "tokens": render(result, create_tree_renderer())}
    return json.dumps(tree, indent=2, ensure_ascii=False, default=str)


def _read(file: str) -> str:
    return Path(file).read_text(encoding="utf-8")


@click.group()
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING...).")
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """wikidown: parse and publish Obsidian-flavoured markdown."""
    try:
        settings = load_config({"log_level": log_level})
    except (ValueError, ValidationError) as e:
        raise click.ClickException(str(e)) from e
    configure_logging(settings.log_level)
    ctx.obj = settings


@main.command("render")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="html", help="Output format.")
@click.option("--base-path", default=None, help="URL prefix for wikilinks.")
@click.pass_obj
def render_cmd(settings: Settings, file: str, fmt: str, base_path: str | None):
    """Render a markdown FILE to HTML, plain text or a JSON token tree."""
    click.echo(_render_markdown(_read(file), fmt, settings, base_path))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def frontmatter(settings: Settings, file: str):
    """Print the frontmatter of FILE as YAML."""
    result = parse(_read(file), max_depth=settings.max_depth)
    if not result.frontmatter:
        console.print("[yellow]No frontmatter.[/yellow]")
        return
    click.echo(yaml.safe_dump(result.frontmatter, sort_keys=False, allow_unicode=True), nl=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def links(settings: Settings, file: str):
    """List the wikilink targets of FILE, one per line."""
    for target in collect_wikilinks(parse(_read(file), max_depth=settings.max_depth)):
        click.echo(target)


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.option("--tag", default=None, help="Publish tag (without #).")
@click.option("--db", default=None, help="SQLite database path.")
@click.pass_obj
def sync(settings: Settings, vault: str, tag: str | None, db: str | None):
    """Collect tagged notes from VAULT and upsert them into the page store."""
    tag = tag or settings.publish_tag

    with console.status("Collecting pages..."):
        pages = collect_pages(vault, tag=tag)
    console.print(f"Found [bold]{len(pages)}[/bold] pages tagged #{tag} in {vault}")

    if not pages:
        console.print("[yellow]Nothing to sync.[/yellow]")
        return

    with PageStore(db or settings.db_path) as store:
        with console.status("Syncing..."):
            result = store.sync(pages)

    console.print(
        f"[green]Created {result.created}, updated {result.updated}.[/green]"
    )
    for error in result.errors:
        console.print(f"[red]{error}[/red]")


@main.command()
@click.argument("name")
@click.option("--db", default=None, help="SQLite database path.")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="text", help="Output format.")
@click.pass_obj
def show(settings: Settings, name: str, db: str | None, fmt: str):
    """Render the stored page NAME (case-insensitive)."""
    with PageStore(db or settings.db_path) as store:
        page = store.get(name)
    if page is None:
        raise click.ClickException(f"Page not found: {name}")

    click.echo(_render_markdown(page.content or "", fmt, settings, None))
    if page.backlinks:
        console.print(f"\n[dim]Backlinks:[/dim] {', '.join(page.backlinks)}")


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.option("--tag", default=None, help="Publish tag (without #).")
@click.option("--top-k", default=10, help="Number of most linked pages to show.")
@click.pass_obj
def stats(settings: Settings, vault: str, tag: str | None, top_k: int):
    """Print statistics about the link structure of the published pages."""
    pages = collect_pages(vault, tag=tag or settings.publish_tag)
    link_graph = build_link_graph(pages)

    console.print(f"Pages: {len(pages)}")
    console.print(f"Wikilinks between pages: {link_graph.number_of_edges()}")

    if not pages:
        return

    components = list(nx.weakly_connected_components(link_graph))
    console.print(f"Connected components: {len(components)}")

    isolates = list(nx.isolates(link_graph))
    console.print(f"Isolated pages (no links): {len(isolates)}")

    if link_graph.number_of_edges() == 0:
        return

    console.print(f"Graph density: {nx.density(link_graph):.4f}")

    ranked = sorted(
        (page for page in pages if page.backlinks),
        key=lambda p: (-link_graph.in_degree(p.name.lower()), p.name.lower()),
    )[:top_k]

    table = Table(title="Most Linked Pages")
    table.add_column("#", style="dim", width=4)
    table.add_column("Page", style="cyan")
    table.add_column("Inbound", justify="right")
    table.add_column("Backlinks", justify="right", style="bold green")
    for i, page in enumerate(ranked, 1):
        table.add_row(
            str(i),
            page.name,
            str(link_graph.in_degree(page.name.lower())),
            str(len(page.backlinks)),
        )
    console.print(table)


if __name__ == "__main__":
    main()
