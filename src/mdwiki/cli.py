"""mdwiki CLI.

Commands:
    mdwiki generate [CONTENT_DIR] [OUTPUT]   write the static content.json index
    mdwiki migrate-slugs [CONTENT_DIR]       add missing slugs, repair delimiters
    mdwiki search CONTENT_DIR QUERY          search notes, print snippets
    mdwiki watch [CONTENT_DIR]               keep the index live, print each update

CONTENT_DIR, OUTPUT and the poll interval default to the ``MDWIKI_*``
environment variables (see :mod:`mdwiki.config`).
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import click

from mdwiki.config import Settings
from mdwiki.db import IndexDB
from mdwiki.errors import WikiError
from mdwiki.generate import generate_content
from mdwiki.index import scan
from mdwiki.live import LiveIndex, PollingWatcher, default_watcher
from mdwiki.migrate import migrate_slugs
from mdwiki.node import Snapshot


def _content_dir(value: str | None) -> Path:
    return Path(value) if value else Settings.from_env().content_dir


@click.group()
@click.version_option(package_name="mdwiki")
@click.option("-v", "--verbose", is_flag=True, help="Log at INFO level")
def cli(verbose: bool) -> None:
    """Index and maintain a directory of markdown notes."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@cli.command()
@click.argument("content_dir", required=False)
@click.argument("output", required=False)
def generate(content_dir: str | None, output: str | None) -> None:
    """Write the {nodes, config} index document as JSON."""
    out = Path(output) if output else Settings.from_env().output
    try:
        document = generate_content(_content_dir(content_dir), out)
    except WikiError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Generated {out} with {len(document['nodes'])} nodes.")


@cli.command("migrate-slugs")
@click.argument("content_dir", required=False)
def migrate_slugs_cmd(content_dir: str | None) -> None:
    """Add a slug to every note that lacks one."""
    changed = migrate_slugs(_content_dir(content_dir))
    for path in changed:
        click.echo(f"Updated {path}")
    click.echo(f"Migration complete: {len(changed)} file(s) changed.")


@cli.command()
@click.argument("content_dir")
@click.argument("query")
@click.option("--limit", default=20, show_default=True, help="Maximum number of results")
def search(content_dir: str, query: str, limit: int) -> None:
    """Search note titles and content."""
    try:
        snapshot = scan(Path(content_dir))
    except WikiError as exc:
        raise click.ClickException(str(exc)) from exc
    with IndexDB(snapshot) as db:
        hits = db.search(query, limit=limit)
    if hits.is_empty():
        click.echo("No matches.")
        return
    for row in hits.iter_rows(named=True):
        click.echo(f"{row['id']}  {row['title']}")
        click.echo(f"    {row['snippet']}")


@cli.command()
@click.argument("content_dir", required=False)
@click.option("--interval", type=float, default=None, help="Poll interval in seconds")
@click.option("--poll", is_flag=True, help="Poll for changes instead of using inotify")
def watch(content_dir: str | None, interval: float | None, poll: bool) -> None:
    """Watch CONTENT_DIR and print a line for every index update."""
    settings = Settings.from_env()

    def _echo(snapshot: Snapshot) -> None:
        folders = sum(1 for n in snapshot.nodes if n.is_folder)
        click.echo(
            f"[{snapshot.config.get('title')}] {len(snapshot.nodes) - folders} notes, {folders} folders"
        )

    interval = interval or settings.poll_interval
    watcher = PollingWatcher(interval) if poll else default_watcher(interval)
    live = LiveIndex(_echo, watcher)
    try:
        live.initialize(_content_dir(content_dir))
    except WikiError as exc:
        raise click.ClickException(str(exc)) from exc
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        click.echo("Stopping…")
    finally:
        live.teardown()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
