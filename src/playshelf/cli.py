"""Command-line interface for PlayShelf."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from playshelf import __version__
from playshelf.catalog import Catalog
from playshelf.config.config import Config, load_config
from playshelf.observability.logging import configure_logging
from playshelf.protocols import CallerInputError, MetadataResult
from playshelf.service import MetadataService

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """PlayShelf - app catalog with live store metadata."""
    ctx.ensure_object(dict)
    loaded = load_config(Path(config) if config else None)
    if log_level:
        loaded.monitoring.log_level = log_level
    configure_logging(loaded.monitoring)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument("app_ids", nargs=-1, required=True)
@click.option("--compact", is_flag=True, help="Print one JSON document per line")
@click.pass_context
def fetch(ctx: click.Context, app_ids: tuple[str, ...], compact: bool) -> None:
    """Scrape metadata for one or more app ids and print it as JSON."""
    config: Config = ctx.obj["config"]

    async def run() -> list[MetadataResult]:
        async with MetadataService.from_config(config) as service:
            return await service.get_many(app_ids)

    try:
        results = asyncio.run(run())
    except CallerInputError as e:
        raise click.BadParameter(str(e), param_hint="APP_IDS") from e

    for result in results:
        if result.degraded:
            err_console.print(
                f"[yellow]{result.metadata.app_id}: degraded ({result.reason.value if result.reason else 'unknown'}"
                f"{f', status {result.status}' if result.status else ''})[/yellow]"
            )
        payload = result.metadata.to_dict()
        click.echo(json.dumps(payload, ensure_ascii=False, indent=None if compact else 2))

    if all(result.degraded for result in results):
        sys.exit(1)


@cli.command()
@click.option("--category", default=None, help="Only list apps of this category")
@click.option("--query", "-q", default="", help="Case-insensitive search text")
@click.option("--featured", is_flag=True, help="Only list featured apps")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def catalog(ctx: click.Context, category: Optional[str], query: str, featured: bool, as_json: bool) -> None:
    """List the apps of the catalog."""
    config: Config = ctx.obj["config"]
    apps = Catalog.from_yaml(config.catalog.path)
    entries = apps.search(query, category=category, featured=featured)

    if as_json:
        click.echo(json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False, indent=2))
        return

    table = Table(title=f"Catalog ({len(entries)} of {len(apps)})")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Category", style="magenta")
    table.add_column("Featured", justify="center")
    for entry in entries:
        table.add_row(entry.id, entry.title, entry.category, "★" if entry.featured else "")
    console.print(table)


@cli.command()
@click.argument("app_id")
@click.pass_context
def show(ctx: click.Context, app_id: str) -> None:
    """Print the catalog entry of one app as JSON."""
    config: Config = ctx.obj["config"]
    entry = Catalog.from_yaml(config.catalog.path).get(app_id)
    if entry is None:
        raise click.ClickException(f"App not found in catalog: {app_id}")
    click.echo(json.dumps(entry.to_dict(), ensure_ascii=False, indent=2))


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to the configured host)")
@click.option("--port", default=None, type=int, help="Port (defaults to the configured port)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the HTTP API."""
    from playshelf.web.main import run_web_server

    config: Config = ctx.obj["config"]
    run_web_server(
        host=host or config.monitoring.web.host,
        port=port or config.monitoring.web.port,
        config=config,
    )


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
