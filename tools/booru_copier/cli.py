"""CLI entry-point for the booru copier."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import BooruConfig, CopierConfig, parse_api_key, parse_booru_host
from .copier import Copier

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # Suppress noisy libraries; httpx would also log urls carrying API keys
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _print_stats(stats: dict) -> None:
    table = Table(title="Copy Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for key, val in stats.items():
        table.add_row(key.capitalize(), str(val))
    console.print(table)


class BooruHost(click.ParamType):
    name = "url"

    def convert(self, value: str, param: click.Parameter | None, ctx: click.Context | None) -> str:
        try:
            return parse_booru_host(value)
        except ValueError:
            self.fail("Invalid booru url", param, ctx)


class ApiKey(click.ParamType):
    name = "key"

    def convert(self, value: str, param: click.Parameter | None, ctx: click.Context | None) -> str:
        try:
            return parse_api_key(value)
        except ValueError as exc:
            self.fail(f"Invalid API key: {exc}", param, ctx)


BOORU_HOST = BooruHost()
API_KEY = ApiKey()


@click.command()
@click.version_option(__version__, prog_name="Booru Copier")
@click.option("--source", type=BOORU_HOST, help="Source booru url, e.g. derpibooru.org")
@click.option("--source-key", type=API_KEY, help="Source booru API key")
@click.option("--target", type=BOORU_HOST, help="Target booru url")
@click.option("--target-key", type=API_KEY, help="Target booru API key")
@click.option("--query", help="Search query on the source booru")
@click.option("-y", "--yes", is_flag=True, help="Don't ask for confirmation before uploading")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(
    source: str | None,
    source_key: str | None,
    target: str | None,
    target_key: str | None,
    query: str | None,
    yes: bool,
    verbose: bool,
) -> None:
    """Copy images matching a search query from one booru to another.

    Anything not given as an option is asked for interactively.
    """
    _setup_logging(verbose)
    console.print(f"[bold]Booru Copier v{__version__}[/bold]")
    console.print()
    console.print("Ensure your filters are set correctly on the source booru. The active filter will be used when copying images.")
    console.print("API keys can be found on the Account page.")
    console.print()

    if source is None:
        source = click.prompt("Enter source booru url", type=BOORU_HOST)
    if source_key is None:
        source_key = click.prompt("Enter source booru API key", type=API_KEY)
    if target is None:
        target = click.prompt("Enter target booru url", type=BOORU_HOST)
    if target_key is None:
        target_key = click.prompt("Enter target booru API key", type=API_KEY)
    if query is None:
        console.print("Enter query to copy from the source booru to the target booru. Any query that can be made on the site will work.")
        query = click.prompt("Query").strip()

    def _confirm(total: int) -> bool:
        console.print(f"There are [cyan]{total}[/cyan] images in this query")
        if yes:
            return True
        return click.confirm("Ensure the query and image count are correct! Continue?", default=True)

    with Copier(BooruConfig(source, source_key), BooruConfig(target, target_key), CopierConfig()) as copier:
        console.print(f"[bold]Copying [cyan]{query}[/cyan] from {source} to {target}...[/bold]")
        result = copier.copy(query, confirm=_confirm)
        if result.total == 0:
            console.print("[red]✗[/red] This query has no images! Double-check the query and try again.")
            sys.exit(1)
        if result.cancelled:
            console.print("Cancelled.")
            return
        _print_stats(result.stats)
        console.print("[green]✓[/green] Complete!")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
