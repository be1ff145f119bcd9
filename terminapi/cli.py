"""
Command-line interface for Termin API.

This module provides the ``termin-api`` entry point. Every command exits with
status 0 on success and 1 on error, with the error message on stderr.
"""

import asyncio
import sys
from typing import Any, NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from terminapi import __version__
from terminapi.config import settings
from terminapi.core.models import HistoryEntry, Response
from terminapi.core.variables import merge_variables
from terminapi.exceptions import PersistenceError, ResourceNotFoundError, TerminAPIError
from terminapi.http.executor import RequestExecutor
from terminapi.logger import get_logger, setup_logger
from terminapi.storage.store import CollectionStore
from terminapi.utils.helpers import format_duration, format_size, truncate_string

# Initialize consoles for rich output
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def setup_cli_logging(verbose: bool = False) -> None:
    """Setup logging for CLI usage."""
    if verbose:
        setup_logger(level="DEBUG", log_format="simple")
    else:
        setup_logger(level=settings.log_level, log_format=settings.log_format)


class AppContext:
    """Per-invocation state; the store is opened on first use."""

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir
        self._store: Optional[CollectionStore] = None

    @property
    def store(self) -> CollectionStore:
        if self._store is None:
            self._store = CollectionStore(self.data_dir)
        return self._store


pass_app = click.make_pass_decorator(AppContext)


def _fail(prefix: str, error: BaseException) -> NoReturn:
    err_console.print(f"\n[red]✗ {prefix}:[/red] {escape(str(error))}\n")
    sys.exit(1)


def _unexpected(error: BaseException) -> NoReturn:
    logger.exception("Unexpected error")
    _fail("Unexpected error", error)


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Storage directory (default: TERMIN_API_DATA_DIR or ~/.termin-api)"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str], verbose: bool) -> None:
    """Termin API - API client for the terminal."""
    setup_cli_logging(verbose)
    ctx.obj = AppContext(data_dir)


@cli.command("list")
@pass_app
def list_collections(app: AppContext) -> None:
    """List all collections."""
    try:
        collections = app.store.load_collections()
    except TerminAPIError as e:
        _fail("List failed", e)

    console.print("\n[bold cyan]📁 Collections:[/bold cyan]\n")
    if not collections:
        console.print("[dim]  No collections found[/dim]")
        console.print("[dim]  Import one with: termin-api import <file>[/dim]\n")
        return

    for index, collection in enumerate(collections, start=1):
        console.print(f"[green]  {index}. {escape(collection.name)}[/green]")
        console.print(f"[dim]     ID: {collection.id}[/dim]", soft_wrap=True)
        console.print(f"[dim]     Requests: {len(collection.requests)}[/dim]\n")


@cli.command("import")
@click.argument("file", type=click.Path(dir_okay=False))
@pass_app
def import_collection(app: AppContext, file: str) -> None:
    """Import a collection from a JSON file."""
    try:
        collection = app.store.import_collection(file)
    except TerminAPIError as e:
        _fail("Import failed", e)
    except Exception as e:
        _unexpected(e)

    console.print("\n[green]✓ Successfully imported collection![/green]")
    console.print(f"[dim]  Name: {escape(collection.name)}[/dim]")
    console.print(f"[dim]  Requests: {len(collection.requests)}[/dim]")
    console.print(f"[dim]  ID: {collection.id}[/dim]\n", soft_wrap=True)


@cli.command("export")
@click.argument("collection_id")
@click.option("--output", "-o", default=None, help="Output file path (default: <collection-id>.json)")
@pass_app
def export_collection(app: AppContext, collection_id: str, output: Optional[str]) -> None:
    """Export a collection to a JSON file."""
    output_path = output or f"{collection_id}.json"
    try:
        app.store.export_collection(collection_id, output_path)
    except TerminAPIError as e:
        _fail("Export failed", e)
    except Exception as e:
        _unexpected(e)

    console.print("\n[green]✓ Successfully exported collection![/green]")
    console.print(f"[dim]  File: {escape(output_path)}[/dim]\n", soft_wrap=True)


@cli.command()
@click.argument("request_id")
@click.option("--env", "-e", "env", default=None, help="Environment id or name")
@pass_app
def run(app: AppContext, request_id: str, env: Optional[str]) -> None:
    """Run a saved request."""
    try:
        store = app.store
        collection, request = store.find_request(request_id)

        environment = None
        if env:
            environment = store.find_environment(env)
            if environment is None:
                raise ResourceNotFoundError(f"Environment not found: {env}")

        variables = merge_variables(
            collection.variables,
            environment.variables if environment else None,
        )
        request = collection.with_inherited_auth(request)

        console.print(f"\n[cyan]⚡ Running: {escape(request.name)}[/cyan]")
        console.print(f"[dim]   {request.method.value} {escape(request.url)}[/dim]\n", soft_wrap=True)

        executor = RequestExecutor.from_config(store.load_config())
        response = asyncio.run(executor.execute(request, variables))
    except TerminAPIError as e:
        _fail("Request failed", e)
    except Exception as e:
        _unexpected(e)

    try:
        store.add_to_history(HistoryEntry(request=request, response=response))
    except PersistenceError as e:
        logger.warning(f"Could not record history: {e}")

    _print_response(response)


def _print_response(response: Response) -> None:
    color = "green" if response.status < 400 else "yellow"
    console.print(f"[{color}]✓ Response received ({format_duration(response.time)})[/{color}]")
    console.print(f"[dim]  Status: {response.status} {escape(response.status_text)}[/dim]")
    console.print(f"[dim]  Size: {response.size} bytes[/dim]\n")

    console.print("[bold]Response:[/bold]")
    _print_data(response.data)
    console.print()


def _print_data(data: Any) -> None:
    if isinstance(data, (dict, list)):
        console.print_json(data=data)
    else:
        console.print(str(data), markup=False, highlight=False, soft_wrap=True)


@cli.command()
@pass_app
def environments(app: AppContext) -> None:
    """List all environments."""
    try:
        items = app.store.load_environments()
    except TerminAPIError as e:
        _fail("List failed", e)

    console.print("\n[bold cyan]🌐 Environments:[/bold cyan]\n")
    if not items:
        console.print("[dim]  No environments found[/dim]\n")
        return

    for environment in items:
        console.print(f"[green]  {escape(environment.name)}[/green]")
        console.print(f"[dim]     ID: {environment.id}[/dim]", soft_wrap=True)
        console.print(f"[dim]     Variables: {len(environment.variables)}[/dim]\n")


@cli.command()
@click.option("--limit", "-n", default=10, show_default=True, type=click.IntRange(min=1), help="Entries to show")
@pass_app
def history(app: AppContext, limit: int) -> None:
    """Show the most recent requests."""
    try:
        entries = app.store.load_history()[:limit]
    except TerminAPIError as e:
        _fail("History failed", e)

    if not entries:
        console.print("\n[dim]  History is empty[/dim]\n")
        return

    table = Table(title="Request History", show_header=True)
    table.add_column("When", style="dim")
    table.add_column("Method", style="cyan")
    table.add_column("URL")
    table.add_column("Status", justify="right")
    table.add_column("Time", justify="right", style="green")

    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.request.method.value,
            escape(truncate_string(entry.request.url, 60)),
            str(entry.response.status),
            format_duration(entry.response.time),
        )

    console.print(table)


@cli.command("clear-history")
@pass_app
def clear_history(app: AppContext) -> None:
    """Clear request history."""
    try:
        app.store.clear_history()
    except TerminAPIError as e:
        _fail("Clear failed", e)
    console.print("\n[green]✓ History cleared[/green]\n")


@cli.command()
@pass_app
def info(app: AppContext) -> None:
    """Show storage information."""
    try:
        store = app.store
        collections = store.load_collections()
        environment_count = len(store.load_environments())
        history_count = len(store.load_history())
        storage_size = store.get_storage_size()
    except TerminAPIError as e:
        _fail("Info failed", e)

    table = Table(title="Storage Information", show_header=True)
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Location", str(store.storage_path))
    table.add_row("Size", format_size(storage_size))
    table.add_row("Collections", str(len(collections)))
    table.add_row("Requests", str(sum(len(c.requests) for c in collections)))
    table.add_row("Environments", str(environment_count))
    table.add_row("History entries", str(history_count))

    console.print(table)


@cli.command()
def version() -> None:
    """Show version information."""
    console.print(f"Termin API version {__version__}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
