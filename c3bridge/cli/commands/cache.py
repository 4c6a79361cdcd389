"""Cache management commands for c3bridge CLI."""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from c3bridge.cli.app import AppContext
from c3bridge.cli.decorators import handle_errors
from c3bridge.core.cache import create_cache_from_settings


logger = logging.getLogger(__name__)
console = Console()

cache_app = typer.Typer(help="Compilation cache management")


def format_size_display(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} GB"


@cache_app.command(name="stats")
@handle_errors
def cache_stats(ctx: typer.Context) -> None:
    """Show compilation cache location and usage."""
    app_ctx: AppContext = ctx.obj
    settings = app_ctx.settings

    table = Table(title="Compilation Cache", show_header=True, header_style="bold cyan")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Strategy", settings.cache_strategy)

    if settings.cache_strategy == "disabled":
        table.add_row("Status", "[yellow]disabled[/yellow]")
        console.print(table)
        return

    cache = create_cache_from_settings(settings)
    try:
        stats = cache.get_stats()
    finally:
        cache.close()

    table.add_row("Location", str(settings.cache_path))
    table.add_row("Entries", str(stats.total_entries))
    table.add_row("Size", format_size_display(stats.total_size_bytes))
    table.add_row("Entry lifetime", f"{settings.cache_ttl_hours} h")
    console.print(table)


@cache_app.command(name="clear")
@handle_errors
def cache_clear(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Force deletion without confirmation"),
    ] = False,
) -> None:
    """Remove every cached compilation record.

    Compiled artifacts are left in place; only the cache index is cleared.
    """
    app_ctx: AppContext = ctx.obj
    settings = app_ctx.settings

    if settings.cache_strategy == "disabled":
        console.print("[yellow]Caching is disabled, nothing to clear[/yellow]")
        return

    if not force:
        confirm = typer.confirm(f"Clear compilation cache at {settings.cache_path}?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            return

    cache = create_cache_from_settings(settings)
    try:
        cache.clear()
    finally:
        cache.close()

    logger.info("Cleared compilation cache at %s", settings.cache_path)
    console.print(f"[green]Cleared compilation cache at {settings.cache_path}[/green]")


def register_cache_commands(app: typer.Typer) -> None:
    """Register cache commands with the main app.

    Args:
        app: The main Typer app
    """
    app.add_typer(cache_app, name="cache")
