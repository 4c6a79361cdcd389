"""Toolchain command for c3bridge CLI."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from c3bridge.cli.app import AppContext
from c3bridge.cli.decorators import handle_errors
from c3bridge.models.toolchain import ToolchainInfo
from c3bridge.toolchain.locator import create_toolchain_locator
from c3bridge.toolchain.targets import host_target


console = Console()


def _toolchain_table(info: ToolchainInfo, minimum: str) -> Table:
    table = Table(title="c3c Toolchain", show_header=True, header_style="bold cyan")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Path", str(info.path))
    table.add_row("Version", f"[green]{info.version}[/green]")
    table.add_row("Minimum supported", minimum)
    table.add_row("Host target", host_target())
    if info.targets:
        table.add_row("Targets", ", ".join(info.targets))
    else:
        table.add_row("Targets", "[dim]not reported[/dim]")
    return table


@handle_errors
def toolchain_command(
    ctx: typer.Context,
    compiler: Annotated[
        Path | None, typer.Option("--compiler", help="Path to the c3c executable")
    ] = None,
) -> None:
    """Show the c3c compiler that compilations will use."""
    app_ctx: AppContext = ctx.obj
    settings = app_ctx.settings

    locator = create_toolchain_locator(settings)
    info = locator.locate(compiler)
    console.print(_toolchain_table(info, str(locator.minimum_version)))


def register_commands(app: typer.Typer) -> None:
    """Register toolchain command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="toolchain")(toolchain_command)
