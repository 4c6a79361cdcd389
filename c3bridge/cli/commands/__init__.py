"""CLI command modules."""

import typer

from c3bridge.cli.commands.cache import register_cache_commands
from c3bridge.cli.commands.compile import register_commands as register_compile_commands
from c3bridge.cli.commands.toolchain import (
    register_commands as register_toolchain_commands,
)


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Calling this again for the same app is a no-op.

    Args:
        app: The main Typer app
    """
    if getattr(app, "_c3bridge_commands_registered", False):
        return
    register_compile_commands(app)
    register_toolchain_commands(app)
    register_cache_commands(app)
    app._c3bridge_commands_registered = True  # type: ignore[attr-defined]
