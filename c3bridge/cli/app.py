"""Main CLI application for c3bridge."""

import logging
import sys
from importlib.metadata import distribution
from typing import Annotated

import typer

from c3bridge.cli.decorators.error_handling import print_stack_trace_if_verbose
from c3bridge.config.loader import load_settings
from c3bridge.config.settings import C3BridgeSettings
from c3bridge.core.errors import ConfigError
from c3bridge.core.logging import setup_logging


__all__ = ["AppContext", "app", "main", "__version__"]


__version__ = distribution("c3bridge").version

logger = logging.getLogger(__name__)


class AppContext:
    """Application context shared by all commands."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: str | None = None,
    ) -> None:
        """Initialize AppContext.

        Args:
            verbose: Verbosity level
            log_file: Path to log file
            config_file: Path to configuration file
        """
        self.verbose = verbose
        self.log_file = log_file
        self.config_file = config_file
        self._settings: C3BridgeSettings | None = None

    @property
    def settings(self) -> C3BridgeSettings:
        """Settings, loaded on first use so config errors surface per command."""
        if self._settings is None:
            self._settings = load_settings(self.config_file)
        return self._settings


app = typer.Typer(
    name="c3bridge",
    help=f"""c3bridge v{__version__}

Compile C3 sources into object files or libraries and print the
directives a host build system needs to link them.

Common workflows:
  • Build a static library:  c3bridge compile src/ --name thing
  • Release shared library:  c3bridge compile src/ --name thing --kind shared --profile release
  • Inspect the compiler:    c3bridge toolchain""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file (JSON lines)")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to configuration file"),
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """c3bridge: C3 compilation for host build systems."""
    if version:
        print(f"c3bridge v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    app_context = AppContext(verbose=verbose, log_file=log_file, config_file=config_file)
    ctx.obj = app_context

    log_level: int | str = logging.WARNING
    if debug:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG
    elif log_file is None:
        # No CLI flags: fall back to the configured level, if config loads
        log_level = _configured_log_level(app_context)

    setup_logging(log_level=log_level, log_file=log_file)


def _configured_log_level(app_context: AppContext) -> int | str:
    try:
        return app_context.settings.log_level
    except ConfigError:
        # Reported again, with context, by the command that needs settings
        return logging.WARNING


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from c3bridge.cli.commands import register_all_commands

        register_all_commands(app)

        app()
        exit_code = 0

    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
