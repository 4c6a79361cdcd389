"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from c3bridge.core.errors import (
    C3BridgeError,
    CompilationFailed,
    ConfigError,
    ResolutionError,
    ToolchainError,
)
from c3bridge.core.structlog_logger import get_struct_logger
from c3bridge.models.diagnostics import DiagnosticSource


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle c3bridge exceptions in CLI commands.

    Every :class:`C3BridgeError` is reported on stderr and mapped to exit
    code 1. Compiler diagnostics carried by a failed compilation are printed
    in full.

    Args:
        func: The function to decorate

    Returns:
        Decorated function with error handling
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort):
            raise
        except CompilationFailed as e:
            logger.error("compilation_failed", error=str(e), exit_code=e.exit_code)
            print_diagnostics(e)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except ToolchainError as e:
            logger.error("toolchain_error", error=str(e))
            print_error(str(e))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except ResolutionError as e:
            logger.error("source_resolution_error", error=str(e))
            print_error(str(e))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except ConfigError as e:
            logger.error("configuration_error", error=str(e))
            print_error(str(e))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except C3BridgeError as e:
            logger.error("c3bridge_error", error=str(e))
            print_error(str(e))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except Exception as e:
            exc_info = logger.isEnabledFor(logging.DEBUG)
            logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            print_error(f"Unexpected error: {e}")
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def print_error(message: str) -> None:
    Console(stderr=True).print(
        f"[bold red]error:[/bold red] {escape(message)}", highlight=False
    )


def print_diagnostics(error: CompilationFailed) -> None:
    """Print a failed compilation's diagnostics, errors highlighted."""
    console = Console(stderr=True)
    console.print(f"[bold red]error:[/bold red] {escape(str(error))}", highlight=False)
    for diagnostic in error.diagnostics:
        style = "red" if diagnostic.is_error else "yellow"
        if diagnostic.source is DiagnosticSource.UNRECOGNIZED:
            style = "dim"
        console.print(diagnostic.format(), style=style, markup=False, highlight=False)


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
