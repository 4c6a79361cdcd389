"""Decorators for CLI commands."""

from c3bridge.cli.decorators.error_handling import handle_errors


__all__ = ["handle_errors"]
