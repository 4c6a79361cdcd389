"""Command line interface for c3bridge."""

from c3bridge.cli.app import __version__, app, main


__all__ = ["__version__", "app", "main"]
