"""Command-line interface for how."""

from how.cli.app import entrypoint, main

__all__ = ["entrypoint", "main"]
