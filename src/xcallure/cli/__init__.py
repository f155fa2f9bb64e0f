"""CLI package for xcallure."""

from xcallure.cli.app import app, main

__all__ = ["app", "main"]
