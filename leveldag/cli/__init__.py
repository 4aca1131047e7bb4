"""Command-line interface for leveldag."""

from leveldag.cli.main import app, main

__all__ = ["app", "main"]
