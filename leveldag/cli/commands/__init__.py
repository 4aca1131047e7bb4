"""CLI command modules."""

from . import graph_cmd, run_cmd

__all__ = ["graph_cmd", "run_cmd"]
