"""CLI helper utilities for leveldag commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from leveldag.core.config import LevelDAGConfig, load_config
from leveldag.core.domain import Item, LeveledGraph, assign_levels
from leveldag.core.domain.loader import load_items
from leveldag.core.exceptions import CycleDetectedError, LevelDAGError

console = Console()


def get_config(ctx: typer.Context | None) -> LevelDAGConfig:
    """Return the configuration stored by the root callback, loading it if absent."""
    obj: Any = getattr(ctx, "obj", None) if ctx is not None else None
    if isinstance(obj, dict) and isinstance(obj.get("config"), LevelDAGConfig):
        return obj["config"]
    return load_config()


def load_items_or_exit(path: Path) -> tuple[str, dict[str, Item]]:
    """Load an item file, printing the error and exiting with code 1 on failure."""
    try:
        return load_items(path)
    except LevelDAGError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e


def level_or_exit(items: dict[str, Item]) -> LeveledGraph:
    """Assign levels, printing cycle members and exiting with code 1 on a cycle."""
    try:
        return assign_levels(items)
    except CycleDetectedError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
