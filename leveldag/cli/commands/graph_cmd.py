"""Graph inspection commands for leveldag CLI."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from leveldag.cli.utils import console, level_or_exit, load_items_or_exit
from leveldag.core.domain import ancestors_of, descendants_of, flatten, render

app = typer.Typer()

ItemFileArg = Annotated[
    Path,
    typer.Argument(
        help="Path to item file (YAML or JSON)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]


@app.command("show")
def show_graph(item_file: ItemFileArg) -> None:
    """Print the levels of an item file."""
    _, items = load_items_or_exit(item_file)
    graph = level_or_exit(items)
    console.print(render(graph), markup=False, highlight=False)


@app.command("order")
def show_order(
    item_file: ItemFileArg,
    json_out: Annotated[
        bool,
        typer.Option("--json", help="Print the order as a JSON array"),
    ] = False,
) -> None:
    """Print items in topological order, dependencies first."""
    _, items = load_items_or_exit(item_file)
    order = [item.id for item in flatten(level_or_exit(items))]

    if json_out:
        typer.echo(json.dumps(order))
        return
    for item_id in order:
        typer.echo(item_id)


@app.command("validate")
def validate_graph(item_file: ItemFileArg) -> None:
    """Check that an item file forms an acyclic graph."""
    name, items = load_items_or_exit(item_file)
    console.print(f"[cyan]Validating: {escape(str(item_file))}[/cyan]")

    graph = level_or_exit(items)

    external = sorted(
        {dep for item in items.values() for dep in item.dependencies if dep not in items}
    )
    if external:
        console.print("[yellow]Warnings:[/yellow]")
        for dep in external:
            console.print(
                f"  [yellow]⚠[/yellow] dependency '{escape(dep)}' is not defined, ignored"
            )

    console.print("[green]✓ No cycles detected[/green]")
    console.print(f"  Name: {escape(name)}")
    console.print(f"  Items: {len(graph)}")
    console.print(f"  Levels: {len(graph.levels)}")
    widest = max((len(level) for level in graph.levels), default=0)
    console.print(f"  Max parallelism: {widest}")


@app.command("ancestors")
def show_ancestors(
    item_file: ItemFileArg,
    item_id: Annotated[str, typer.Argument(help="Item identifier")],
) -> None:
    """List every item the given item depends on, transitively."""
    _, items = load_items_or_exit(item_file)
    _require_item(items, item_id)
    for ancestor in sorted(ancestors_of(items, item_id)):
        typer.echo(ancestor)


@app.command("descendants")
def show_descendants(
    item_file: ItemFileArg,
    item_id: Annotated[str, typer.Argument(help="Item identifier")],
) -> None:
    """List every item that depends on the given item, transitively."""
    _, items = load_items_or_exit(item_file)
    _require_item(items, item_id)
    for descendant in sorted(descendants_of(items, item_id)):
        typer.echo(descendant)


def _require_item(items: dict, item_id: str) -> None:
    if item_id not in items:
        console.print(f"[red]Error: Item '{escape(item_id)}' not found[/red]")
        raise typer.Exit(1)
