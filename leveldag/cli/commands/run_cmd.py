"""Run shell commands attached to items, level by level."""

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.markup import escape
from rich.table import Table

from leveldag.cli.utils import console, get_config, level_or_exit, load_items_or_exit
from leveldag.core.domain import Item, flatten, render
from leveldag.core.exceptions import LevelDAGError
from leveldag.core.orchestration import (
    DAGResult,
    ExecutionOptions,
    NodeResult,
    execute,
    wrap_simple_work,
)

_OUTPUT_PREVIEW = 60


class CommandFailedError(LevelDAGError):
    """Raised when an item's shell command exits with a non-zero status."""

    def __init__(self, item_id: str, returncode: int, stderr: str) -> None:
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"command for '{item_id}' exited with {returncode}: {detail}")
        self.item_id = item_id
        self.returncode = returncode
        self.stderr = stderr


def _command_of(item: Item) -> str | None:
    data = item.data
    if isinstance(data, dict):
        command = data.get("command")
        return str(command) if command else None
    return None


async def run_item_command(item: Item) -> str:
    """Run the item's ``data.command`` in a shell and return its stdout.

    Items without a command succeed immediately with empty output.

    Raises
    ------
    CommandFailedError
        If the command exits with a non-zero status
    """
    command = _command_of(item)
    if command is None:
        return ""

    process = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise CommandFailedError(
            item.id, process.returncode or -1, stderr.decode(errors="replace")
        )
    return stdout.decode(errors="replace")


def run(
    ctx: typer.Context,
    item_file: Annotated[
        Path,
        typer.Argument(
            help="Path to item file (YAML or JSON)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", "-c", min=1, help="Max parallel items per level"),
    ] = None,
    sequential: Annotated[
        bool,
        typer.Option("--sequential", help="Run one item at a time"),
    ] = False,
    continue_on_error: Annotated[
        bool,
        typer.Option("--continue-on-error", help="Keep running levels after a failure"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the execution plan without running anything"),
    ] = False,
) -> None:
    """Execute each item's command, respecting dependencies."""
    config = get_config(ctx)
    name, items = load_items_or_exit(item_file)
    graph = level_or_exit(items)

    if dry_run:
        console.print(f"[cyan]Execution plan for: {escape(name)}[/cyan]")
        console.print(render(graph), markup=False, highlight=False)
        for item in flatten(graph):
            console.print(f"  {item.id}: {_command_of(item) or '(no command)'}", markup=False)
        return

    options = ExecutionOptions(
        concurrency=1 if sequential else (concurrency or config.execution.concurrency),
        fail_fast=False if continue_on_error else config.execution.fail_fast,
        on_node_start=lambda item: console.print(f"[cyan]▶[/cyan] {escape(item.id)}"),
        on_node_complete=_print_completion,
    )

    console.print(
        f"[cyan]Running: {escape(name)}[/cyan] ({len(graph)} items, {len(graph.levels)} levels)"
    )
    result = asyncio.run(execute(graph, wrap_simple_work(run_item_command), options))

    _print_summary(result)
    if not result.success:
        raise typer.Exit(1)


def _print_completion(result: NodeResult) -> None:
    if result.success:
        console.print(f"[green]✓[/green] {escape(result.item.id)} ({result.duration:.0f}ms)")
    else:
        console.print(f"[red]✗[/red] {escape(result.item.id)}: {escape(str(result.error))}")


def _print_summary(result: DAGResult) -> None:
    table = Table(title="Results", show_header=True, header_style="bold magenta")
    table.add_column("Item", style="cyan")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Output", style="dim")

    for item_id, node_result in result.results.items():
        if node_result.is_skipped:
            status = "[yellow]skipped[/yellow]"
        elif node_result.success:
            status = "[green]ok[/green]"
        else:
            status = "[red]failed[/red]"
        table.add_row(
            item_id, status, f"{node_result.duration:.0f}ms", _preview(node_result.output)
        )

    console.print(table)
    if result.success:
        console.print(f"[green]✓ All items succeeded[/green] in {result.total_duration:.0f}ms")
    else:
        console.print(f"[red]✗ Failed: {escape(', '.join(result.failed_nodes))}[/red]")


def _preview(output: Any) -> str:
    text = str(output).strip() if output else ""
    if len(text) > _OUTPUT_PREVIEW:
        return text[:_OUTPUT_PREVIEW] + "..."
    return text
