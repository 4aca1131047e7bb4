"""leveldag CLI - Main entrypoint."""

from dataclasses import replace
from pathlib import Path

import typer
from rich.markup import escape

from leveldag import __version__
from leveldag.cli.commands import graph_cmd, run_cmd
from leveldag.cli.utils import console
from leveldag.core.config import load_config
from leveldag.core.exceptions import ConfigurationError, ValidationError
from leveldag.core.logging import configure_logging

app = typer.Typer(
    name="leveldag",
    help="leveldag - Level-by-level execution of dependency graphs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

app.add_typer(graph_cmd.app, name="graph", help="Inspect the levels of an item file")
app.command("run", help="Run item commands level by level")(run_cmd.run)

_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level: trace|debug|info|warning|error"
    ),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log format: console|json|structured|rich"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to a leveldag.toml or pyproject.toml"
    ),
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
) -> None:
    """leveldag CLI - dependency-ordered, level-parallel execution.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if version:
        console.print(f"[bold blue]leveldag[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        config = load_config(config_path)
    except (ConfigurationError, FileNotFoundError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    level = (log_level or config.logging.level).upper()
    level = _LEVEL_ALIASES.get(level, level)
    format_type = (log_format or config.logging.format).lower()

    try:
        logging_config = replace(config.logging, level=level, format=format_type)
    except ValidationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    configure_logging(
        level=logging_config.level,
        format=logging_config.format,
        output_file=logging_config.output_file,
        use_color=logging_config.use_color,
    )

    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj.update({"config": config, "log_level": level, "log_format": format_type})


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
