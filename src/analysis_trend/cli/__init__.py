"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="analysis-trend",
    help="analysis-trend - Track static-analysis issues across builds",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Project root holding .analysis-trend/ (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """
    Correlate static-analysis issues across builds.

    Records each build's issues, classifies them as new, fixed or
    outstanding against a reference build, scores build health and
    attributes issues to their committers.
    """
    ctx.ensure_object(dict)
    ctx.obj["path"] = Path(path) if path else Path.cwd()
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if version:
        console.print(f"[bold cyan]analysis-trend[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)

    setup_logging("verbose" if verbose else "quiet" if quiet else "normal")


# Import subcommands to register them
from .record import record as _record  # noqa: F401, E402
from .show import show as _show  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
from .trend import trend as _trend  # noqa: F401, E402


def main() -> None:
    app()
