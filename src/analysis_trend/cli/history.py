"""History CLI command -- list recorded builds."""

import json

import typer
from rich.table import Table

from ..exceptions import AnalysisTrendError
from ..persistence import HistoryDB, list_builds
from . import app
from ._common import (
    console,
    fail,
    format_health,
    format_timestamp,
    history_exists,
    no_history,
    project_root,
    resolve_config,
    styled_status,
)


@app.command()
def history(
    ctx: typer.Context,
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of builds to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List builds stored in .analysis-trend/history.db.

    Shows build id, reference build, timestamp, status, health and issue
    counts for each recorded build, newest first.

    [bold cyan]Examples:[/bold cyan]

      analysis-trend history

      analysis-trend history --json

      analysis-trend history --limit 5
    """
    try:
        settings = resolve_config(ctx)
        if not history_exists(ctx, settings):
            no_history()

        with HistoryDB(str(project_root(ctx)), settings.history_dir) as db:
            builds = list_builds(db.conn, limit=limit)
    except AnalysisTrendError as e:
        fail("Error reading history", e)

    if json_output:
        print(json.dumps(builds, indent=2))
        return

    if not builds:
        console.print("[yellow]No builds recorded yet.[/yellow]")
        return
    _output_rich(builds)


def _output_rich(builds: list[dict]) -> None:
    """Human-readable Rich table output."""
    table = Table(
        title="Build History",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("Build", style="bold", justify="right")
    table.add_column("Reference", justify="right", style="dim")
    table.add_column("Timestamp", style="green")
    table.add_column("Status")
    table.add_column("Health", justify="right")
    table.add_column("Issues", justify="right", style="yellow")
    table.add_column("New", justify="right", style="red")
    table.add_column("Fixed", justify="right", style="green")

    for b in builds:
        reference = b["predecessor_id"]
        table.add_row(
            str(b["build_id"]),
            "-" if reference is None else str(reference),
            format_timestamp(b["timestamp"]),
            styled_status(b["status"]),
            format_health(b["health_percentage"]),
            str(b["issue_count"]),
            str(b["new_count"]),
            str(b["fixed_count"]),
        )

    console.print()
    console.print(table)
    console.print()
