"""Trend CLI command -- show how the issue count changes over builds."""

import json
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import AnalysisTrendError
from ..history import HistoryAggregator, sparkline, summarize_trend
from . import app
from ._common import (
    console,
    fail,
    format_health,
    history_exists,
    no_history,
    open_store,
    resolve_config,
)

_DIRECTION_STYLE = {"improving": "green", "stable": "dim", "worsening": "red"}


@app.command()
def trend(
    ctx: typer.Context,
    last_n: Optional[int] = typer.Option(
        None,
        "--last",
        "-n",
        help="Number of recent builds to include (default: trend_length from config)",
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
    Show how issue counts and health have changed over recent builds.

    [bold cyan]Examples:[/bold cyan]

      analysis-trend trend

      analysis-trend trend --last 10 --json
    """
    try:
        settings = resolve_config(ctx)
        if not history_exists(ctx, settings):
            no_history()

        with open_store(ctx, settings) as store:
            aggregator = HistoryAggregator(
                store, settings.baseline_policy, settings.max_chain_depth
            )
            points = aggregator.trend(last_n or settings.trend_length)
    except AnalysisTrendError as e:
        fail("Error reading history", e)

    summary = summarize_trend(points)

    if json_output:
        output = {
            "points": [p.to_dict() for p in points],
            "summary": None
            if summary is None
            else {
                "builds": summary.builds,
                "latest": summary.latest,
                "mean": summary.mean,
                "slope": summary.slope,
                "direction": summary.direction,
            },
        }
        print(json.dumps(output, indent=2))
        return

    if summary is None:
        console.print("[yellow]No builds recorded yet.[/yellow]")
        return

    counts = [p.issue_count for p in points]
    style = _DIRECTION_STYLE[summary.direction]

    console.print()
    console.print(f"[bold]Issues over the last {summary.builds} builds[/bold]")
    console.print(f"  {sparkline(counts)}  [{style}]{summary.direction}[/{style}]", highlight=False)
    console.print(
        f"  [dim]latest {summary.latest}, mean {summary.mean:.1f}, "
        f"slope {summary.slope:+.2f} per build[/dim]"
    )
    console.print()

    table = Table(show_header=True, pad_edge=True)
    table.add_column("Build", style="bold", justify="right")
    table.add_column("Issues", justify="right", style="yellow")
    table.add_column("New", justify="right", style="red")
    table.add_column("Fixed", justify="right", style="green")
    table.add_column("Health", justify="right")
    table.add_column("Delta", justify="right")

    prev = None
    for p in points:
        if prev is None:
            delta_str = "-"
        else:
            delta = p.issue_count - prev
            if delta > 0:
                delta_str = f"[red]+{delta}[/red]"
            elif delta < 0:
                delta_str = f"[green]{delta}[/green]"
            else:
                delta_str = "[dim]0[/dim]"
        table.add_row(
            str(p.build_id),
            str(p.issue_count),
            str(p.new_count),
            str(p.fixed_count),
            format_health(p.health_percentage),
            delta_str,
        )
        prev = p.issue_count

    console.print(table)
    console.print()
