"""Show CLI command -- new, fixed and outstanding issues of a stored build."""

import json
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..exceptions import AnalysisTrendError, BuildNotFoundError
from ..models import Issue
from ..persistence import build_result_to_dict
from ..result import BuildResult
from . import app
from ._common import (
    console,
    fail,
    format_health,
    format_timestamp,
    history_exists,
    no_history,
    open_store,
    resolve_config,
    styled_status,
)


@app.command()
def show(
    ctx: typer.Context,
    build_id: Optional[int] = typer.Argument(
        None, help="Build to show (default: latest recorded build)"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show the issues of a recorded build.

    Lists new, fixed and outstanding issues together with the committer
    of each issue's line, when blame was recorded.

    [bold cyan]Examples:[/bold cyan]

      analysis-trend show

      analysis-trend show 42 --json
    """
    try:
        settings = resolve_config(ctx)
        if not history_exists(ctx, settings):
            no_history()

        with open_store(ctx, settings) as store:
            target = build_id if build_id is not None else store.latest_id()
            if target is None:
                console.print("[yellow]No builds recorded yet.[/yellow]")
                raise typer.Exit(0)
            result = store.load(target)
        if result is None:
            raise BuildNotFoundError(target)
    except AnalysisTrendError as e:
        fail("Error reading build", e)

    if json_output:
        print(json.dumps(build_result_to_dict(result), indent=2))
    else:
        _output_rich(result)


def _output_rich(result: BuildResult) -> None:
    """Human-readable Rich table output."""
    console.print()
    console.print(
        f"[bold]Build {result.build_id}[/bold]  {styled_status(result.status.value)}"
        f"  health {format_health(result.health_percentage)}"
        f"  [dim]{format_timestamp(result.timestamp)}[/dim]"
    )
    console.print(f"[dim]{escape(result.summary)}[/dim]")

    for title, issues, style in (
        ("New", result.new_issues, "red"),
        ("Fixed", result.fixed_issues, "green"),
        ("Outstanding", result.outstanding_issues, "yellow"),
    ):
        if not issues:
            continue
        console.print()
        console.print(_issue_table(f"{title} issues ({len(issues)})", issues, result, style))

    if result.error_messages:
        console.print()
        for message in result.error_messages:
            console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
    console.print()


def _issue_table(title: str, issues, result: BuildResult, style: str) -> Table:
    table = Table(title=title, title_style=f"bold {style}", show_lines=False, pad_edge=True)
    table.add_column("Severity", style="bold")
    table.add_column("Location", style="cyan")
    table.add_column("Type")
    table.add_column("Message")
    table.add_column("Author", style="dim")

    for issue in issues:
        table.add_row(
            issue.severity.value,
            escape(issue.location),
            escape(issue.type or issue.category or "-"),
            escape(_shorten(issue.message)),
            escape(_author(result, issue)),
        )
    return table


def _author(result: BuildResult, issue: Issue) -> str:
    info = result.blame_for(issue)
    if info is None:
        return "-"
    return info.author


def _shorten(text: str, width: int = 80) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."
