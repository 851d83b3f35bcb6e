"""Record CLI command -- analyze a build and store it in the history database."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..api import BuildAnalyzer
from ..blame import BlameTable
from ..correlation import WorkspaceContext
from ..exceptions import AnalysisTrendError
from ..models import BuildStatus, JobOutcome
from ..persistence import build_result_to_dict
from ..result import BuildResult
from ..sources import JsonIssueSource
from . import app
from ._common import (
    console,
    fail,
    format_health,
    open_store,
    resolve_config,
    styled_status,
)

_STATUS_EXIT = {
    BuildStatus.SUCCESS: 0,
    BuildStatus.UNSTABLE: 1,
    BuildStatus.FAILURE: 2,
}


@app.command()
def record(
    ctx: typer.Context,
    build_id: int = typer.Argument(..., help="Build number, increasing from build to build", min=1),
    issues_json: Path = typer.Argument(
        ...,
        help="JSON report with the build's normalized issues",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    blame: Optional[Path] = typer.Option(
        None,
        "--blame",
        help="JSON blame table (file -> line -> author)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    sources: Optional[Path] = typer.Option(
        None,
        "--sources",
        help="Workspace holding the analyzed sources, for line-drift tolerant fingerprints",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    outcome: Optional[str] = typer.Option(
        None,
        "--outcome",
        help="Result of the build job: SUCCESS, UNSTABLE, FAILURE or ABORTED",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
    fail_on_status: bool = typer.Option(
        False,
        "--fail-on-status",
        help="Exit 1 when the build is UNSTABLE, 2 when it is FAILURE",
    ),
):
    """
    Analyze a build's issues and store the result.

    Issues are compared with the reference build from .analysis-trend/history.db
    and classified as new, fixed or outstanding.

    [bold cyan]Examples:[/bold cyan]

      analysis-trend record 42 issues.json

      analysis-trend record 42 issues.json --sources . --blame blame.json

      analysis-trend record 42 issues.json --fail-on-status --json
    """
    job_outcome = None
    if outcome is not None:
        try:
            job_outcome = JobOutcome(outcome.upper())
        except ValueError:
            raise typer.BadParameter(
                "expected SUCCESS, UNSTABLE, FAILURE or ABORTED", param_hint="--outcome"
            ) from None

    blame_table = None
    if blame is not None:
        try:
            blame_table = BlameTable.load(blame)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            fail("Error reading blame table", e)

    try:
        settings = resolve_config(ctx, config)
        file_context = WorkspaceContext(sources) if sources is not None else None
        raw_issues = JsonIssueSource(issues_json).issues()

        with open_store(ctx, settings) as store:
            result = BuildAnalyzer(store, settings).record(
                build_id,
                raw_issues,
                file_context=file_context,
                blame_table=blame_table,
                job_outcome=job_outcome,
            )
    except AnalysisTrendError as e:
        fail("Error recording build", e)

    if json_output:
        print(json.dumps(build_result_to_dict(result), indent=2))
    else:
        _output_rich(result, verbose=bool(ctx.obj.get("verbose")))

    if fail_on_status:
        raise typer.Exit(_STATUS_EXIT[result.status])


def _output_rich(result: BuildResult, verbose: bool = False) -> None:
    """Human-readable summary of the recorded build."""
    console.print()
    console.print(
        f"[bold]Build {result.build_id}[/bold]  {styled_status(result.status.value)}"
        f"  health {format_health(result.health_percentage)}"
    )
    reference = (
        f"build {result.predecessor_id}" if result.predecessor_id is not None else "none"
    )
    console.print(f"[dim]Reference: {reference}  ({escape(result.status_reason)})[/dim]")

    table = Table(show_header=True, pad_edge=True)
    table.add_column("Issues", justify="right")
    table.add_column("New", justify="right", style="red")
    table.add_column("Fixed", justify="right", style="green")
    table.add_column("Outstanding", justify="right", style="yellow")
    table.add_column("Skipped", justify="right", style="dim")
    table.add_row(
        str(result.number_of_issues),
        str(len(result.new_issues)),
        str(len(result.fixed_issues)),
        str(len(result.outstanding_issues)),
        str(result.skipped_count),
    )
    console.print(table)

    if verbose:
        for message in result.info_messages:
            console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
    for message in result.error_messages:
        console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
    console.print()
