"""Shared CLI helpers."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import AnalysisConfig, load_config
from ..models import BuildStatus
from ..persistence import HistoryDB, SqliteBuildStore

console = Console()

# Exit code for errors; 0-2 are taken by the build status.
ERROR_EXIT = 3

STATUS_STYLE = {
    BuildStatus.SUCCESS.value: "green",
    BuildStatus.UNSTABLE.value: "yellow",
    BuildStatus.FAILURE.value: "red",
}


def project_root(ctx: typer.Context) -> Path:
    return Path((ctx.obj or {}).get("path", Path.cwd())).resolve()


def resolve_config(ctx: typer.Context, config_file: Optional[Path] = None) -> AnalysisConfig:
    """Build the configuration from discovered files and the global CLI flags."""
    obj = ctx.obj or {}
    return load_config(
        config_file=config_file,
        project_root=project_root(ctx),
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
    )


def history_exists(ctx: typer.Context, config: AnalysisConfig) -> bool:
    return (project_root(ctx) / config.history_dir / "history.db").exists()


@contextmanager
def open_store(ctx: typer.Context, config: AnalysisConfig) -> Iterator[SqliteBuildStore]:
    with HistoryDB(str(project_root(ctx)), config.history_dir) as db:
        yield SqliteBuildStore(db)


def no_history() -> NoReturn:
    console.print(
        "[yellow]No history found.[/yellow] "
        "Run [bold]analysis-trend record[/bold] first to store a build."
    )
    raise typer.Exit(0)


def fail(message: str, error: Exception) -> NoReturn:
    console.print(f"[red]{message}:[/red] {escape(str(error))}")
    raise typer.Exit(ERROR_EXIT)


def styled_status(status: str) -> str:
    style = STATUS_STYLE.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def format_health(health: Optional[int]) -> str:
    return "-" if health is None else f"{health}%"


def format_timestamp(ts: str) -> str:
    """Trim to date + time (no microseconds/timezone)."""
    if "T" in ts:
        ts = ts.replace("T", " ")
    if "+" in ts:
        ts = ts[: ts.index("+")]
    if "." in ts:
        ts = ts[: ts.index(".")]
    return ts
