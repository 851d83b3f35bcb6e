"""Read build results back from the history database."""

import json
import sqlite3
from typing import Optional

from ..correlation.intake import RejectedIssue
from ..exceptions import BuildNotFoundError, ErrorCode
from ..models import BlameInfo, BuildStatus, Issue, JobOutcome, Severity
from ..result import BuildResult
from .codec import DecodeError


def load_build_result(conn: sqlite3.Connection, build_id: int) -> BuildResult:
    """Load a complete build result by its build id.

    Parameters
    ----------
    conn:
        An open ``sqlite3.Connection`` (from ``HistoryDB.connect()``).
    build_id:
        The build's id.

    Returns
    -------
    BuildResult
        Fully hydrated result.

    Raises
    ------
    BuildNotFoundError
        If no result for that build exists.
    DecodeError
        If the stored rows do not form a valid result.
    """
    row = conn.execute("SELECT * FROM builds WHERE build_id = ?", (build_id,)).fetchone()

    if row is None:
        raise BuildNotFoundError(build_id)

    try:
        return _hydrate(conn, row)
    except (ValueError, KeyError) as e:
        raise DecodeError(build_id, str(e)) from e


def list_builds(conn: sqlite3.Connection, limit: int = 20) -> list[dict]:
    """List recent builds with issue counts, newest first.

    Returns
    -------
    List[Dict]
        Dicts with keys: build_id, predecessor_id, timestamp, status,
        job_outcome, health_percentage, issue_count, new_count, fixed_count.
    """
    rows = conn.execute(
        """
        SELECT
            b.build_id,
            b.predecessor_id,
            b.timestamp,
            b.status,
            b.job_outcome,
            b.health_percentage,
            COALESCE(SUM(i.state != 'fixed'), 0) AS issue_count,
            COALESCE(SUM(i.state = 'new'), 0)    AS new_count,
            COALESCE(SUM(i.state = 'fixed'), 0)  AS fixed_count
        FROM builds b
        LEFT JOIN issues i ON i.build_id = b.build_id
        GROUP BY b.build_id
        ORDER BY b.build_id DESC
        LIMIT ?
        """,
        (limit,),
    ).fetchall()

    return [
        {
            "build_id": r["build_id"],
            "predecessor_id": r["predecessor_id"],
            "timestamp": r["timestamp"],
            "status": r["status"],
            "job_outcome": r["job_outcome"],
            "health_percentage": r["health_percentage"],
            "issue_count": r["issue_count"],
            "new_count": r["new_count"],
            "fixed_count": r["fixed_count"],
        }
        for r in rows
    ]


def previous_build_id(conn: sqlite3.Connection, build_id: int) -> Optional[int]:
    """Largest stored build id below ``build_id``."""
    row = conn.execute(
        "SELECT MAX(build_id) AS build_id FROM builds WHERE build_id < ?", (build_id,)
    ).fetchone()
    return row["build_id"]


def latest_build_id(conn: sqlite3.Connection) -> Optional[int]:
    row = conn.execute("SELECT MAX(build_id) AS build_id FROM builds").fetchone()
    return row["build_id"]


# ── internal ──────────────────────────────────────────────────────


def _hydrate(conn: sqlite3.Connection, row: sqlite3.Row) -> BuildResult:
    """Reconstruct a BuildResult from its builds row and child tables."""
    build_id = row["build_id"]

    current: list[tuple[int, Issue]] = []
    partitions: dict[str, list[Issue]] = {"new": [], "outstanding": [], "fixed": []}
    for r in conn.execute(
        "SELECT * FROM issues WHERE build_id = ? ORDER BY state, state_position",
        (build_id,),
    ):
        issue = Issue(
            file=r["file"],
            line_start=r["line_start"],
            line_end=r["line_end"],
            column_start=r["column_start"],
            column_end=r["column_end"],
            severity=Severity(r["severity"]),
            category=r["category"],
            type=r["type"],
            message=r["message"],
            module_name=r["module_name"],
            package_name=r["package_name"],
            fingerprint=r["fingerprint"],
            occurrences=r["occurrences"],
        )
        partitions[r["state"]].append(issue)
        if r["state"] != "fixed":
            current.append((r["position"], issue))
    current.sort(key=lambda item: item[0])

    blame = {
        r["fingerprint"]: BlameInfo(author=r["author"], email=r["email"], commit_id=r["commit_id"])
        for r in conn.execute("SELECT * FROM blame WHERE build_id = ?", (build_id,))
    }

    rejected = tuple(
        RejectedIssue(
            index=r["position"],
            code=ErrorCode(r["code"]),
            reason=r["reason"],
            record=json.loads(r["record"]),
        )
        for r in conn.execute(
            "SELECT * FROM rejected_issues WHERE build_id = ? ORDER BY position", (build_id,)
        )
    )

    messages: dict[str, list[str]] = {"info": [], "error": []}
    for r in conn.execute(
        "SELECT kind, text FROM messages WHERE build_id = ? ORDER BY kind, position", (build_id,)
    ):
        messages[r["kind"]].append(r["text"])

    return BuildResult(
        build_id=build_id,
        issues=tuple(issue for _, issue in current),
        new_issues=tuple(partitions["new"]),
        outstanding_issues=tuple(partitions["outstanding"]),
        fixed_issues=tuple(partitions["fixed"]),
        health_percentage=row["health_percentage"],
        status=BuildStatus(row["status"]),
        blame=blame,
        predecessor_id=row["predecessor_id"],
        job_outcome=JobOutcome(row["job_outcome"]) if row["job_outcome"] else None,
        timestamp=row["timestamp"],
        rejected=rejected,
        duplicates=row["duplicates"],
        unattributed=row["unattributed"],
        status_reason=row["status_reason"],
        info_messages=tuple(messages["info"]),
        error_messages=tuple(messages["error"]),
    )
