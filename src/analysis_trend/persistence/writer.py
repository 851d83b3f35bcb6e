"""Write a BuildResult into the history database in a single transaction."""

import json
import sqlite3

from ..exceptions import DuplicateBuildError, PersistenceError
from ..logging_config import get_logger
from ..models import Issue
from ..result import BuildResult

logger = get_logger(__name__)


def save_build_result(conn: sqlite3.Connection, result: BuildResult) -> int:
    """Persist a build result to the database.

    All inserts happen inside a single transaction, so a build is either
    stored completely or not at all.

    Parameters
    ----------
    conn:
        An open ``sqlite3.Connection`` (from ``HistoryDB.connect()``).
    result:
        The ``BuildResult`` to persist.

    Returns
    -------
    int
        The ``build_id`` of the stored result.

    Raises
    ------
    DuplicateBuildError
        If the build id has already been recorded.
    PersistenceError
        If SQLite rejects the write.
    """
    cur = conn.cursor()
    try:
        cur.execute("BEGIN")

        # ── builds row ───────────────────────────────────────────
        cur.execute(
            """
            INSERT INTO builds (
                build_id, predecessor_id, timestamp, status, job_outcome,
                health_percentage, status_reason, duplicates, unattributed
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                result.build_id,
                result.predecessor_id,
                result.timestamp,
                result.status.value,
                result.job_outcome.value if result.job_outcome else None,
                result.health_percentage,
                result.status_reason,
                result.duplicates,
                result.unattributed,
            ),
        )

        # ── issues (batch) ───────────────────────────────────────
        position = {issue.fingerprint: i for i, issue in enumerate(result.issues)}
        issue_rows = []
        for state, issues in (
            ("new", result.new_issues),
            ("outstanding", result.outstanding_issues),
            ("fixed", result.fixed_issues),
        ):
            for state_position, issue in enumerate(issues):
                issue_rows.append(
                    _issue_row(
                        result.build_id,
                        state,
                        position.get(issue.fingerprint) if state != "fixed" else None,
                        state_position,
                        issue,
                    )
                )
        if issue_rows:
            cur.executemany(
                """
                INSERT INTO issues (
                    build_id, state, position, state_position, fingerprint,
                    file, line_start, line_end, column_start, column_end,
                    severity, category, type, message, module_name,
                    package_name, occurrences
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                issue_rows,
            )

        # ── blame (batch) ────────────────────────────────────────
        blame_rows = [
            (result.build_id, fingerprint, info.author, info.email, info.commit_id)
            for fingerprint, info in result.blame.items()
        ]
        if blame_rows:
            cur.executemany(
                """
                INSERT INTO blame (build_id, fingerprint, author, email, commit_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                blame_rows,
            )

        # ── rejected_issues (batch) ──────────────────────────────
        rejected_rows = [
            (result.build_id, r.index, r.code.value, r.reason, json.dumps(r.record, default=repr))
            for r in result.rejected
        ]
        if rejected_rows:
            cur.executemany(
                """
                INSERT INTO rejected_issues (build_id, position, code, reason, record)
                VALUES (?, ?, ?, ?, ?)
                """,
                rejected_rows,
            )

        # ── messages (batch) ─────────────────────────────────────
        message_rows = [
            (result.build_id, "info", i, text) for i, text in enumerate(result.info_messages)
        ] + [(result.build_id, "error", i, text) for i, text in enumerate(result.error_messages)]
        if message_rows:
            cur.executemany(
                "INSERT INTO messages (build_id, kind, position, text) VALUES (?, ?, ?, ?)",
                message_rows,
            )

        conn.commit()
        logger.debug(
            "Stored build %d (%d issues, %d fixed)",
            result.build_id,
            result.number_of_issues,
            len(result.fixed_issues),
        )
        return result.build_id

    except sqlite3.IntegrityError as e:
        conn.rollback()
        if _build_exists(conn, result.build_id):
            raise DuplicateBuildError(result.build_id) from e
        raise PersistenceError("write", str(e)) from e
    except sqlite3.Error as e:
        conn.rollback()
        raise PersistenceError("write", str(e)) from e
    except Exception:
        conn.rollback()
        raise


def _issue_row(build_id: int, state: str, position, state_position: int, issue: Issue) -> tuple:
    return (
        build_id,
        state,
        position,
        state_position,
        issue.fingerprint,
        issue.file,
        issue.line_start,
        issue.line_end,
        issue.column_start,
        issue.column_end,
        issue.severity.value,
        issue.category,
        issue.type,
        issue.message,
        issue.module_name,
        issue.package_name,
        issue.occurrences,
    )


def _build_exists(conn: sqlite3.Connection, build_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM builds WHERE build_id = ?", (build_id,)).fetchone()
    return row is not None
