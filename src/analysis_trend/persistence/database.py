"""SQLite-backed history database stored in .analysis-trend/ at the project root."""

import sqlite3
from pathlib import Path
from typing import Optional

from ..exceptions import PersistenceError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

DEFAULT_HISTORY_DIR = ".analysis-trend"


class HistoryDB:
    """Manages the ``.analysis-trend/history.db`` SQLite database.

    Usage::

        with HistoryDB("/path/to/project") as db:
            save_build_result(db.conn, result)
    """

    def __init__(self, project_root: str, history_dir: str = DEFAULT_HISTORY_DIR) -> None:
        self.db_dir: Path = Path(project_root) / history_dir
        self.db_path: Path = self.db_dir / "history.db"
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("HistoryDB is not connected. Use as context manager or call connect().")
        return self._conn

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create the history directory and a .gitignore so it stays untracked."""
        self.db_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self._ensure_dir()
        try:
            conn = sqlite3.connect(str(self.db_path))
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            raise PersistenceError("connect", str(e)) from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        try:
            self._migrate()
        except Exception:
            self.close()
            raise
        logger.debug("History DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "HistoryDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )

        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )
        elif row["version"] > _SCHEMA_VERSION:
            raise PersistenceError(
                "migrate", f"database schema {row['version']} is newer than {_SCHEMA_VERSION}"
            )

        # ── builds ───────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS builds (
                build_id          INTEGER PRIMARY KEY,
                predecessor_id    INTEGER,
                timestamp         TEXT    NOT NULL DEFAULT '',
                status            TEXT    NOT NULL,
                job_outcome       TEXT,
                health_percentage INTEGER,
                status_reason     TEXT    NOT NULL DEFAULT '',
                duplicates        INTEGER NOT NULL DEFAULT 0,
                unattributed      INTEGER NOT NULL DEFAULT 0
            )
            """
        )

        # ── issues (current set and fixed ones) ──────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS issues (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                build_id       INTEGER NOT NULL REFERENCES builds(build_id) ON DELETE CASCADE,
                state          TEXT    NOT NULL CHECK (state IN ('new', 'outstanding', 'fixed')),
                position       INTEGER,
                state_position INTEGER NOT NULL,
                fingerprint    TEXT    NOT NULL,
                file           TEXT    NOT NULL,
                line_start     INTEGER NOT NULL DEFAULT 0,
                line_end       INTEGER NOT NULL DEFAULT 0,
                column_start   INTEGER,
                column_end     INTEGER,
                severity       TEXT    NOT NULL,
                category       TEXT    NOT NULL DEFAULT '',
                type           TEXT    NOT NULL DEFAULT '',
                message        TEXT    NOT NULL DEFAULT '',
                module_name    TEXT,
                package_name   TEXT,
                occurrences    INTEGER NOT NULL DEFAULT 1
            )
            """
        )

        # ── blame ────────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS blame (
                build_id    INTEGER NOT NULL REFERENCES builds(build_id) ON DELETE CASCADE,
                fingerprint TEXT    NOT NULL,
                author      TEXT    NOT NULL,
                email       TEXT    NOT NULL DEFAULT '',
                commit_id   TEXT    NOT NULL DEFAULT '',
                PRIMARY KEY (build_id, fingerprint)
            )
            """
        )

        # ── rejected_issues ──────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS rejected_issues (
                build_id INTEGER NOT NULL REFERENCES builds(build_id) ON DELETE CASCADE,
                position INTEGER NOT NULL,
                code     TEXT    NOT NULL,
                reason   TEXT    NOT NULL,
                record   TEXT    NOT NULL DEFAULT '{}'
            )
            """
        )

        # ── messages ─────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS messages (
                build_id INTEGER NOT NULL REFERENCES builds(build_id) ON DELETE CASCADE,
                kind     TEXT    NOT NULL CHECK (kind IN ('info', 'error')),
                position INTEGER NOT NULL,
                text     TEXT    NOT NULL
            )
            """
        )

        # ── indexes ──────────────────────────────────────────────
        c.execute("CREATE INDEX IF NOT EXISTS idx_issues_build ON issues(build_id, state)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_issues_fingerprint ON issues(fingerprint)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_blame_build ON blame(build_id)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_messages_build ON messages(build_id)")

        c.commit()
