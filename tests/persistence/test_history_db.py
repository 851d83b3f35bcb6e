"""Tests for persistence/database.py - schema creation and connection lifecycle."""

import tempfile
from pathlib import Path

import pytest

from analysis_trend.exceptions import PersistenceError
from analysis_trend.persistence import HistoryDB


class TestDatabaseSchema:
    def test_creates_tables(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                tables = db.conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
                ).fetchall()
                table_names = {r["name"] for r in tables}

                assert {"builds", "issues", "blame", "rejected_issues", "messages"} <= table_names
                assert "schema_version" in table_names

    def test_schema_version_is_1(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                row = db.conn.execute("SELECT version FROM schema_version").fetchone()
                assert row["version"] == 1

    def test_creates_indexes(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                indexes = db.conn.execute(
                    "SELECT name FROM sqlite_master WHERE type='index'"
                ).fetchall()
                index_names = {r["name"] for r in indexes}
                assert "idx_issues_build" in index_names
                assert "idx_issues_fingerprint" in index_names

    def test_foreign_keys_enabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                assert db.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_migration_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir):
                pass
            with HistoryDB(tmpdir) as db:
                rows = db.conn.execute("SELECT version FROM schema_version").fetchall()
                assert len(rows) == 1

    def test_newer_schema_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                db.conn.execute("UPDATE schema_version SET version = 99")
                db.conn.commit()
            with pytest.raises(PersistenceError):
                HistoryDB(tmpdir).connect()


class TestLifecycle:
    def test_creates_directory_and_gitignore(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir) as db:
                assert db.db_path == Path(tmpdir) / ".analysis-trend" / "history.db"
                assert db.db_path.exists()
            assert (Path(tmpdir) / ".analysis-trend" / ".gitignore").read_text() == "*\n"

    def test_custom_history_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with HistoryDB(tmpdir, history_dir="ci/history") as db:
                assert db.db_path == Path(tmpdir) / "ci" / "history" / "history.db"

    def test_conn_requires_connect(self):
        db = HistoryDB("/nonexistent")
        assert not db.connected
        with pytest.raises(RuntimeError):
            db.conn

    def test_close_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db = HistoryDB(tmpdir)
            db.connect()
            assert db.connected
            db.close()
            db.close()
            assert not db.connected
