"""BuildStore backed by the SQLite history database."""

from __future__ import annotations

from typing import Optional

from ..exceptions import BuildNotFoundError
from ..result import BuildResult
from .database import HistoryDB
from .reader import latest_build_id, load_build_result, previous_build_id
from .writer import save_build_result


class SqliteBuildStore:
    """Adapts an open HistoryDB to the BuildStore contract.

    Usage::

        with HistoryDB(root) as db:
            store = SqliteBuildStore(db)
            analyzer = BuildAnalyzer(store, config)
    """

    def __init__(self, db: HistoryDB) -> None:
        self.db = db

    def save(self, result: BuildResult) -> None:
        save_build_result(self.db.conn, result)

    def load(self, build_id: int) -> Optional[BuildResult]:
        try:
            return load_build_result(self.db.conn, build_id)
        except BuildNotFoundError:
            return None

    def previous_id(self, build_id: int) -> Optional[int]:
        return previous_build_id(self.db.conn, build_id)

    def latest_id(self) -> Optional[int]:
        return latest_build_id(self.db.conn)
