"""SQLite persistence of build results under .analysis-trend/."""

from .codec import DecodeError, build_result_from_dict, build_result_to_dict
from .database import DEFAULT_HISTORY_DIR, HistoryDB
from .reader import latest_build_id, list_builds, load_build_result, previous_build_id
from .store import SqliteBuildStore
from .writer import save_build_result

__all__ = [
    "DecodeError",
    "build_result_from_dict",
    "build_result_to_dict",
    "DEFAULT_HISTORY_DIR",
    "HistoryDB",
    "latest_build_id",
    "list_builds",
    "load_build_result",
    "previous_build_id",
    "SqliteBuildStore",
    "save_build_result",
]
