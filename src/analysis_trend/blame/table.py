"""Blame tables handed over by the source-control collaborator.

A table maps ``file -> line -> BlameInfo`` for one build, plus the files the
blame oracle failed on. The core never queries source control itself.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from ..logging_config import get_logger
from ..models import BlameInfo, Issue, normalize_path

logger = get_logger(__name__)


class BlameTable:
    """Per-build line -> committer lookup."""

    def __init__(
        self,
        entries: Optional[Mapping[str, Mapping[int, BlameInfo]]] = None,
        errors: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._entries: dict[str, dict[int, BlameInfo]] = {}
        for path, lines in (entries or {}).items():
            self._entries[normalize_path(path)] = {int(line): info for line, info in lines.items()}
        self.errors: dict[str, str] = {normalize_path(k): v for k, v in (errors or {}).items()}

    def __contains__(self, path: str) -> bool:
        return normalize_path(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def files(self) -> list[str]:
        return sorted(self._entries)

    def lookup(self, path: str, line: int) -> Optional[BlameInfo]:
        lines = self._entries.get(normalize_path(path))
        if lines is None:
            return None
        return lines.get(line)

    def failure_for(self, path: str) -> Optional[str]:
        return self.errors.get(normalize_path(path))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BlameTable":
        """Build a table from JSON-style data.

        Expected layout::

            {"files": {"src/a.c": {"10": {"author": ..., "email": ..., "commit_id": ...}}},
             "errors": {"src/b.c": "not under version control"}}

        A mapping without the ``files`` key is read as the ``files`` section.
        """
        if "files" in data:
            files, errors = data["files"], data.get("errors")
        else:
            files, errors = data, None
        entries = {
            path: {int(line): BlameInfo.from_dict(info) for line, info in lines.items()}
            for path, lines in files.items()
        }
        return cls(entries, errors=errors)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BlameTable":
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": {
                path: {str(line): info.to_dict() for line, info in sorted(lines.items())}
                for path, lines in sorted(self._entries.items())
            },
            "errors": dict(sorted(self.errors.items())),
        }


def files_to_blame(issues: Iterable[Issue]) -> list[str]:
    """Distinct files an oracle has to blame: one query per file, not per issue."""
    return sorted({issue.file for issue in issues if not issue.is_file_level})
