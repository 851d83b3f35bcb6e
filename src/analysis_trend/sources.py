"""Issue sources: anything that hands the core a sequence of normalized issues.

Tool-specific parsers live outside this package. They either produce
``Issue`` objects directly or write a JSON report that ``JsonIssueSource``
reads. A report is a list of issue records, or an object with an
``issues`` list (optionally one per module under ``modules``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, Union

from .exceptions import IssueSourceError
from .logging_config import get_logger
from .models import Issue

logger = get_logger(__name__)

RawRecord = Union[Issue, dict[str, Any]]


class IssueSource(Protocol):
    """Produces one build's issues in report order."""

    def issues(self) -> Iterable[RawRecord]:
        ...


class StaticIssueSource:
    """Issues already held in memory, e.g. produced by an in-process parser."""

    def __init__(self, issues: Iterable[RawRecord]) -> None:
        self._issues = list(issues)

    def issues(self) -> list[RawRecord]:
        return list(self._issues)


class JsonIssueSource:
    """Reads issue records from a JSON report file.

    Records are returned as dicts; validation happens during intake so
    that one bad record does not discard the whole report.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def issues(self) -> list[RawRecord]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise IssueSourceError(str(self.path), e.strerror or str(e)) from e
        except json.JSONDecodeError as e:
            raise IssueSourceError(str(self.path), f"invalid JSON: {e}") from e

        records = list(_records(data, str(self.path)))
        logger.debug("Read %d issue records from %s", len(records), self.path)
        return records


def _records(data: Any, source: str) -> Iterator[Any]:
    if isinstance(data, list):
        yield from data
        return
    if not isinstance(data, dict):
        raise IssueSourceError(source, "expected a list of issues or an object with 'issues'")

    issues = data.get("issues", [])
    if not isinstance(issues, list):
        raise IssueSourceError(source, "'issues' must be a list")
    yield from issues

    # Per-module reports: {"modules": {"core": [...], "web": {"issues": [...]}}}
    modules = data.get("modules", {})
    if not isinstance(modules, dict):
        raise IssueSourceError(source, "'modules' must map module names to issue lists")
    for module, entries in modules.items():
        if isinstance(entries, dict):
            entries = entries.get("issues", [])
        if not isinstance(entries, list):
            raise IssueSourceError(source, f"issues of module '{module}' must be a list")
        for entry in entries:
            if isinstance(entry, dict) and "module_name" not in entry and "moduleName" not in entry:
                entry = {**entry, "module_name": module}
            yield entry
