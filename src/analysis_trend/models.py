"""Core data types: issues, severities, blame records and build status.

An ``Issue`` is one normalized static-analysis finding as handed over by a
tool-specific parser. Its ``fingerprint`` is not known at parse time; the
correlation layer assigns it before any cross-build comparison.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

from .exceptions import ErrorCode, InvalidIssueError


class Severity(Enum):
    """Ordered issue severity, most severe first."""

    ERROR = "ERROR"
    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """0 for ERROR up to 3 for LOW."""
        return _SEVERITY_ORDER.index(self)

    def at_least(self, other: "Severity") -> bool:
        """True if this severity is as severe as ``other`` or more."""
        return self.rank <= other.rank

    @classmethod
    def ordered(cls) -> list["Severity"]:
        return list(_SEVERITY_ORDER)

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Parse a severity name, accepting common tool aliases."""
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            raise InvalidIssueError("severity must be a string", "severity", value)
        key = value.strip().upper()
        key = _SEVERITY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise InvalidIssueError(f"unknown severity '{value}'", "severity", value) from None


_SEVERITY_ORDER = (Severity.ERROR, Severity.HIGH, Severity.NORMAL, Severity.LOW)

_SEVERITY_ALIASES = {
    "CRITICAL": "ERROR",
    "FATAL": "ERROR",
    "WARNING": "NORMAL",
    "WARN": "NORMAL",
    "MEDIUM": "NORMAL",
    "INFO": "LOW",
    "MINOR": "LOW",
}


class BuildStatus(Enum):
    """Quality-gate outcome computed for a build."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"


class JobOutcome(Enum):
    """Result of the hosting build job, reported by the caller."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"

    @property
    def is_complete(self) -> bool:
        """False for outcomes whose issue set may be incomplete."""
        return self in (JobOutcome.SUCCESS, JobOutcome.UNSTABLE)


def normalize_path(path: str) -> str:
    """Forward slashes, no leading ``./``."""
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


@dataclass(frozen=True)
class BlameInfo:
    """Committer identity for one source line."""

    author: str
    email: str = ""
    commit_id: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"author": self.author, "email": self.email, "commit_id": self.commit_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BlameInfo":
        return cls(
            author=str(data.get("author", "")),
            email=str(data.get("email", "")),
            commit_id=str(data.get("commit_id", data.get("commit", ""))),
        )


@dataclass(frozen=True)
class Issue:
    """One normalized static-analysis finding.

    ``line_start``/``line_end`` are 1-based and inclusive; 0 marks a
    file-level issue. ``occurrences`` counts raw findings merged into this
    one because they shared a fingerprint.
    """

    file: str
    line_start: int = 0
    line_end: int = 0
    column_start: Optional[int] = None
    column_end: Optional[int] = None
    severity: Severity = Severity.NORMAL
    category: str = ""
    type: str = ""
    message: str = ""
    module_name: Optional[str] = None
    package_name: Optional[str] = None
    fingerprint: Optional[str] = None
    occurrences: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "file", normalize_path(self.file))
        if self.line_end == 0 and self.line_start > 0:
            object.__setattr__(self, "line_end", self.line_start)

    @property
    def is_file_level(self) -> bool:
        return self.line_start <= 0

    @property
    def location(self) -> str:
        if self.is_file_level:
            return self.file
        return f"{self.file}:{self.line_start}"

    def with_fingerprint(self, fingerprint: str) -> "Issue":
        return replace(self, fingerprint=fingerprint)

    def with_occurrences(self, occurrences: int) -> "Issue":
        return replace(self, occurrences=occurrences)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line_start": self.line_start,
            "line_end": self.line_end,
            "column_start": self.column_start,
            "column_end": self.column_end,
            "severity": self.severity.value,
            "category": self.category,
            "type": self.type,
            "message": self.message,
            "module_name": self.module_name,
            "package_name": self.package_name,
            "fingerprint": self.fingerprint,
            "occurrences": self.occurrences,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Issue":
        """Build an Issue from a parser record.

        Accepts snake_case keys and the camelCase spelling used by most
        report converters (``lineStart``, ``moduleName``, ...).

        Raises:
            InvalidIssueError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise InvalidIssueError("record is not a mapping", "record", data)

        def get(key: str, default: Any = None) -> Any:
            if key in data:
                return data[key]
            return data.get(_CAMEL_KEYS.get(key, key), default)

        file = get("file")
        if not isinstance(file, str):
            raise InvalidIssueError("file must be a string", "file", file)

        return cls(
            file=file,
            line_start=_as_int(get("line_start"), "line_start", default=0),
            line_end=_as_int(get("line_end"), "line_end", default=0),
            column_start=_as_optional_int(get("column_start"), "column_start"),
            column_end=_as_optional_int(get("column_end"), "column_end"),
            severity=Severity.parse(get("severity", "NORMAL")),
            category=str(get("category", "") or ""),
            type=str(get("type", "") or ""),
            message=str(get("message", "") or ""),
            module_name=get("module_name"),
            package_name=get("package_name"),
            fingerprint=get("fingerprint"),
            occurrences=_as_int(get("occurrences"), "occurrences", default=1),
        )


_CAMEL_KEYS = {
    "line_start": "lineStart",
    "line_end": "lineEnd",
    "column_start": "columnStart",
    "column_end": "columnEnd",
    "module_name": "moduleName",
    "package_name": "packageName",
}


def _as_int(value: Any, field: str, default: Optional[int] = None) -> int:
    """Strict integer conversion; ``None`` yields ``default`` when one is given."""
    if value is None and default is not None:
        return default
    if isinstance(value, bool):
        raise InvalidIssueError(f"{field} must be an integer", field, value)
    if isinstance(value, float) and not value.is_integer():
        raise InvalidIssueError(f"{field} must be a whole number", field, value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidIssueError(f"{field} must be an integer", field, value) from None


def _as_optional_int(value: Any, field: str) -> Optional[int]:
    if value is None:
        return None
    return _as_int(value, field)


def validate_issue(issue: Issue) -> Optional[tuple[ErrorCode, str]]:
    """Check the Issue invariants.

    Returns:
        ``None`` for a valid issue, otherwise the error code and reason.
    """
    if not issue.file:
        return ErrorCode.AT102, "file path is empty"
    if issue.line_start < 0 or issue.line_end < 0:
        return ErrorCode.AT103, f"negative line range {issue.line_start}-{issue.line_end}"
    for column in (issue.column_start, issue.column_end):
        if column is not None and column < 0:
            return ErrorCode.AT103, f"negative column {column}"
    if issue.line_start > 0 and issue.line_end > 0 and issue.line_start > issue.line_end:
        return ErrorCode.AT101, f"line_start {issue.line_start} > line_end {issue.line_end}"
    return None


def describe_issue_count(count: int) -> str:
    """Short human summary of an issue count."""
    if count == 0:
        return "No issues"
    if count == 1:
        return "1 issue"
    return f"{count} issues"
