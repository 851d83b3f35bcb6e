"""Turn a raw issue sequence into a fingerprinted, duplicate-free issue set.

Raw records that break the Issue invariants are rejected one by one and
reported as diagnostics; they never abort the build. Raw issues that end up
with the same fingerprint are merged into the first occurrence, whose
``occurrences`` counter records how many findings it stands for.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from ..exceptions import Diagnostic, ErrorCode, InvalidIssueError
from ..logging_config import get_logger
from ..models import Issue, validate_issue
from .context import FileContextProvider
from .fingerprint import Fingerprinter, FingerprintStats

logger = get_logger(__name__)

RawIssue = Union[Issue, Mapping[str, Any]]


@dataclass(frozen=True)
class RejectedIssue:
    """A raw finding excluded from the build's issue set."""

    index: int
    code: ErrorCode
    reason: str
    record: dict[str, Any] = field(default_factory=dict)

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            code=self.code,
            message=f"Rejected issue #{self.index}: {self.reason}",
            context={"index": self.index, "record": self.record},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "code": self.code.value,
            "reason": self.reason,
            "record": self.record,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RejectedIssue":
        return cls(
            index=int(data["index"]),
            code=ErrorCode(data["code"]),
            reason=str(data["reason"]),
            record=dict(data.get("record") or {}),
        )


@dataclass
class IntakeResult:
    """Accepted issues (unique fingerprints, input order) and what was skipped."""

    issues: list[Issue] = field(default_factory=list)
    rejected: list[RejectedIssue] = field(default_factory=list)
    duplicates: int = 0
    raw_count: int = 0
    fingerprints: FingerprintStats = field(default_factory=FingerprintStats)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def prepare_issues(
    raw_issues: Iterable[RawIssue],
    fingerprinter: Optional[Fingerprinter] = None,
    file_context: Optional[FileContextProvider] = None,
) -> IntakeResult:
    """Validate, fingerprint and de-duplicate one build's raw issues.

    Args:
        raw_issues: Issues or parser records (mappings) in report order
        fingerprinter: Fingerprinter to use (a default one when omitted)
        file_context: Source content at analysis time

    Returns:
        IntakeResult with the accepted issue set and rejection diagnostics
    """
    fingerprinter = fingerprinter or Fingerprinter()
    result = IntakeResult()
    by_fingerprint: dict[str, int] = {}
    reported = len(fingerprinter.diagnostics)

    for index, raw in enumerate(raw_issues):
        result.raw_count += 1
        try:
            issue = raw if isinstance(raw, Issue) else Issue.from_dict(raw)
        except InvalidIssueError as e:
            result.rejected.append(
                RejectedIssue(index=index, code=ErrorCode.AT100, reason=e.reason, record=_record_of(raw))
            )
            logger.warning("Skipping issue #%d: %s", index, e)
            continue

        problem = validate_issue(issue)
        if problem is not None:
            code, reason = problem
            result.rejected.append(
                RejectedIssue(index=index, code=code, reason=reason, record=issue.to_dict())
            )
            logger.warning("Skipping issue #%d at %s: %s", index, issue.location, reason)
            continue

        fingerprint = fingerprinter.fingerprint(issue, file_context)
        position = by_fingerprint.get(fingerprint)
        if position is not None:
            first = result.issues[position]
            result.issues[position] = first.with_occurrences(first.occurrences + issue.occurrences)
            result.duplicates += 1
            result.diagnostics.append(
                Diagnostic(
                    ErrorCode.AT104,
                    f"Merged duplicate issue #{index} at {issue.location} into {first.location}",
                    {"index": index, "fingerprint": fingerprint},
                )
            )
            logger.debug("Merged duplicate %s into %s", issue.location, first.location)
            continue

        by_fingerprint[fingerprint] = len(result.issues)
        result.issues.append(issue.with_fingerprint(fingerprint))

    result.fingerprints = fingerprinter.stats
    result.diagnostics.extend(fingerprinter.diagnostics[reported:])
    return result


def merge_issue_sets(*issue_sets: Iterable[Issue]) -> list[Issue]:
    """Combine already fingerprinted issue sets, e.g. the results of several modules.

    Issues sharing a fingerprint are merged like duplicates within a build.
    """
    merged: dict[str, Issue] = {}
    for issues in issue_sets:
        for issue in issues:
            if issue.fingerprint is None:
                raise ValueError(f"Issue at {issue.location} has no fingerprint")
            existing = merged.get(issue.fingerprint)
            if existing is None:
                merged[issue.fingerprint] = issue
            else:
                merged[issue.fingerprint] = existing.with_occurrences(
                    existing.occurrences + issue.occurrences
                )
    return list(merged.values())


def _record_of(raw: Any) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return {
            str(k): v if isinstance(v, (str, int, float, bool, type(None))) else repr(v)
            for k, v in raw.items()
        }
    return {"value": repr(raw)}
