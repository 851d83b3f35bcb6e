"""BuildResult: the per-build aggregate of issues, classification, health and blame.

A BuildResult is built once, right after a build has been analyzed, and is
never changed afterwards. Later builds only read its ``issues``. The link
to the reference build is its id, not the record itself, so every stored
result can be loaded on its own.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from functools import cached_property
from typing import Mapping, Optional

from .correlation.intake import RejectedIssue
from .models import BlameInfo, BuildStatus, Issue, JobOutcome, Severity, describe_issue_count


@dataclass(frozen=True)
class BuildResult:
    """Analysis outcome for one build.

    Attributes:
        build_id: Totally ordered build number
        issues: Issue set of this build, unique fingerprints
        new_issues: Issues absent from the reference build
        outstanding_issues: Issues also present in the reference build
        fixed_issues: Issues of the reference build absent from this one
        health_percentage: 0-100, or None when health is not configured
        status: Quality-gate status
        blame: fingerprint -> committer of the issue's first line
        predecessor_id: Id of the reference build, if any
        job_outcome: Result of the hosting job, reported by the caller
        timestamp: ISO-8601 time of analysis
        rejected: Raw findings excluded because they were malformed
        duplicates: Raw findings merged into an existing fingerprint
        unattributed: Issues with a line number but no blame entry
        status_reason: Why the status was chosen
        info_messages: Progress log for the build
        error_messages: Problems encountered while analyzing the build
    """

    build_id: int
    issues: tuple[Issue, ...] = ()
    new_issues: tuple[Issue, ...] = ()
    outstanding_issues: tuple[Issue, ...] = ()
    fixed_issues: tuple[Issue, ...] = ()
    health_percentage: Optional[int] = None
    status: BuildStatus = BuildStatus.SUCCESS
    blame: Mapping[str, BlameInfo] = field(default_factory=dict)
    predecessor_id: Optional[int] = None
    job_outcome: Optional[JobOutcome] = None
    timestamp: str = ""
    rejected: tuple[RejectedIssue, ...] = ()
    duplicates: int = 0
    unattributed: int = 0
    status_reason: str = ""
    info_messages: tuple[str, ...] = ()
    error_messages: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.health_percentage is not None and not 0 <= self.health_percentage <= 100:
            raise ValueError(f"health_percentage out of range: {self.health_percentage}")
        if self.predecessor_id is not None and self.predecessor_id >= self.build_id:
            raise ValueError(
                f"Build {self.build_id} cannot use later build {self.predecessor_id} as reference"
            )

        keys = [issue.fingerprint for issue in self.issues]
        if None in keys:
            raise ValueError(f"Build {self.build_id} contains issues without fingerprint")
        if len(set(keys)) != len(keys):
            raise ValueError(f"Build {self.build_id} contains duplicate fingerprints")

        partition = [i.fingerprint for i in self.new_issues + self.outstanding_issues]
        if sorted(partition) != sorted(keys):
            raise ValueError(f"Build {self.build_id}: new and outstanding issues must partition issues")
        if any(i.fingerprint in self.issues_by_fingerprint for i in self.fixed_issues):
            raise ValueError(f"Build {self.build_id}: fixed issues must not be part of the build")

    @cached_property
    def issues_by_fingerprint(self) -> dict[str, Issue]:
        return {issue.fingerprint: issue for issue in self.issues}  # type: ignore[misc]

    @cached_property
    def severity_counts(self) -> dict[Severity, int]:
        counts = Counter(issue.severity for issue in self.issues)
        return {severity: counts.get(severity, 0) for severity in Severity.ordered()}

    @property
    def number_of_issues(self) -> int:
        return len(self.issues)

    @property
    def skipped_count(self) -> int:
        """Findings rejected plus issues left without blame."""
        return len(self.rejected) + self.unattributed

    @property
    def is_successful(self) -> bool:
        return self.status is BuildStatus.SUCCESS

    @property
    def effective_outcome(self) -> JobOutcome:
        """The job outcome if the caller reported one, otherwise our own status."""
        if self.job_outcome is not None:
            return self.job_outcome
        return JobOutcome(self.status.value)

    @property
    def summary(self) -> str:
        parts = [describe_issue_count(self.number_of_issues)]
        if self.new_issues:
            parts.append(f"{len(self.new_issues)} new")
        if self.fixed_issues:
            parts.append(f"{len(self.fixed_issues)} fixed")
        return ", ".join(parts)

    def blame_for(self, issue: Issue) -> Optional[BlameInfo]:
        if issue.fingerprint is None:
            return None
        return self.blame.get(issue.fingerprint)
