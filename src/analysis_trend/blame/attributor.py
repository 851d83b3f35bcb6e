"""Attach committer identities to issues.

Each issue with a line number is looked up at ``table[file][line_start]``.
Missing files, missing lines and files the oracle failed on simply leave the
issue without blame; one file's failure never affects another's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..exceptions import Diagnostic, ErrorCode
from ..logging_config import get_logger
from ..models import BlameInfo, Issue
from .table import BlameTable

logger = get_logger(__name__)


@dataclass
class BlameAttribution:
    """Blame map plus per-file bookkeeping for one build."""

    blame: dict[str, BlameInfo] = field(default_factory=dict)
    blamed_files: set[str] = field(default_factory=set)
    missing_files: set[str] = field(default_factory=set)
    failed_files: dict[str, str] = field(default_factory=dict)
    unattributed: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def attributed(self) -> int:
        return len(self.blame)


class BlameAttributor:
    """Single deterministic pass over a build's issues."""

    def attach(self, issues: Iterable[Issue], blame_table: BlameTable) -> dict[str, BlameInfo]:
        """Return fingerprint -> BlameInfo for every issue with a blamed origin line."""
        return self.attribute(issues, blame_table).blame

    def attribute(self, issues: Iterable[Issue], blame_table: BlameTable) -> BlameAttribution:
        result = BlameAttribution()
        for issue in issues:
            if issue.is_file_level:
                continue
            if issue.fingerprint is None:
                raise ValueError(f"Issue at {issue.location} has no fingerprint")

            failure = blame_table.failure_for(issue.file)
            if failure is not None:
                if issue.file not in result.failed_files:
                    logger.info("Blame failed for %s: %s", issue.file, failure)
                    result.diagnostics.append(
                        Diagnostic(
                            ErrorCode.AT301,
                            f"Blame failed for {issue.file}: {failure}",
                            {"file": issue.file},
                        )
                    )
                result.failed_files[issue.file] = failure
                result.unattributed += 1
                continue

            if issue.file not in blame_table:
                if issue.file not in result.missing_files:
                    logger.info("No blame information for %s", issue.file)
                    result.diagnostics.append(
                        Diagnostic(
                            ErrorCode.AT300,
                            f"No blame information for {issue.file}",
                            {"file": issue.file},
                        )
                    )
                result.missing_files.add(issue.file)
                result.unattributed += 1
                continue

            info = blame_table.lookup(issue.file, issue.line_start)
            if info is None:
                logger.debug("No blame entry for %s", issue.location)
                result.diagnostics.append(
                    Diagnostic(
                        ErrorCode.AT302,
                        f"No blame entry for {issue.location}",
                        {"file": issue.file, "line": issue.line_start},
                    )
                )
                result.unattributed += 1
                continue

            result.blame[issue.fingerprint] = info
            result.blamed_files.add(issue.file)

        return result
