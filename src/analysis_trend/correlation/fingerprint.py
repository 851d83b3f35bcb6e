"""Stable identity for issues across builds.

A fingerprint stays the same as long as the *same* finding sits in the
*same* surrounding code, even when unrelated edits elsewhere in the file
shift its absolute line number.

Two modes:
  CONTEXT  -> sha256(file | type | category | normalized source window)
  FALLBACK -> sha256(file | type | category | message [| line_start | line_end])

The source window is the issue's first line plus ``context_lines`` lines on
each side, clamped to the file, with all whitespace removed. The message is
left out of the context mode because tools often embed line numbers in it.
FALLBACK is used for file-level issues, for files without content and for
lines beyond the end of the file. Line-level fallback keys include the line
range, so identical findings on different lines stay distinct at the cost of
following the issue when lines drift.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Optional

from ..exceptions import Diagnostic, ErrorCode
from ..logging_config import get_logger
from ..models import Issue
from .context import FileContextProvider, NoContext

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

CONTEXT = "context"
FALLBACK = "fallback"


@dataclass
class FingerprintStats:
    """How many fingerprints used each mode during one build."""

    context: int = 0
    fallback: int = 0
    missing_files: int = 0
    out_of_range: int = 0


class Fingerprinter:
    """Derives fingerprints from an issue and its source file."""

    def __init__(self, context_lines: int = 2) -> None:
        if context_lines < 0:
            raise ValueError("context_lines must be non-negative")
        self.context_lines = context_lines
        self.stats = FingerprintStats()
        self.diagnostics: list[Diagnostic] = []
        self._unavailable: set[str] = set()

    def fingerprint(self, issue: Issue, file_context: Optional[FileContextProvider] = None) -> str:
        """Return the 16-hex-digit fingerprint of ``issue``."""
        report = file_context is not None and not isinstance(file_context, NoContext)
        window = self._window(issue, file_context or NoContext(), report)
        if window is None:
            self.stats.fallback += 1
            if issue.is_file_level:
                return _digest(FALLBACK, issue.file, issue.type, issue.category, issue.message)
            return _digest(
                FALLBACK,
                issue.file,
                issue.type,
                issue.category,
                issue.message,
                str(issue.line_start),
                str(issue.line_end),
            )
        self.stats.context += 1
        return _digest(CONTEXT, issue.file, issue.type, issue.category, window)

    def _window(
        self, issue: Issue, file_context: FileContextProvider, report: bool = False
    ) -> Optional[str]:
        if issue.is_file_level:
            return None
        lines = file_context.lines(issue.file)
        if lines is None:
            self.stats.missing_files += 1
            if report and issue.file not in self._unavailable:
                self._unavailable.add(issue.file)
                logger.info("No source context for %s, using fallback fingerprints", issue.file)
                self.diagnostics.append(
                    Diagnostic(
                        ErrorCode.AT200,
                        f"No source context for {issue.file}, using fallback fingerprints",
                        {"file": issue.file},
                    )
                )
            return None
        index = issue.line_start - 1
        if index >= len(lines):
            self.stats.out_of_range += 1
            logger.debug(
                "Line %d outside %s (%d lines), using fallback fingerprint",
                issue.line_start,
                issue.file,
                len(lines),
            )
            self.diagnostics.append(
                Diagnostic(
                    ErrorCode.AT201,
                    f"Line {issue.line_start} outside {issue.file} ({len(lines)} lines), "
                    "using fallback fingerprint",
                    {"file": issue.file, "line": issue.line_start},
                )
            )
            return None
        first = max(0, index - self.context_lines)
        last = min(len(lines), index + self.context_lines + 1)
        return "\n".join(_WHITESPACE.sub("", line) for line in lines[first:last])


def _digest(*parts: str) -> str:
    raw = "|".join(parts)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]
