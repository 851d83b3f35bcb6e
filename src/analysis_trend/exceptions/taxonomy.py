"""Error codes and structured diagnostics.

Error Code Convention:
    AT1xx - Issue intake errors
    AT2xx - Fingerprint degradation
    AT3xx - Blame attribution gaps
    AT4xx - History / baseline lookup
    AT5xx - Persistence errors

Diagnostics never abort a build. They are attached to the BuildResult so a
caller can see what was skipped and why.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Intake errors (AT1xx)
    AT100 = "AT100"  # Raw record could not be converted to an Issue
    AT101 = "AT101"  # line_start > line_end
    AT102 = "AT102"  # Empty file path
    AT103 = "AT103"  # Negative line or column
    AT104 = "AT104"  # Duplicate fingerprint merged

    # Fingerprint errors (AT2xx)
    AT200 = "AT200"  # Source context unavailable, fallback used
    AT201 = "AT201"  # Line outside file, fallback used

    # Blame errors (AT3xx)
    AT300 = "AT300"  # File missing from blame table
    AT301 = "AT301"  # Blame oracle reported a failure for the file
    AT302 = "AT302"  # Line without blame entry

    # History errors (AT4xx)
    AT400 = "AT400"  # Predecessor walk hit the depth bound
    AT401 = "AT401"  # Build chain out of order

    # Persistence errors (AT5xx)
    AT500 = "AT500"  # SQLite write failed
    AT501 = "AT501"  # Stored record could not be decoded


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem encountered while analyzing a build.

    Attributes:
        code: Structured error code for categorization
        message: Human-readable description
        context: Additional context (file path, line number, etc.)
    """

    code: ErrorCode
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": dict(self.context),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Diagnostic":
        return cls(
            code=ErrorCode(data["error_code"]),
            message=data["message"],
            context=dict(data.get("context") or {}),
        )
