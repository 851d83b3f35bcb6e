"""Analysis-related exceptions: issue records, build chain, storage."""

from typing import Any, Optional

from .base import AnalysisTrendError
from .taxonomy import Diagnostic, ErrorCode


class AnalysisError(AnalysisTrendError):
    """Base class for errors raised while analyzing a build."""

    pass


class InvalidIssueError(AnalysisError):
    """Raised when a raw issue record cannot be turned into an Issue."""

    def __init__(self, reason: str, field: Optional[str] = None, value: Any = None):
        details = {"reason": reason}
        if field is not None:
            details["field"] = field
            details["value"] = repr(value)
        super().__init__(f"Invalid issue: {reason}", details=details)
        self.reason = reason
        self.field = field
        self.value = value


class BuildNotFoundError(AnalysisError):
    """Raised when a build id has no stored result."""

    def __init__(self, build_id: int):
        super().__init__(f"No stored result for build {build_id}", details={"build_id": str(build_id)})
        self.build_id = build_id


class DuplicateBuildError(AnalysisError):
    """Raised when a result for an already recorded build id is stored again."""

    def __init__(self, build_id: int):
        super().__init__(
            f"Build {build_id} has already been recorded", details={"build_id": str(build_id)}
        )
        self.build_id = build_id


class PersistenceError(AnalysisError):
    """Raised when the history database cannot be read or written.

    ``diagnostic`` carries AT501 for records that cannot be decoded and
    AT500 for everything else.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"History database {operation} failed",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason
        code = ErrorCode.AT501 if operation == "decode" else ErrorCode.AT500
        self.diagnostic = Diagnostic(code, f"{operation} failed: {reason}", {"operation": operation})


class IssueSourceError(AnalysisError):
    """Raised when an issue report cannot be read at all."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Cannot read issues from {source}", details={"source": source, "reason": reason}
        )
        self.source = source
        self.reason = reason
