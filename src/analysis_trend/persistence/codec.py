"""JSON-friendly encoding of BuildResults.

``build_result_from_dict(build_result_to_dict(r)) == r`` for every result.
New and outstanding issues are stored as fingerprint lists pointing into
``issues``; fixed issues are stored in full because they are not part of the
build's own issue set.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..correlation.intake import RejectedIssue
from ..exceptions import Diagnostic, ErrorCode, InvalidIssueError, PersistenceError
from ..models import BlameInfo, BuildStatus, Issue, JobOutcome
from ..result import BuildResult

SCHEMA_VERSION = 1


class DecodeError(PersistenceError):
    """A stored record does not describe a valid BuildResult."""

    def __init__(self, build_id: Any, reason: str):
        super().__init__("decode", f"build {build_id}: {reason}")
        self.diagnostic = Diagnostic(ErrorCode.AT501, self.reason, {"build_id": build_id})


def build_result_to_dict(result: BuildResult) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "build_id": result.build_id,
        "predecessor_id": result.predecessor_id,
        "timestamp": result.timestamp,
        "status": result.status.value,
        "job_outcome": result.job_outcome.value if result.job_outcome else None,
        "health_percentage": result.health_percentage,
        "status_reason": result.status_reason,
        "issues": [issue.to_dict() for issue in result.issues],
        "new": [issue.fingerprint for issue in result.new_issues],
        "outstanding": [issue.fingerprint for issue in result.outstanding_issues],
        "fixed": [issue.to_dict() for issue in result.fixed_issues],
        "blame": {key: info.to_dict() for key, info in result.blame.items()},
        "rejected": [r.to_dict() for r in result.rejected],
        "duplicates": result.duplicates,
        "unattributed": result.unattributed,
        "info_messages": list(result.info_messages),
        "error_messages": list(result.error_messages),
    }


def build_result_from_dict(data: Mapping[str, Any]) -> BuildResult:
    """Decode a dict produced by ``build_result_to_dict``.

    Raises:
        DecodeError: If the record is incomplete or inconsistent.
    """
    build_id = data.get("build_id")
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise DecodeError(build_id, f"unsupported schema version {version}")

    try:
        issues = tuple(Issue.from_dict(d) for d in data.get("issues", ()))
        by_key = {issue.fingerprint: issue for issue in issues}
        return BuildResult(
            build_id=int(data["build_id"]),
            issues=issues,
            new_issues=tuple(by_key[key] for key in data.get("new", ())),
            outstanding_issues=tuple(by_key[key] for key in data.get("outstanding", ())),
            fixed_issues=tuple(Issue.from_dict(d) for d in data.get("fixed", ())),
            health_percentage=data.get("health_percentage"),
            status=BuildStatus(data.get("status", "SUCCESS")),
            blame={key: BlameInfo.from_dict(info) for key, info in data.get("blame", {}).items()},
            predecessor_id=data.get("predecessor_id"),
            job_outcome=JobOutcome(data["job_outcome"]) if data.get("job_outcome") else None,
            timestamp=data.get("timestamp", ""),
            rejected=tuple(RejectedIssue.from_dict(r) for r in data.get("rejected", ())),
            duplicates=int(data.get("duplicates", 0)),
            unattributed=int(data.get("unattributed", 0)),
            status_reason=data.get("status_reason", ""),
            info_messages=tuple(data.get("info_messages", ())),
            error_messages=tuple(data.get("error_messages", ())),
        )
    except (KeyError, TypeError, ValueError, InvalidIssueError) as e:
        raise DecodeError(build_id, str(e)) from e
