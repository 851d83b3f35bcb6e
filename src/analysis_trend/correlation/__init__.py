"""Issue identity and cross-build correlation."""

from .context import FileContextProvider, InMemoryContext, NoContext, WorkspaceContext
from .differencer import Classification, Differencer, classify
from .fingerprint import Fingerprinter, FingerprintStats
from .intake import IntakeResult, RejectedIssue, merge_issue_sets, prepare_issues

__all__ = [
    "FileContextProvider",
    "InMemoryContext",
    "NoContext",
    "WorkspaceContext",
    "Classification",
    "Differencer",
    "classify",
    "Fingerprinter",
    "FingerprintStats",
    "IntakeResult",
    "RejectedIssue",
    "merge_issue_sets",
    "prepare_issues",
]
