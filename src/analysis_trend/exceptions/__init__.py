"""Exception hierarchy for analysis-trend."""

from .analysis import (
    AnalysisError,
    BuildNotFoundError,
    DuplicateBuildError,
    InvalidIssueError,
    IssueSourceError,
    PersistenceError,
)
from .base import AnalysisTrendError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError
from .taxonomy import Diagnostic, ErrorCode

__all__ = [
    "AnalysisTrendError",
    "AnalysisError",
    "InvalidIssueError",
    "IssueSourceError",
    "BuildNotFoundError",
    "DuplicateBuildError",
    "PersistenceError",
    "ConfigurationError",
    "InvalidConfigError",
    "ConfigFileError",
    "Diagnostic",
    "ErrorCode",
]
