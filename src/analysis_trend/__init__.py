"""
analysis-trend - Cross-build static-analysis issue tracking

Correlates the issues reported by static-analysis tools across a sequence of
builds: which issues are new, which were fixed, which persist, how healthy
each build is and who committed the line each issue points at.
"""

__version__ = "0.1.0"

from .api import BuildAnalyzer, analyze_build, record_build
from .blame import BlameTable
from .config import AnalysisConfig, HealthThresholds, StatusThreshold, load_config
from .history import HistoryAggregator, InMemoryBuildStore
from .models import BlameInfo, BuildStatus, Issue, JobOutcome, Severity
from .result import BuildResult

__all__ = [
    "analyze_build",  # Main entry points
    "record_build",
    "BuildAnalyzer",
    "BuildResult",
    "Issue",
    "Severity",
    "BuildStatus",
    "JobOutcome",
    "BlameInfo",
    "BlameTable",
    "AnalysisConfig",
    "HealthThresholds",
    "StatusThreshold",
    "load_config",
    "HistoryAggregator",
    "InMemoryBuildStore",
]
