"""Build-chain navigation and trend series."""

from .aggregator import BaselineLookup, HistoryAggregator, is_eligible
from .store import BuildStore, InMemoryBuildStore
from .trend import TrendPoint, TrendSummary, sparkline, summarize_trend

__all__ = [
    "BaselineLookup",
    "HistoryAggregator",
    "is_eligible",
    "BuildStore",
    "InMemoryBuildStore",
    "TrendPoint",
    "TrendSummary",
    "sparkline",
    "summarize_trend",
]
