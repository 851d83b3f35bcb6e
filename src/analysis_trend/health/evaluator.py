"""Health percentage and build status from issue counts.

Health: piecewise-linear between the configured thresholds.

    count <= healthy    -> 100
    count >= unhealthy  -> 0
    otherwise           -> 100 * (unhealthy - count) / (unhealthy - healthy)

rounded half up and clamped to [0, 100]. Health is non-increasing in the
count. Without thresholds no percentage is produced (``None``, not 0).

Status: a priority cascade that never looks at the health percentage.
Every failure threshold is checked before any unstable threshold; within a
level TOTAL thresholds come before NEW ones and tiers go from ERROR down to
LOW, with the all-severity tier last. The first threshold whose count
reaches its limit decides the status; if none does the build is SUCCESS.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import HealthThresholds, StatusThreshold, ThresholdScope
from ..logging_config import get_logger
from ..models import BuildStatus, Issue, Severity, describe_issue_count

logger = get_logger(__name__)


@dataclass(frozen=True)
class HealthReport:
    """Outcome of one health evaluation.

    Attributes:
        percentage: 0-100, or None when health thresholds are not configured
        status: Build status from the threshold cascade
        counted: (Weighted) issue count the percentage was computed from
        triggered: Threshold that set a non-SUCCESS status
        reason: Human-readable explanation of the status
    """

    percentage: Optional[int]
    status: BuildStatus
    counted: float
    triggered: Optional[StatusThreshold] = None
    reason: str = ""

    @property
    def description(self) -> str:
        if self.percentage is None:
            return self.reason
        return f"Health {self.percentage}%: {self.reason}"


def compute_health(count: float, healthy: int, unhealthy: int) -> int:
    """Map an issue count to a health percentage.

    Raises:
        ValueError: If the thresholds are negative or inverted.
    """
    if healthy < 0 or unhealthy < 0 or healthy > unhealthy:
        raise ValueError(f"Invalid health thresholds healthy={healthy} unhealthy={unhealthy}")
    if count <= healthy:
        return 100
    if count >= unhealthy:
        return 0
    value = 100.0 * (unhealthy - count) / (unhealthy - healthy)
    return max(0, min(100, int(math.floor(value + 0.5))))


def _tier_rank(threshold: StatusThreshold) -> tuple[int, int]:
    scope_rank = 0 if threshold.scope is ThresholdScope.TOTAL else 1
    tier_rank = threshold.severity.rank if threshold.severity else len(Severity.ordered())
    return scope_rank, tier_rank


class HealthEvaluator:
    """Computes health and status; thresholds are passed on every call."""

    def evaluate(
        self,
        issues: Iterable[Issue],
        thresholds: HealthThresholds,
        new_issues: Iterable[Issue] = (),
    ) -> HealthReport:
        """Evaluate one build.

        Args:
            issues: All issues of the build
            thresholds: Health and status configuration
            new_issues: The subset of ``issues`` that is new since the baseline

        Returns:
            HealthReport with percentage (or None) and status
        """
        issues = list(issues)
        new_issues = list(new_issues)

        counted = self.health_count(issues, thresholds)
        percentage: Optional[int] = None
        if thresholds.health_enabled:
            assert thresholds.healthy is not None and thresholds.unhealthy is not None
            percentage = compute_health(counted, thresholds.healthy, thresholds.unhealthy)

        status, triggered, reason = self.status(issues, thresholds, new_issues)
        logger.debug(
            "Evaluated %d issues: health=%s status=%s", len(issues), percentage, status.value
        )
        return HealthReport(
            percentage=percentage,
            status=status,
            counted=counted,
            triggered=triggered,
            reason=reason,
        )

    def health_count(self, issues: Iterable[Issue], thresholds: HealthThresholds) -> float:
        """Number of issues at or above the minimum severity, weighted if configured."""
        return float(
            sum(
                thresholds.weight_of(issue.severity)
                for issue in issues
                if issue.severity.at_least(thresholds.minimum_severity)
            )
        )

    def status(
        self,
        issues: Iterable[Issue],
        thresholds: HealthThresholds,
        new_issues: Iterable[Issue] = (),
    ) -> tuple[BuildStatus, Optional[StatusThreshold], str]:
        """Run the status cascade and return (status, triggering threshold, reason)."""
        counts = {
            ThresholdScope.TOTAL: _severity_counts(issues),
            ThresholdScope.NEW: _severity_counts(new_issues),
        }
        ordered = sorted(thresholds.status, key=_tier_rank)

        for status, attribute in _LEVELS:
            for threshold in ordered:
                limit = getattr(threshold, attribute)
                if limit is None:
                    continue
                count = _tier_count(counts[threshold.scope], threshold.severity)
                if count >= limit:
                    reason = _reason(threshold, count, limit, attribute)
                    logger.info("Build marked %s: %s", status.value, reason)
                    return status, threshold, reason

        total = sum(counts[ThresholdScope.TOTAL].values())
        return BuildStatus.SUCCESS, None, describe_issue_count(total)


_LEVELS = ((BuildStatus.FAILURE, "failure"), (BuildStatus.UNSTABLE, "unstable"))


def _severity_counts(issues: Iterable[Issue]) -> Counter:
    return Counter(issue.severity for issue in issues)


def _tier_count(counts: Counter, severity: Optional[Severity]) -> int:
    if severity is None:
        return sum(counts.values())
    return counts.get(severity, 0)


def _reason(threshold: StatusThreshold, count: int, limit: int, level: str) -> str:
    scope = "new " if threshold.scope is ThresholdScope.NEW else ""
    tier = f" of severity {threshold.severity.value}" if threshold.severity else ""
    noun = "issue" if count == 1 else "issues"
    return f"{count} {scope}{noun}{tier} reached {level} threshold {limit}"
