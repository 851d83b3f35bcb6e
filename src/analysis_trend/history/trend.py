"""Trend series points and summary statistics.

Trend series are derived on demand from stored BuildResults and never
persisted on their own.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from ..result import BuildResult


@dataclass(frozen=True)
class TrendPoint:
    """One build in a trend series."""

    build_id: int
    issue_count: int
    new_count: int
    fixed_count: int
    health_percentage: Optional[int]

    @classmethod
    def of(cls, result: "BuildResult") -> "TrendPoint":
        return cls(
            build_id=result.build_id,
            issue_count=result.number_of_issues,
            new_count=len(result.new_issues),
            fixed_count=len(result.fixed_issues),
            health_percentage=result.health_percentage,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TrendSummary:
    """Direction of the issue count over a series.

    ``slope`` is the least-squares slope of issue count per build.
    """

    builds: int
    latest: int
    mean: float
    slope: float
    direction: str  # "improving" | "stable" | "worsening"


def summarize_trend(
    points: Sequence[TrendPoint], tolerance: float = 0.05
) -> Optional[TrendSummary]:
    """Fit a line through the issue counts. Returns None for an empty series."""
    if not points:
        return None

    counts = np.array([p.issue_count for p in points], dtype=float)
    if len(counts) >= 2:
        positions = np.arange(len(counts), dtype=float)
        slope = float(np.polyfit(positions, counts, 1)[0])
    else:
        slope = 0.0

    if abs(slope) <= tolerance:
        direction = "stable"
    elif slope < 0:
        direction = "improving"
    else:
        direction = "worsening"

    return TrendSummary(
        builds=len(points),
        latest=int(counts[-1]),
        mean=float(np.mean(counts)),
        slope=slope,
        direction=direction,
    )


def sparkline(values: Sequence[float]) -> str:
    """ASCII sparkline from a list of numeric values."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values)
