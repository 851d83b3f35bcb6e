"""Baseline selection and trend series over the build chain.

The walk from a build to its reference build is bounded by ``max_depth``
steps and stops early at the first build without a predecessor, so a long
or corrupted chain can never cause an unbounded traversal. Nothing here
writes to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..config import BaselinePolicy
from ..exceptions import Diagnostic, ErrorCode, PersistenceError
from ..logging_config import get_logger
from ..result import BuildResult
from .store import BuildStore
from .trend import TrendPoint

logger = get_logger(__name__)


def is_eligible(result: BuildResult, policy: BaselinePolicy) -> bool:
    """Can ``result`` serve as reference build under ``policy``?"""
    if policy is BaselinePolicy.PREVIOUS_BUILD:
        return True
    return result.effective_outcome.is_complete


@dataclass
class BaselineLookup:
    """Outcome of a reference-build search."""

    result: Optional[BuildResult] = None
    steps: int = 0
    skipped: list[int] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class HistoryAggregator:
    """Finds reference builds and assembles trend series."""

    def __init__(
        self,
        store: BuildStore,
        policy: BaselinePolicy = BaselinePolicy.PREVIOUS_BUILD,
        max_depth: int = 50,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.store = store
        self.policy = policy
        self.max_depth = max_depth

    def find_baseline(self, build_id: int) -> Optional[BuildResult]:
        """Nearest prior build eligible as reference, or None."""
        return self.lookup_baseline(build_id).result

    def lookup_baseline(self, build_id: int) -> BaselineLookup:
        lookup = BaselineLookup()
        current = self.store.previous_id(build_id)
        upper = build_id

        while current is not None:
            if current >= upper:
                lookup.diagnostics.append(
                    Diagnostic(
                        ErrorCode.AT401,
                        f"Build chain out of order at {current} (expected < {upper})",
                        {"build_id": current},
                    )
                )
                logger.warning("Build chain out of order at %s, stopping search", current)
                break
            if lookup.steps >= self.max_depth:
                lookup.diagnostics.append(
                    Diagnostic(
                        ErrorCode.AT400,
                        f"No reference build within {self.max_depth} predecessors",
                        {"build_id": build_id, "max_depth": self.max_depth},
                    )
                )
                logger.info(
                    "Stopped reference search for %s after %d builds", build_id, self.max_depth
                )
                break

            lookup.steps += 1
            try:
                candidate = self.store.load(current)
            except PersistenceError as e:
                lookup.diagnostics.append(e.diagnostic)
                logger.warning("Skipping unreadable build %s: %s", current, e.reason)
                candidate = None
            if candidate is not None and is_eligible(candidate, self.policy):
                lookup.result = candidate
                logger.debug("Reference for build %s is build %s", build_id, current)
                break

            lookup.skipped.append(current)
            upper, current = current, self.store.previous_id(current)

        return lookup

    def iter_history(
        self, start_id: Optional[int] = None, limit: Optional[int] = None
    ) -> Iterator[BuildResult]:
        """Stored results from ``start_id`` (default: latest) backwards, newest first."""
        limit = self.max_depth if limit is None else limit
        current = self.store.latest_id() if start_id is None else start_id
        upper: Optional[int] = None
        visited = 0

        while current is not None and visited < limit:
            if upper is not None and current >= upper:
                logger.warning("Build chain out of order at %s, stopping walk", current)
                return
            visited += 1
            try:
                result = self.store.load(current)
            except PersistenceError as e:
                logger.warning("Skipping unreadable build %s: %s", current, e.reason)
                result = None
            if result is not None:
                yield result
            upper, current = current, self.store.previous_id(current)

    def trend(self, last_k: int = 20, up_to: Optional[int] = None) -> list[TrendPoint]:
        """Trend series over the last ``last_k`` builds, oldest first."""
        points = [TrendPoint.of(result) for result in self.iter_history(up_to, last_k)]
        points.reverse()
        return points
