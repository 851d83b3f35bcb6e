"""Build-chain access: a load/store contract over immutable BuildResults.

Results are indexed by build id. A result refers to its reference build by
id only, so walking the chain is always an explicit, bounded lookup.
"""

from __future__ import annotations

import bisect
from typing import Optional, Protocol

from ..exceptions import DuplicateBuildError
from ..result import BuildResult


class BuildStore(Protocol):
    """Storage of BuildResults addressable by build id."""

    def save(self, result: BuildResult) -> None:
        ...

    def load(self, build_id: int) -> Optional[BuildResult]:
        ...

    def previous_id(self, build_id: int) -> Optional[int]:
        """Largest stored build id below ``build_id``."""
        ...

    def latest_id(self) -> Optional[int]:
        ...


class InMemoryBuildStore:
    """Arena of BuildResults kept in a dict, ids kept sorted for lookups."""

    def __init__(self) -> None:
        self._results: dict[int, BuildResult] = {}
        self._ids: list[int] = []

    def __len__(self) -> int:
        return len(self._ids)

    def save(self, result: BuildResult) -> None:
        if result.build_id in self._results:
            raise DuplicateBuildError(result.build_id)
        self._results[result.build_id] = result
        bisect.insort(self._ids, result.build_id)

    def load(self, build_id: int) -> Optional[BuildResult]:
        return self._results.get(build_id)

    def previous_id(self, build_id: int) -> Optional[int]:
        position = bisect.bisect_left(self._ids, build_id)
        if position == 0:
            return None
        return self._ids[position - 1]

    def latest_id(self) -> Optional[int]:
        return self._ids[-1] if self._ids else None

    def build_ids(self) -> list[int]:
        return list(self._ids)
