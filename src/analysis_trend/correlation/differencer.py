"""Classify a build's issues against its reference build.

Matching is purely by fingerprint:
  new         -> in current, fingerprint absent from previous
  outstanding -> fingerprint in both (the current value is kept, so updated
                 messages and severities show up)
  fixed       -> in previous, fingerprint absent from current

Runs in O(|current| + |previous|) with dict lookups. Each partition keeps
the order of the set it was drawn from, so the result does not depend on
how the other set is ordered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models import Issue


@dataclass(frozen=True)
class Classification:
    """Three-way partition of a build's issues relative to a previous build."""

    new: tuple[Issue, ...] = ()
    fixed: tuple[Issue, ...] = ()
    outstanding: tuple[Issue, ...] = ()

    @property
    def current(self) -> tuple[Issue, ...]:
        return self.new + self.outstanding


class Differencer:
    """Fingerprint-based classifier used by the build pipeline."""

    def classify(self, current: Iterable[Issue], previous: Iterable[Issue]) -> Classification:
        return classify(current, previous)


def classify(current: Iterable[Issue], previous: Iterable[Issue]) -> Classification:
    """Partition ``current`` into new/outstanding and find the fixed issues of ``previous``.

    Raises:
        ValueError: If an issue has not been fingerprinted.
    """
    current_keys = _keys(current)
    previous_keys = _keys(previous)

    new = tuple(issue for key, issue in current_keys.items() if key not in previous_keys)
    outstanding = tuple(issue for key, issue in current_keys.items() if key in previous_keys)
    fixed = tuple(issue for key, issue in previous_keys.items() if key not in current_keys)

    return Classification(new=new, fixed=fixed, outstanding=outstanding)


def _keys(issues: Iterable[Issue]) -> dict[str, Issue]:
    keyed: dict[str, Issue] = {}
    for issue in issues:
        if issue.fingerprint is None:
            raise ValueError(f"Issue at {issue.location} has no fingerprint")
        keyed.setdefault(issue.fingerprint, issue)
    return keyed
