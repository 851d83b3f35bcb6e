"""Tests for result.py - BuildResult invariants and derived values."""

import pytest

from analysis_trend.models import BuildStatus, Issue, JobOutcome, Severity
from analysis_trend.result import BuildResult


def _issue(key, severity=Severity.NORMAL):
    return Issue(file=f"{key}.c", line_start=1, severity=severity, fingerprint=key)


class TestInvariants:
    def test_health_out_of_range(self):
        with pytest.raises(ValueError):
            BuildResult(build_id=1, health_percentage=101)

    def test_predecessor_must_be_earlier(self):
        with pytest.raises(ValueError):
            BuildResult(build_id=3, predecessor_id=3)

    def test_unfingerprinted_issue(self):
        issue = Issue(file="a.c")
        with pytest.raises(ValueError):
            BuildResult(build_id=1, issues=(issue,), new_issues=(issue,))

    def test_duplicate_fingerprints(self):
        a = _issue("a")
        with pytest.raises(ValueError):
            BuildResult(build_id=1, issues=(a, a), new_issues=(a, a))

    def test_partition_must_cover_issues(self):
        a, b = _issue("a"), _issue("b")
        with pytest.raises(ValueError):
            BuildResult(build_id=1, issues=(a, b), new_issues=(a,))

    def test_fixed_must_not_be_current(self):
        a = _issue("a")
        with pytest.raises(ValueError):
            BuildResult(build_id=1, issues=(a,), new_issues=(a,), fixed_issues=(a,))


class TestDerived:
    def test_severity_counts(self, sample_result):
        assert sample_result.severity_counts == {
            Severity.ERROR: 1,
            Severity.HIGH: 1,
            Severity.NORMAL: 0,
            Severity.LOW: 0,
        }

    def test_issues_by_fingerprint(self, sample_result):
        assert set(sample_result.issues_by_fingerprint) == {
            "1111aaaa2222bbbb",
            "3333cccc4444dddd",
        }

    def test_skipped_count(self, sample_result):
        assert sample_result.skipped_count == 2

    def test_summary(self, sample_result):
        assert sample_result.summary == "2 issues, 1 new, 1 fixed"
        assert BuildResult(build_id=1).summary == "No issues"

    def test_is_successful(self, sample_result):
        assert not sample_result.is_successful
        assert BuildResult(build_id=1).is_successful

    def test_effective_outcome(self, sample_result):
        assert sample_result.effective_outcome is JobOutcome.SUCCESS
        failed = BuildResult(build_id=1, status=BuildStatus.FAILURE)
        assert failed.effective_outcome is JobOutcome.FAILURE

    def test_blame_for(self, sample_result):
        kept, added = sample_result.issues
        assert sample_result.blame_for(kept).author == "alice"
        assert sample_result.blame_for(added) is None
        assert sample_result.blame_for(Issue(file="x.c")) is None
