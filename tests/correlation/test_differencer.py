"""Tests for correlation/differencer.py - new / fixed / outstanding partition."""

import pytest

from analysis_trend.correlation import Differencer, classify, prepare_issues
from analysis_trend.models import Issue


def _keys(issues):
    return {issue.fingerprint for issue in issues}


class TestPartitionLaws:
    @pytest.mark.parametrize(
        "current,previous",
        [
            ("abc", "bcd"),
            ("abc", "abc"),
            ("abc", "xyz"),
            ("a", "abcdef"),
            ("abcdef", "f"),
        ],
    )
    def test_laws(self, keyed_issue, current, previous):
        cur = [keyed_issue(k) for k in current]
        prev = [keyed_issue(k) for k in previous]
        result = classify(cur, prev)

        assert _keys(result.new) & _keys(result.outstanding) == set()
        assert _keys(result.new) | _keys(result.outstanding) == _keys(cur)
        assert _keys(result.fixed) & _keys(cur) == set()
        assert _keys(result.fixed) <= _keys(prev)
        assert _keys(result.new) & _keys(prev) == set()

    def test_empty_previous(self, keyed_issue):
        cur = [keyed_issue("a"), keyed_issue("b")]
        result = classify(cur, [])
        assert list(result.new) == cur
        assert result.fixed == ()
        assert result.outstanding == ()

    def test_empty_current(self, keyed_issue):
        prev = [keyed_issue("a"), keyed_issue("b")]
        result = classify([], prev)
        assert list(result.fixed) == prev
        assert result.new == ()
        assert result.outstanding == ()

    def test_both_empty(self):
        result = classify([], [])
        assert result.new == result.fixed == result.outstanding == ()


class TestClassification:
    def test_outstanding_taken_from_current(self, keyed_issue):
        old = keyed_issue("a", line_start=10)
        moved = keyed_issue("a", line_start=12)
        result = classify([moved], [old])
        assert result.outstanding[0].line_start == 12

    def test_partitions_keep_source_order(self, keyed_issue):
        cur = [keyed_issue(k) for k in "dcba"]
        prev = [keyed_issue(k) for k in "zcxa"]
        result = classify(cur, prev)
        assert [i.fingerprint for i in result.new] == ["d", "b"]
        assert [i.fingerprint for i in result.outstanding] == ["c", "a"]
        assert [i.fingerprint for i in result.fixed] == ["z", "x"]

    def test_current_property(self, keyed_issue):
        result = classify([keyed_issue("a"), keyed_issue("b")], [keyed_issue("b")])
        assert _keys(result.current) == {"a", "b"}

    def test_missing_fingerprint_raises(self):
        with pytest.raises(ValueError):
            classify([Issue(file="a.c")], [])

    def test_differencer_matches_function(self, keyed_issue):
        cur = [keyed_issue("a")]
        prev = [keyed_issue("b")]
        assert Differencer().classify(cur, prev) == classify(cur, prev)


def test_moved_issue_is_outstanding(context_v1, context_v2):
    """A@10, B@20 -> A moved to 12 by unrelated edits, B removed, C@30 added."""
    issue_a = {"file": "src/main.c", "line_start": 10, "type": "unused-variable"}
    issue_b = {"file": "src/main.c", "line_start": 20, "type": "null-dereference"}
    build_1 = prepare_issues([issue_a, issue_b], file_context=context_v1).issues
    build_2 = prepare_issues(
        [
            {**issue_a, "line_start": 12},
            {"file": "src/main.c", "line_start": 30, "type": "resource-leak"},
        ],
        file_context=context_v2,
    ).issues

    result = classify(build_2, build_1)

    assert [i.type for i in result.outstanding] == ["unused-variable"]
    assert [i.type for i in result.new] == ["resource-leak"]
    assert [i.type for i in result.fixed] == ["null-dereference"]
