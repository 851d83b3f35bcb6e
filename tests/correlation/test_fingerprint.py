"""Tests for correlation/fingerprint.py."""

import pytest

from analysis_trend.correlation import Fingerprinter, InMemoryContext, NoContext
from analysis_trend.exceptions import ErrorCode


def _context(lines):
    return InMemoryContext({"src/main.c": "\n".join(lines) + "\n"})


class TestDeterminism:
    def test_same_input_same_fingerprint(self, make_issue, context_v1):
        issue = make_issue()
        assert Fingerprinter().fingerprint(issue, context_v1) == Fingerprinter().fingerprint(
            issue, context_v1
        )

    def test_sixteen_hex_digits(self, make_issue, context_v1):
        fp = Fingerprinter().fingerprint(make_issue(), context_v1)
        assert len(fp) == 16
        int(fp, 16)

    def test_different_files_differ(self, make_issue):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(file="a.c")) != fp.fingerprint(make_issue(file="b.c"))

    def test_different_types_differ(self, make_issue, context_v1):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(type="x"), context_v1) != fp.fingerprint(
            make_issue(type="y"), context_v1
        )


class TestLineDrift:
    def test_unrelated_insertion_keeps_fingerprint(self, make_issue, context_v1, context_v2):
        before = Fingerprinter().fingerprint(make_issue(line_start=10), context_v1)
        after = Fingerprinter().fingerprint(make_issue(line_start=12), context_v2)
        assert before == after

    def test_own_line_edit_changes_fingerprint(self, make_issue, context_v1, source_lines_v1):
        edited = list(source_lines_v1)
        edited[9] = "int value_10 = compute(10) + 1;"
        before = Fingerprinter().fingerprint(make_issue(line_start=10), context_v1)
        after = Fingerprinter().fingerprint(make_issue(line_start=10), _context(edited))
        assert before != after

    def test_edit_inside_window_changes_fingerprint(self, make_issue, context_v1, source_lines_v1):
        edited = list(source_lines_v1)
        edited[10] = "int other = 0;"
        before = Fingerprinter().fingerprint(make_issue(line_start=10), context_v1)
        after = Fingerprinter().fingerprint(make_issue(line_start=10), _context(edited))
        assert before != after

    def test_edit_outside_window_keeps_fingerprint(self, make_issue, context_v1, source_lines_v1):
        edited = list(source_lines_v1)
        edited[25] = "int unrelated = 42;"
        before = Fingerprinter().fingerprint(make_issue(line_start=10), context_v1)
        after = Fingerprinter().fingerprint(make_issue(line_start=10), _context(edited))
        assert before == after

    def test_reindentation_keeps_fingerprint(self, make_issue, context_v1, source_lines_v1):
        indented = ["    " + line for line in source_lines_v1]
        before = Fingerprinter().fingerprint(make_issue(line_start=10), context_v1)
        after = Fingerprinter().fingerprint(make_issue(line_start=10), _context(indented))
        assert before == after

    def test_message_ignored_with_context(self, make_issue, context_v1):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(message="at line 10"), context_v1) == fp.fingerprint(
            make_issue(message="at line 12"), context_v1
        )

    def test_window_clamped_at_file_start(self, make_issue, context_v1):
        fp = Fingerprinter()
        fp.fingerprint(make_issue(line_start=1), context_v1)
        assert fp.stats.context == 1

    def test_zero_context_lines_uses_only_own_line(self, make_issue, context_v1, source_lines_v1):
        edited = list(source_lines_v1)
        edited[10] = "int other = 0;"
        before = Fingerprinter(context_lines=0).fingerprint(make_issue(), context_v1)
        after = Fingerprinter(context_lines=0).fingerprint(make_issue(), _context(edited))
        assert before == after


class TestFallback:
    def test_no_context_uses_message(self, make_issue):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(message="a")) != fp.fingerprint(make_issue(message="b"))
        assert fp.stats.fallback == 2
        assert fp.stats.missing_files == 2

    def test_no_context_keeps_lines_apart(self, make_issue):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(line_start=3), NoContext()) != fp.fingerprint(
            make_issue(line_start=40), NoContext()
        )

    def test_no_context_same_line_matches(self, make_issue):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(column_start=1), NoContext()) == fp.fingerprint(
            make_issue(column_start=9), NoContext()
        )

    def test_file_level_ignores_line_range(self, make_issue):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(line_start=0)) == fp.fingerprint(
            make_issue(line_start=0, line_end=0)
        )

    def test_file_level_issue(self, make_issue, context_v1):
        fp = Fingerprinter()
        fp.fingerprint(make_issue(line_start=0), context_v1)
        assert fp.stats.fallback == 1
        assert fp.stats.missing_files == 0

    def test_line_beyond_end_of_file(self, make_issue, context_v1):
        fp = Fingerprinter()
        beyond = fp.fingerprint(make_issue(line_start=500), context_v1)
        assert fp.stats.out_of_range == 1
        assert beyond == Fingerprinter().fingerprint(make_issue(line_start=500))

    def test_context_and_fallback_differ(self, make_issue, context_v1):
        fp = Fingerprinter()
        assert fp.fingerprint(make_issue(), context_v1) != fp.fingerprint(make_issue())


def test_negative_context_lines_rejected():
    with pytest.raises(ValueError):
        Fingerprinter(context_lines=-1)


class TestDiagnostics:
    def test_missing_file_reported_once(self, make_issue, context_v1):
        fp = Fingerprinter()
        fp.fingerprint(make_issue(file="src/gone.c", line_start=1), context_v1)
        fp.fingerprint(make_issue(file="src/gone.c", line_start=2), context_v1)
        assert [d.code for d in fp.diagnostics] == [ErrorCode.AT200]
        assert fp.stats.missing_files == 2

    def test_no_context_at_all_not_reported(self, make_issue):
        fp = Fingerprinter()
        fp.fingerprint(make_issue())
        fp.fingerprint(make_issue(), NoContext())
        assert fp.diagnostics == []

    def test_line_beyond_end_reported(self, make_issue, context_v1):
        fp = Fingerprinter()
        fp.fingerprint(make_issue(line_start=500), context_v1)
        assert [d.code for d in fp.diagnostics] == [ErrorCode.AT201]
        assert fp.diagnostics[0].context == {"file": "src/main.c", "line": 500}
