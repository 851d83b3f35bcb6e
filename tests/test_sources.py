"""Tests for sources.py - issue sources."""

import json

import pytest

from analysis_trend.exceptions import IssueSourceError
from analysis_trend.models import Issue
from analysis_trend.sources import JsonIssueSource, StaticIssueSource


class TestJsonIssueSource:
    def test_list_report(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps([{"file": "a.c", "line_start": 1}]))
        assert JsonIssueSource(path).issues() == [{"file": "a.c", "line_start": 1}]

    def test_object_report(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps({"tool": "cppcheck", "issues": [{"file": "a.c"}]}))
        assert JsonIssueSource(path).issues() == [{"file": "a.c"}]

    def test_module_reports(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text(
            json.dumps(
                {
                    "modules": {
                        "core": [{"file": "core/a.c"}],
                        "web": {"issues": [{"file": "web/b.c", "module_name": "frontend"}]},
                    }
                }
            )
        )
        records = JsonIssueSource(path).issues()
        assert [r["module_name"] for r in records] == ["core", "frontend"]

    def test_invalid_records_passed_through(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps([{"file": "a.c"}, "garbage"]))
        assert JsonIssueSource(path).issues()[1] == "garbage"

    def test_missing_file(self, tmp_path):
        with pytest.raises(IssueSourceError):
            JsonIssueSource(tmp_path / "nope.json").issues()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text("{not json")
        with pytest.raises(IssueSourceError):
            JsonIssueSource(path).issues()

    def test_unexpected_top_level(self, tmp_path):
        path = tmp_path / "issues.json"
        path.write_text("42")
        with pytest.raises(IssueSourceError):
            JsonIssueSource(path).issues()

    @pytest.mark.parametrize(
        "report",
        [
            {"issues": {"file": "a.c"}},
            {"modules": [{"file": "a.c"}]},
            {"modules": {"core": "a.c"}},
        ],
    )
    def test_malformed_sections(self, tmp_path, report):
        path = tmp_path / "issues.json"
        path.write_text(json.dumps(report))
        with pytest.raises(IssueSourceError):
            JsonIssueSource(path).issues()


def test_static_source_returns_copy():
    issues = [Issue(file="a.c")]
    source = StaticIssueSource(issues)
    returned = source.issues()
    returned.clear()
    assert source.issues() == issues
