"""Tests for blame/table.py."""

import json

from analysis_trend.blame import BlameTable, files_to_blame
from analysis_trend.models import BlameInfo, Issue


ALICE = BlameInfo("alice", "alice@example.com", "c0ffee")


class TestBlameTable:
    def test_lookup(self):
        table = BlameTable({"src/a.c": {10: ALICE}})
        assert table.lookup("src/a.c", 10) == ALICE
        assert table.lookup("src/a.c", 11) is None
        assert table.lookup("src/b.c", 10) is None

    def test_paths_normalized(self):
        table = BlameTable({"./src\\a.c": {1: ALICE}}, errors={".\\src\\b.c": "boom"})
        assert "src/a.c" in table
        assert table.failure_for("src/b.c") == "boom"

    def test_from_dict(self):
        table = BlameTable.from_dict(
            {
                "files": {"a.c": {"3": {"author": "bob", "email": "b@x", "commit": "abc"}}},
                "errors": {"b.c": "not tracked"},
            }
        )
        assert table.lookup("a.c", 3) == BlameInfo("bob", "b@x", "abc")
        assert table.failure_for("b.c") == "not tracked"
        assert table.files == ["a.c"]

    def test_bare_files_mapping(self):
        table = BlameTable.from_dict({"a.c": {"1": {"author": "carol"}}})
        assert table.lookup("a.c", 1).author == "carol"
        assert len(table) == 1

    def test_load_and_to_dict(self, tmp_path):
        original = BlameTable({"a.c": {2: ALICE}}, errors={"b.c": "x"})
        path = tmp_path / "blame.json"
        path.write_text(json.dumps(original.to_dict()))

        loaded = BlameTable.load(path)
        assert loaded.to_dict() == original.to_dict()


def test_files_to_blame():
    issues = [
        Issue(file="b.c", line_start=3),
        Issue(file="a.c", line_start=1),
        Issue(file="a.c", line_start=9),
        Issue(file="c.c"),
    ]
    assert files_to_blame(issues) == ["a.c", "b.c"]
