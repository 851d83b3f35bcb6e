"""Tests for persistence/codec.py - dict encoding of BuildResults."""

import json

import pytest

from analysis_trend.persistence import DecodeError, build_result_from_dict, build_result_to_dict
from analysis_trend.result import BuildResult


class TestRoundTrip:
    def test_exact_round_trip(self, sample_result):
        assert build_result_from_dict(build_result_to_dict(sample_result)) == sample_result

    def test_survives_json(self, sample_result):
        text = json.dumps(build_result_to_dict(sample_result))
        assert build_result_from_dict(json.loads(text)) == sample_result

    def test_classification_preserved(self, sample_result):
        decoded = build_result_from_dict(build_result_to_dict(sample_result))
        assert decoded.new_issues == sample_result.new_issues
        assert decoded.outstanding_issues == sample_result.outstanding_issues
        assert decoded.fixed_issues == sample_result.fixed_issues
        assert dict(decoded.blame) == dict(sample_result.blame)

    def test_minimal_result(self):
        result = BuildResult(build_id=1)
        assert build_result_from_dict(build_result_to_dict(result)) == result


class TestEncoding:
    def test_partitions_stored_as_fingerprints(self, sample_result):
        data = build_result_to_dict(sample_result)
        assert data["new"] == ["3333cccc4444dddd"]
        assert data["outstanding"] == ["1111aaaa2222bbbb"]
        assert data["fixed"][0]["file"] == "src/core/lexer.c"
        assert data["schema_version"] == 1


class TestDecodeErrors:
    def test_unknown_partition_key(self, sample_result):
        data = build_result_to_dict(sample_result)
        data["new"] = ["does-not-exist"]
        with pytest.raises(DecodeError):
            build_result_from_dict(data)

    def test_unsupported_schema(self, sample_result):
        data = build_result_to_dict(sample_result)
        data["schema_version"] = 99
        with pytest.raises(DecodeError) as exc_info:
            build_result_from_dict(data)
        assert exc_info.value.diagnostic.code.value == "AT501"

    def test_missing_build_id(self):
        with pytest.raises(DecodeError):
            build_result_from_dict({})

    def test_bad_issue(self, sample_result):
        data = build_result_to_dict(sample_result)
        data["issues"][0]["severity"] = "nonsense"
        with pytest.raises(DecodeError):
            build_result_from_dict(data)
