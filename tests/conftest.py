"""Shared test fixtures for analysis-trend tests."""

import pytest

from analysis_trend.correlation import InMemoryContext
from analysis_trend.models import Issue, Severity


# ── source files ─────────────────────────────────────────────────

SOURCE_V1 = [f"int value_{n} = compute({n});" for n in range(1, 41)]

# Two unrelated lines inserted at the top: every original line moves down by 2.
SOURCE_V2 = ["/* generated header */", "#include <stdio.h>"] + SOURCE_V1


@pytest.fixture
def source_lines_v1():
    return list(SOURCE_V1)


@pytest.fixture
def source_v1():
    """40-line C file as it was in build 1."""
    return "\n".join(SOURCE_V1) + "\n"


@pytest.fixture
def source_v2():
    """Same file with two lines inserted above everything else."""
    return "\n".join(SOURCE_V2) + "\n"


@pytest.fixture
def context_v1(source_v1):
    return InMemoryContext({"src/main.c": source_v1})


@pytest.fixture
def context_v2(source_v2):
    return InMemoryContext({"src/main.c": source_v2})


@pytest.fixture
def make_issue():
    """Factory for issues with sensible defaults."""

    def _make(**kwargs) -> Issue:
        defaults = {
            "file": "src/main.c",
            "line_start": 10,
            "severity": Severity.NORMAL,
            "category": "correctness",
            "type": "unused-variable",
            "message": "value is never read",
        }
        defaults.update(kwargs)
        return Issue(**defaults)

    return _make


@pytest.fixture
def keyed_issue():
    """Factory for already fingerprinted issues."""

    def _make(key: str, severity: Severity = Severity.NORMAL, **kwargs) -> Issue:
        defaults = {"file": f"src/{key}.c", "line_start": 1, "type": key}
        defaults.update(kwargs)
        return Issue(severity=severity, fingerprint=key, **defaults)

    return _make


@pytest.fixture
def sample_result():
    """A BuildResult with every field populated."""
    from analysis_trend.correlation import RejectedIssue
    from analysis_trend.exceptions import ErrorCode
    from analysis_trend.models import BlameInfo, BuildStatus, JobOutcome
    from analysis_trend.result import BuildResult

    kept = Issue(
        file="src/core/parser.c",
        line_start=42,
        line_end=44,
        column_start=3,
        column_end=17,
        severity=Severity.HIGH,
        category="memory",
        type="use-after-free",
        message="pointer used after free()",
        module_name="core",
        package_name="parser",
        fingerprint="1111aaaa2222bbbb",
    )
    added = Issue(
        file="src/web/handler.c",
        line_start=7,
        severity=Severity.ERROR,
        type="null-dereference",
        fingerprint="3333cccc4444dddd",
        occurrences=3,
    )
    gone = Issue(
        file="src/core/lexer.c",
        line_start=99,
        severity=Severity.LOW,
        type="style",
        fingerprint="5555eeee6666ffff",
    )
    return BuildResult(
        build_id=7,
        issues=(kept, added),
        new_issues=(added,),
        outstanding_issues=(kept,),
        fixed_issues=(gone,),
        health_percentage=80,
        status=BuildStatus.UNSTABLE,
        blame={kept.fingerprint: BlameInfo("alice", "alice@example.com", "c0ffee")},
        predecessor_id=5,
        job_outcome=JobOutcome.SUCCESS,
        timestamp="2024-03-01T12:00:00+00:00",
        rejected=(
            RejectedIssue(
                index=2,
                code=ErrorCode.AT101,
                reason="line_start 9 > line_end 2",
                record={"file": "x.c", "line_start": 9, "line_end": 2},
            ),
        ),
        duplicates=2,
        unattributed=1,
        status_reason="1 new issue reached unstable threshold 1",
        info_messages=("-> found 2 issues (skipped 2 duplicates)",),
        error_messages=("[AT101] Rejected issue #2: line_start 9 > line_end 2",),
    )
