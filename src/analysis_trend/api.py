"""Public API for analysis-trend.

This module wires the pipeline for one build: intake, reference-build
lookup, new/fixed classification, health and status, blame. Callers hand
in the build's issues and get an immutable BuildResult back.

Example:
    >>> from analysis_trend import InMemoryBuildStore, record_build
    >>>
    >>> store = InMemoryBuildStore()
    >>> first = record_build(store, 1, [{"file": "a.py", "line_start": 3, "type": "E501"}])
    >>> second = record_build(store, 2, [])
    >>> len(second.fixed_issues)
    1
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from .blame import BlameAttribution, BlameAttributor, BlameTable
from .config import AnalysisConfig
from .correlation import Differencer, FileContextProvider, Fingerprinter, prepare_issues
from .correlation.intake import RawIssue
from .exceptions import DuplicateBuildError, ErrorCode
from .health import HealthEvaluator
from .history import BuildStore, HistoryAggregator
from .logging_config import get_logger
from .models import JobOutcome
from .result import BuildResult

logger = get_logger(__name__)


class BuildAnalyzer:
    """Analyzes builds against the history held in a BuildStore.

    The analyzer never mutates stored results; ``record`` only adds the
    new one.
    """

    def __init__(self, store: BuildStore, config: Optional[AnalysisConfig] = None) -> None:
        self.store = store
        self.config = config or AnalysisConfig()
        self.aggregator = HistoryAggregator(
            store, self.config.baseline_policy, self.config.max_chain_depth
        )
        self.differencer = Differencer()
        self.evaluator = HealthEvaluator()
        self.attributor = BlameAttributor()

    def analyze(
        self,
        build_id: int,
        raw_issues: Iterable[RawIssue],
        file_context: Optional[FileContextProvider] = None,
        blame_table: Optional[BlameTable] = None,
        job_outcome: Optional[JobOutcome] = None,
        timestamp: Optional[str] = None,
    ) -> BuildResult:
        """Analyze one build without storing it.

        Args:
            build_id: Id of the build, greater than every reference candidate
            raw_issues: Issues or parser records in report order
            file_context: Source content at analysis time, for fingerprints
            blame_table: Committer per file and line, if blame was collected
            job_outcome: Result of the hosting job
            timestamp: ISO-8601 analysis time (defaults to now, UTC)

        Returns:
            The BuildResult for ``build_id``.
        """
        info: list[str] = []
        errors: list[str] = []

        intake = prepare_issues(
            raw_issues, Fingerprinter(self.config.context_lines), file_context
        )
        info.append(f"-> found {len(intake.issues)} issues (skipped {intake.duplicates} duplicates)")
        for rejected in intake.rejected:
            errors.append(str(rejected.to_diagnostic()))
        if intake.fingerprints.fallback:
            info.append(
                f"-> {intake.fingerprints.fallback} fingerprints computed without source context"
            )
        info.extend(str(d) for d in intake.diagnostics)

        lookup = self.aggregator.lookup_baseline(build_id)
        errors.extend(str(d) for d in lookup.diagnostics)
        baseline = lookup.result
        if baseline is None:
            info.append("-> no reference build found")
        else:
            info.append(f"-> using build {baseline.build_id} as reference")

        classification = self.differencer.classify(
            intake.issues, baseline.issues if baseline else ()
        )
        info.append(
            f"-> {len(classification.new)} new, {len(classification.fixed)} fixed, "
            f"{len(classification.outstanding)} outstanding"
        )

        report = self.evaluator.evaluate(
            intake.issues, self.config.thresholds, classification.new
        )
        if report.percentage is not None:
            info.append(f"-> health {report.percentage}%")
        info.append(f"-> status {report.status.value}: {report.reason}")

        attribution = BlameAttribution()
        if blame_table is not None:
            attribution = self.attributor.attribute(intake.issues, blame_table)
            info.append(f"-> blamed authors of issues in {len(attribution.blamed_files)} files")
            for diagnostic in attribution.diagnostics:
                if diagnostic.code is ErrorCode.AT301:
                    errors.append(str(diagnostic))
                else:
                    info.append(str(diagnostic))

        result = BuildResult(
            build_id=build_id,
            issues=tuple(intake.issues),
            new_issues=classification.new,
            outstanding_issues=classification.outstanding,
            fixed_issues=classification.fixed,
            health_percentage=report.percentage,
            status=report.status,
            blame=attribution.blame,
            predecessor_id=baseline.build_id if baseline else None,
            job_outcome=job_outcome,
            timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
            rejected=tuple(intake.rejected),
            duplicates=intake.duplicates,
            unattributed=attribution.unattributed,
            status_reason=report.reason,
            info_messages=tuple(info),
            error_messages=tuple(errors),
        )
        logger.info("Build %s: %s, status %s", build_id, result.summary, result.status.value)
        return result

    def record(
        self,
        build_id: int,
        raw_issues: Iterable[RawIssue],
        file_context: Optional[FileContextProvider] = None,
        blame_table: Optional[BlameTable] = None,
        job_outcome: Optional[JobOutcome] = None,
        timestamp: Optional[str] = None,
    ) -> BuildResult:
        """Analyze one build and store the result.

        Raises:
            DuplicateBuildError: If ``build_id`` has already been recorded
        """
        if self.store.load(build_id) is not None:
            raise DuplicateBuildError(build_id)
        result = self.analyze(build_id, raw_issues, file_context, blame_table, job_outcome, timestamp)
        self.store.save(result)
        return result


def analyze_build(
    store: BuildStore,
    build_id: int,
    raw_issues: Iterable[RawIssue],
    config: Optional[AnalysisConfig] = None,
    **kwargs,
) -> BuildResult:
    """Analyze a build against ``store`` without recording it.

    ``kwargs`` are passed on to ``BuildAnalyzer.analyze``.
    """
    return BuildAnalyzer(store, config).analyze(build_id, raw_issues, **kwargs)


def record_build(
    store: BuildStore,
    build_id: int,
    raw_issues: Iterable[RawIssue],
    config: Optional[AnalysisConfig] = None,
    **kwargs,
) -> BuildResult:
    """Analyze a build and add it to ``store``."""
    return BuildAnalyzer(store, config).record(build_id, raw_issues, **kwargs)
