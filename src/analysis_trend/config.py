"""Configuration loading and management for analysis-trend.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.analysis-trend.toml)
    3. Project config (analysis-trend.toml in the project root, default: cwd)
    4. Explicit config file
    5. Environment variables (ANALYSIS_TREND_* prefix)
    6. CLI overrides (passed as kwargs)

Thresholds are plain values handed to the evaluator on every call; nothing
here is process-wide state.

Example:
    >>> config = load_config(max_chain_depth=10)
    >>> config.max_chain_depth
    10
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError
from .models import Severity

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "ANALYSIS_TREND_"
CONFIG_FILENAME = "analysis-trend.toml"


class ThresholdScope(Enum):
    """Which issue set a status threshold is applied to."""

    TOTAL = "TOTAL"
    NEW = "NEW"


class BaselinePolicy(Enum):
    """How the reference build for the new/fixed classification is chosen."""

    PREVIOUS_BUILD = "PREVIOUS_BUILD"  # immediately preceding build, any outcome
    LAST_SUCCESSFUL = "LAST_SUCCESSFUL"  # skip failed and aborted builds


@dataclass(frozen=True)
class StatusThreshold:
    """Issue-count limits for one severity tier.

    Attributes:
        severity: Tier the count is taken from; ``None`` counts all issues.
        scope: Count every issue of the build or only the new ones.
        failure: Count at which the build becomes FAILURE.
        unstable: Count at which the build becomes UNSTABLE.
    """

    severity: Optional[Severity] = None
    scope: ThresholdScope = ThresholdScope.TOTAL
    failure: Optional[int] = None
    unstable: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("failure", "unstable"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise InvalidConfigError(
                    f"status.{self.label}.{name}", value, "threshold must be at least 1"
                )
        if self.failure is None and self.unstable is None:
            raise InvalidConfigError(
                f"status.{self.label}", None, "set at least one of failure or unstable"
            )
        if self.failure is not None and self.unstable is not None and self.unstable > self.failure:
            raise InvalidConfigError(
                f"status.{self.label}.unstable",
                self.unstable,
                f"unstable threshold exceeds failure threshold {self.failure}",
            )

    @property
    def label(self) -> str:
        tier = self.severity.value if self.severity else "ALL"
        return f"{self.scope.value.lower()}_{tier.lower()}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatusThreshold":
        severity = data.get("severity")
        scope = str(data.get("scope", "TOTAL")).upper()
        try:
            return cls(
                severity=None
                if severity in (None, "", "ALL", "all")
                else Severity.parse(severity),
                scope=ThresholdScope(scope),
                failure=data.get("failure"),
                unstable=data.get("unstable"),
            )
        except ValueError:
            raise InvalidConfigError("status.scope", scope, "expected TOTAL or NEW") from None


@dataclass(frozen=True)
class HealthThresholds:
    """Health-score and build-status thresholds.

    Health is reported only when both ``healthy`` and ``unhealthy`` are set:
    a count at or below ``healthy`` is 100%, at or above ``unhealthy`` is 0%,
    linear in between. Status thresholds apply independently of health.

    Attributes:
        healthy: Issue count mapped to 100% health
        unhealthy: Issue count mapped to 0% health
        minimum_severity: Issues below this severity do not count for health
        weights: Optional per-severity multipliers for the health count
        status: Failure/unstable limits, evaluated as a priority cascade
    """

    healthy: Optional[int] = None
    unhealthy: Optional[int] = None
    minimum_severity: Severity = Severity.LOW
    weights: Optional[dict[Severity, float]] = None
    status: tuple[StatusThreshold, ...] = ()

    def __post_init__(self) -> None:
        if (self.healthy is None) != (self.unhealthy is None):
            raise InvalidConfigError(
                "healthy" if self.healthy is None else "unhealthy",
                None,
                "healthy and unhealthy must be configured together",
            )
        if self.healthy is not None and self.unhealthy is not None:
            if self.healthy < 0:
                raise InvalidConfigError("healthy", self.healthy, "must be non-negative")
            if self.unhealthy < 0:
                raise InvalidConfigError("unhealthy", self.unhealthy, "must be non-negative")
            if self.healthy > self.unhealthy:
                raise InvalidConfigError(
                    "healthy",
                    self.healthy,
                    f"must not exceed unhealthy threshold {self.unhealthy}",
                )
        if self.weights is not None:
            for severity, weight in self.weights.items():
                if weight < 0:
                    raise InvalidConfigError(
                        f"weights.{severity.value.lower()}", weight, "must be non-negative"
                    )
        # TOML yields lists
        object.__setattr__(self, "status", tuple(self.status))

    @property
    def health_enabled(self) -> bool:
        return self.healthy is not None and self.unhealthy is not None

    def weight_of(self, severity: Severity) -> float:
        if self.weights is None:
            return 1.0
        return self.weights.get(severity, 1.0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HealthThresholds":
        """Build thresholds from a ``[thresholds]`` TOML table."""
        known = {"healthy", "unhealthy", "minimum_severity", "weights", "status"}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigError(
                "thresholds", ", ".join(sorted(unknown)), "unknown threshold keys"
            )
        weights = data.get("weights")
        try:
            return cls(
                healthy=data.get("healthy"),
                unhealthy=data.get("unhealthy"),
                minimum_severity=Severity.parse(data.get("minimum_severity", "LOW")),
                weights=None
                if weights is None
                else {Severity.parse(k): float(v) for k, v in weights.items()},
                status=tuple(StatusThreshold.from_dict(s) for s in data.get("status", ())),
            )
        except InvalidConfigError:
            raise
        except Exception as e:
            raise InvalidConfigError("thresholds", dict(data), str(e)) from None


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for build analysis.

    Attributes:
        baseline_policy: How the reference build is chosen
        max_chain_depth: Upper bound on predecessor steps when searching a baseline
        trend_length: Number of builds in a trend series
        context_lines: Source lines on each side of an issue used for fingerprints
        history_dir: Directory (relative to the project root) holding history.db
        verbosity: Logging verbosity level
        thresholds: Health and status thresholds
    """

    baseline_policy: BaselinePolicy = BaselinePolicy.PREVIOUS_BUILD
    max_chain_depth: int = 50
    trend_length: int = 20
    context_lines: int = 2
    history_dir: str = ".analysis-trend"
    verbosity: Verbosity = "normal"
    thresholds: HealthThresholds = field(default_factory=HealthThresholds)

    def __post_init__(self) -> None:
        if isinstance(self.baseline_policy, str):
            try:
                object.__setattr__(
                    self, "baseline_policy", BaselinePolicy(self.baseline_policy.upper())
                )
            except ValueError:
                raise InvalidConfigError(
                    "baseline_policy",
                    self.baseline_policy,
                    "expected PREVIOUS_BUILD or LAST_SUCCESSFUL",
                ) from None
        if self.max_chain_depth < 1:
            raise InvalidConfigError("max_chain_depth", self.max_chain_depth, "must be at least 1")
        if self.trend_length < 1:
            raise InvalidConfigError("trend_length", self.trend_length, "must be at least 1")
        if self.context_lines < 0:
            raise InvalidConfigError("context_lines", self.context_lines, "must be non-negative")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )


def load_config(
    config_file: Optional[Path] = None, project_root: Optional[Path] = None, **overrides
) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        project_root: Directory searched for the project config (default: cwd)
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigFileError: If a config file is missing or cannot be parsed
        InvalidConfigError: If a value is out of range or a key is unknown
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path(project_root or Path.cwd()) / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, Mapping):
        merged["thresholds"] = HealthThresholds.from_dict(thresholds)
    elif isinstance(thresholds, HealthThresholds):
        merged["thresholds"] = thresholds

    unknown = set(merged) - set(AnalysisConfig.__dataclass_fields__)
    if unknown:
        raise InvalidConfigError("config", ", ".join(sorted(unknown)), "unknown configuration keys")

    return AnalysisConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ANALYSIS_TREND_* environment variables.

    Supported environment variables:
        ANALYSIS_TREND_BASELINE_POLICY: PREVIOUS_BUILD/LAST_SUCCESSFUL
        ANALYSIS_TREND_MAX_CHAIN_DEPTH: int
        ANALYSIS_TREND_TREND_LENGTH: int
        ANALYSIS_TREND_CONTEXT_LINES: int
        ANALYSIS_TREND_HISTORY_DIR: str
        ANALYSIS_TREND_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any ANALYSIS_TREND_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is int:
            try:
                result[field_name] = int(env_value)
            except ValueError:
                raise InvalidConfigError(env_key, env_value, "expected an integer") from None
        elif type_hint is BaselinePolicy or type_hint is str:
            result[field_name] = env_value
        elif getattr(type_hint, "__origin__", None) is Literal:
            result[field_name] = env_value.lower()
        # thresholds are too structured for env vars

    return result


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigFileError: If tomllib/tomli is unavailable or parsing fails
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigFileError(
                path,
                "TOML support requires Python 3.11+ or the 'tomli' package",
            ) from None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e)) from e
