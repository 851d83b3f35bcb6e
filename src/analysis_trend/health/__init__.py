"""Health score and build status evaluation."""

from .evaluator import HealthEvaluator, HealthReport, compute_health

__all__ = ["HealthEvaluator", "HealthReport", "compute_health"]
