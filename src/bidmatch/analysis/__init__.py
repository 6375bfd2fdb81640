"""Metrics, scoring, day-off conflict and mirror line engines."""

from bidmatch.analysis.batch import BatchFailure, metrics_many, score_many
from bidmatch.analysis.conflicts import find_conflicts, percentage, round_half_up
from bidmatch.analysis.metrics import MetricsEngine, compute_metrics, summarize_shifts
from bidmatch.analysis.mirrors import find_mirrors, inclusion_threshold, shared_shift_code_score
from bidmatch.analysis.scoring import ScheduleScorer

__all__ = [
    "BatchFailure",
    "MetricsEngine",
    "ScheduleScorer",
    "compute_metrics",
    "find_conflicts",
    "find_mirrors",
    "inclusion_threshold",
    "metrics_many",
    "percentage",
    "round_half_up",
    "score_many",
    "shared_shift_code_score",
    "summarize_shifts",
]
