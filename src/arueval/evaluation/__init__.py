"""Evaluation module — aggregation, matching, metrics, and novel detections."""
from __future__ import annotations

from arueval.evaluation.aggregation import (
    aggregate_detections,
    filter_allowed,
    minute_index,
    project_key,
)
from arueval.evaluation.confusion import build_confusion_matrix
from arueval.evaluation.ground_truth import (
    build_task_table,
    check_task_methods,
    normalize_ground_truth,
)
from arueval.evaluation.metrics import (
    compute_threshold_metric,
    select_best_threshold,
    sweep_thresholds,
)
from arueval.evaluation.novel import (
    RandomTieBreaker,
    TieBreaker,
    find_novel_detections,
    first_tie_breaker,
)
from arueval.evaluation.runner import EvaluationRunner
from arueval.evaluation.tags import check_sink, export_tags, format_tags

__all__ = [
    "EvaluationRunner",
    "RandomTieBreaker",
    "TieBreaker",
    "aggregate_detections",
    "build_confusion_matrix",
    "build_task_table",
    "check_sink",
    "check_task_methods",
    "compute_threshold_metric",
    "export_tags",
    "filter_allowed",
    "find_novel_detections",
    "first_tie_breaker",
    "format_tags",
    "minute_index",
    "normalize_ground_truth",
    "project_key",
    "select_best_threshold",
    "sweep_thresholds",
]
