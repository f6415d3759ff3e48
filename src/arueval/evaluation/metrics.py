"""Pure metric computation for classifier threshold sweeps.

Provides stateless functions for precision, recall, and F-score at a
single score threshold, the integer threshold sweep over a confusion
table, and selection of the threshold with the best F-score.
"""
from __future__ import annotations

from collections.abc import Sequence

import structlog

from arueval.core.models import ConfusionMatrix, ThresholdMetric

logger = structlog.get_logger(__name__)


def threshold_range(thresholds: tuple[int, int]) -> range:
    """Return the inclusive integer sequence ``[start, end]``.

    Raises:
        ValueError: If start exceeds end.
    """
    start, end = thresholds
    if start > end:
        msg = f"Threshold range start must not exceed end: ({start}, {end})"
        raise ValueError(msg)
    return range(int(start), int(end) + 1)


def compute_threshold_metric(matrix: ConfusionMatrix, threshold: int) -> ThresholdMetric:
    """Compute precision, recall, and F-score at one threshold.

    Only rows with a classifier confidence at or above ``threshold`` count.
    Human-only rows (false negatives) never pass the filter because they have
    no score; recall is taken against the fixed ``human_total`` instead.

    Args:
        matrix: Confusion table with its ``human_total``.
        threshold: Integer score threshold.

    Returns:
        ThresholdMetric; zero denominators yield ``None``.
    """
    tp_sum = 0
    fp_sum = 0
    for row in matrix.rows:
        if row.confidence is None or row.confidence < threshold:
            continue
        tp_sum += row.tp
        fp_sum += row.fp

    precision = tp_sum / (tp_sum + fp_sum) if tp_sum + fp_sum > 0 else None
    recall = tp_sum / matrix.human_total if matrix.human_total > 0 else None

    fscore: float | None = None
    if precision is not None and recall is not None and precision + recall > 0:
        fscore = 2 * precision * recall / (precision + recall)

    return ThresholdMetric(
        threshold=threshold,
        precision=precision,
        recall=recall,
        fscore=fscore,
    )


def sweep_thresholds(
    matrix: ConfusionMatrix,
    thresholds: tuple[int, int] = (10, 99),
) -> list[ThresholdMetric]:
    """Evaluate every integer threshold in the inclusive range.

    Each threshold is computed independently from the same matrix. A single
    warning is logged the first time a threshold has no surviving detections.

    Args:
        matrix: Confusion table.
        thresholds: Inclusive (start, end) of the sweep.

    Returns:
        One ThresholdMetric per threshold, in ascending order.
    """
    metrics: list[ThresholdMetric] = []
    warned = False
    for threshold in threshold_range(thresholds):
        metric = compute_threshold_metric(matrix, threshold)
        if metric.precision is None and not warned:
            logger.warning(
                "undefined_precision",
                threshold=threshold,
                detail=(
                    "No classifier detections for some higher selected "
                    "thresholds; results will contain undefined values"
                ),
            )
            warned = True
        metrics.append(metric)

    logger.info(
        "threshold_sweep_complete",
        start=thresholds[0],
        end=thresholds[1],
        human_total=matrix.human_total,
    )
    return metrics


def select_best_threshold(
    metrics: Sequence[ThresholdMetric],
    decimals: int = 2,
) -> int | None:
    """Return the threshold that maximises the rounded F-score.

    F-scores are rounded to ``decimals`` places first; among thresholds tied
    at the maximum, the largest (strictest) one wins.

    Args:
        metrics: Output of ``sweep_thresholds``.
        decimals: Rounding applied to each F-score.

    Returns:
        Best threshold, or ``None`` if no F-score is defined.
    """
    rounded = [
        (round(m.fscore, decimals), m.threshold)
        for m in metrics
        if m.fscore is not None
    ]
    if not rounded:
        return None
    best_score = max(score for score, _ in rounded)
    return max(threshold for score, threshold in rounded if score == best_score)
