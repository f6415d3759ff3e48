"""Confusion table construction by full outer join on ``AggregationKey``."""
from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping

import structlog

from arueval.core.models import (
    AggregatedDetection,
    AggregationKey,
    ConfusionMatrix,
    ConfusionRow,
)

logger = structlog.get_logger(__name__)


def build_confusion_matrix(
    detections: Mapping[AggregationKey, AggregatedDetection],
    human_keys: Collection[AggregationKey],
    species: Iterable[str] | None = None,
) -> ConfusionMatrix:
    """Outer-join aggregated detections with human keys and label outcomes.

    A key present on both sides is a true positive, classifier-only is a
    false positive, and human-only is a false negative. True negatives are
    not represented.

    Args:
        detections: Aggregated classifier output keyed by identity.
        human_keys: Keys with at least one human tag.
        species: Optional species allow-list (or a single code) applied to both sides first.

    Returns:
        ConfusionMatrix with rows in key order and the fixed ``human_total``.
    """
    allowed: set[str] | None = None
    if species is not None:
        allowed = {species} if isinstance(species, str) else set(species)

    def _keep(key: AggregationKey) -> bool:
        return allowed is None or key.species_code in allowed

    human = {k for k in human_keys if _keep(k)}
    classified = {k: d for k, d in detections.items() if _keep(k)}

    rows: list[ConfusionRow] = []
    for key in sorted(human | set(classified), key=AggregationKey.sort_key):
        is_human = key in human
        detection = classified.get(key)
        is_classifier = detection is not None
        rows.append(
            ConfusionRow(
                key=key,
                human=1 if is_human else 0,
                classifier=1 if is_classifier else 0,
                confidence=detection.confidence if detection is not None else None,
                tp=1 if is_classifier and is_human else 0,
                fp=1 if is_classifier and not is_human else 0,
                fn=1 if is_human and not is_classifier else 0,
            )
        )

    matrix = ConfusionMatrix(rows=rows, human_total=sum(r.human for r in rows))
    logger.info(
        "confusion_matrix_built",
        n_rows=len(rows),
        human_total=matrix.human_total,
        n_tp=matrix.n_tp,
        n_fp=matrix.n_fp,
        n_fn=matrix.n_fn,
    )
    return matrix
