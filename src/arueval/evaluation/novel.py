"""Novel detection discovery.

Finds classifier detections whose key has no human tag at the requested
resolution (an anti-join), then recovers one full raw detection per key.
Aggregation keeps only the maximum confidence, so several raw detections
can tie for a key; a pluggable tie-breaker picks the representative.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

import numpy as np
import structlog

from arueval.config import DEFAULT_EXCLUDED_CATEGORIES
from arueval.core.enums import NOVEL_RESOLUTIONS, Resolution
from arueval.core.exceptions import NoNovelDetectionsError
from arueval.core.models import (
    AggregationKey,
    DetectionEvent,
    GroundTruthEvent,
    NovelRecord,
    TaskInfo,
)
from arueval.evaluation.aggregation import filter_allowed, keyed_detections
from arueval.evaluation.ground_truth import build_task_table, normalize_ground_truth

logger = structlog.get_logger(__name__)


class TieBreaker(Protocol):
    """Pick one record among raw detections tied at a key's maximum score."""

    def __call__(self, candidates: Sequence[NovelRecord]) -> NovelRecord: ...


def first_tie_breaker(candidates: Sequence[NovelRecord]) -> NovelRecord:
    """Keep the first tied detection in classifier report order."""
    return candidates[0]


class RandomTieBreaker:
    """Pick a tied detection uniformly at random.

    Args:
        seed: Seed for the numpy Generator; ``None`` draws fresh entropy.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def __call__(self, candidates: Sequence[NovelRecord]) -> NovelRecord:
        return candidates[int(self._rng.integers(0, len(candidates)))]


def _to_record(event: DetectionEvent, task: TaskInfo | None) -> NovelRecord:
    data = event.model_dump()
    if task is not None:
        data["task_id"] = task.task_id
        data["task_duration"] = task.task_duration
    return NovelRecord(**data)


def find_novel_detections(
    classifier: Sequence[DetectionEvent],
    main: Sequence[GroundTruthEvent],
    threshold: float,
    resolution: Resolution = Resolution.TASK,
    remove_disallowed_species: bool = True,
    excluded_categories: Iterable[str] = DEFAULT_EXCLUDED_CATEGORIES,
    tie_breaker: TieBreaker = first_tie_breaker,
) -> list[NovelRecord]:
    """Return the best classifier detection for each key no human tagged.

    Args:
        classifier: Classifier detections.
        main: Human tags.
        threshold: Minimum classifier score considered.
        resolution: One of task, recording, location, project.
        remove_disallowed_species: Drop species not enabled in the project.
        excluded_categories: Human tag categories ignored as ground truth.
        tie_breaker: Chooses one record when raw detections tie at the maximum.

    Returns:
        One NovelRecord per unmatched key, ordered by key.

    Raises:
        ValueError: If the resolution is not supported for discovery.
        NoNovelDetectionsError: If every key has a human match.
    """
    resolution = Resolution(resolution)
    if resolution not in NOVEL_RESOLUTIONS:
        msg = (
            f"Resolution '{resolution}' is not supported for novel detections; "
            f"use one of {sorted(str(r) for r in NOVEL_RESOLUTIONS)}"
        )
        raise ValueError(msg)

    events = [
        e for e in filter_allowed(classifier, remove_disallowed_species)
        if e.confidence >= threshold
    ]
    tasks = build_task_table(main) if resolution == Resolution.TASK else None
    keyed = list(keyed_detections(events, resolution, tasks))

    best: dict[AggregationKey, float] = {}
    for key, event, _ in keyed:
        if key not in best or event.confidence > best[key]:
            best[key] = event.confidence

    human = normalize_ground_truth(
        main, resolution, excluded_categories=excluded_categories, check_method=False
    )
    novel_keys = sorted((k for k in best if k not in human), key=AggregationKey.sort_key)
    if not novel_keys:
        msg = "There were no additional species detected."
        raise NoNovelDetectionsError(msg)

    # Re-join the anti-join result to raw detections on key + confidence.
    candidates: dict[AggregationKey, list[NovelRecord]] = {k: [] for k in novel_keys}
    for key, event, task in keyed:
        bucket = candidates.get(key)
        if bucket is not None and event.confidence == best[key]:
            bucket.append(_to_record(event, task))

    records = [tie_breaker(candidates[k]) for k in novel_keys]
    logger.info(
        "novel_detections_found",
        resolution=str(resolution),
        threshold=threshold,
        n_candidates=len(best),
        n_novel=len(records),
        n_ties=sum(1 for k in novel_keys if len(candidates[k]) > 1),
    )
    return records
