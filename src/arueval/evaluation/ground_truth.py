"""Ground-truth normalisation of the main (human tag) report.

Drops non-target categories, validates that the transcription method can
support the requested resolution, and projects human tags onto the same
keys the classifier side is aggregated to.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from arueval.config import DEFAULT_EXCLUDED_CATEGORIES
from arueval.core.enums import Resolution, TaskMethod
from arueval.core.exceptions import InputShapeError, MethodIncompatibleError
from arueval.core.models import AggregationKey, GroundTruthEvent, TaskInfo
from arueval.evaluation.aggregation import project_key

logger = structlog.get_logger(__name__)


def check_task_methods(main: Sequence[GroundTruthEvent], resolution: Resolution) -> None:
    """Verify every transcription method in the main report supports ``resolution``.

    Args:
        main: Human tags.
        resolution: Requested evaluation resolution.

    Raises:
        MethodIncompatibleError: If any task was not transcribed, or if
            minute resolution is requested for a one-tag-per-task method.
    """
    methods = {event.task_method for event in main}
    if TaskMethod.NONE in methods:
        msg = (
            "Evaluation only works on recordings processed with the "
            f"'{TaskMethod.ONE_SPT}' or '{TaskMethod.ONE_SPM}' methods"
        )
        raise MethodIncompatibleError(msg, method=str(TaskMethod.NONE), resolution=str(resolution))
    if resolution == Resolution.MINUTE and TaskMethod.ONE_SPT in methods:
        msg = (
            "Minute resolution is only available for recordings processed "
            f"with the '{TaskMethod.ONE_SPM}' method"
        )
        raise MethodIncompatibleError(msg, method=str(TaskMethod.ONE_SPT), resolution=str(resolution))


def filter_categories(
    main: Iterable[GroundTruthEvent],
    excluded_categories: Iterable[str] = DEFAULT_EXCLUDED_CATEGORIES,
) -> list[GroundTruthEvent]:
    """Drop tags whose category is not a target (case-insensitive)."""
    excluded = {c.strip().lower() for c in excluded_categories}
    return [
        e for e in main
        if e.category is None or e.category.strip().lower() not in excluded
    ]


def build_task_table(main: Iterable[GroundTruthEvent]) -> dict[int, list[TaskInfo]]:
    """Collect the distinct tasks of each recording in first-seen order.

    Args:
        main: Human tags (one row per tag, so tasks repeat).

    Returns:
        Mapping of recording_id to its distinct tasks.
    """
    table: dict[int, list[TaskInfo]] = {}
    seen: set[TaskInfo] = set()
    for event in main:
        task = TaskInfo(
            recording_id=event.recording_id,
            task_id=event.task_id,
            task_duration=event.task_duration,
            task_method=event.task_method,
        )
        if task in seen:
            continue
        seen.add(task)
        table.setdefault(event.recording_id, []).append(task)
    return table


def normalize_ground_truth(
    main: Sequence[GroundTruthEvent],
    resolution: Resolution,
    excluded_categories: Iterable[str] = DEFAULT_EXCLUDED_CATEGORIES,
    check_method: bool = True,
) -> set[AggregationKey]:
    """Project target human tags onto distinct keys at ``resolution``.

    Every returned key is human-present (human=1).

    Args:
        main: Human tags.
        resolution: Matching resolution.
        excluded_categories: Categories to drop before projection.
        check_method: Validate transcription methods first.

    Returns:
        Set of distinct keys with at least one human tag.

    Raises:
        MethodIncompatibleError: If ``check_method`` and a method is incompatible.
        InputShapeError: If minute resolution is requested and a tag has no start offset.
    """
    if check_method:
        check_task_methods(main, resolution)

    kept = filter_categories(main, excluded_categories)
    keys: set[AggregationKey] = set()
    for event in kept:
        if resolution == Resolution.MINUTE and event.start_s is None:
            msg = (
                f"Tag for {event.species_code} in recording {event.recording_id} "
                "has no start_s; minute resolution needs tag start offsets"
            )
            raise InputShapeError(msg, missing=["start_s"])
        keys.add(
            project_key(
                resolution,
                project_id=event.project_id,
                location_id=event.location_id,
                recording_id=event.recording_id,
                species_code=event.species_code,
                task_id=event.task_id,
                start_s=event.start_s,
            )
        )

    logger.debug(
        "ground_truth_normalized",
        resolution=str(resolution),
        n_tags=len(main),
        n_dropped=len(main) - len(kept),
        n_keys=len(keys),
    )
    return keys
