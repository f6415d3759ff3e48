"""Resolution aggregation of classifier detections.

Reduces raw detections to one row per ``AggregationKey`` at a chosen
resolution, keeping the maximum confidence per key. Grouping is a plain
dict keyed on the frozen key dataclass.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping, Sequence

import structlog

from arueval.core.enums import Resolution
from arueval.core.models import (
    AggregatedDetection,
    AggregationKey,
    DetectionEvent,
    TaskInfo,
)

logger = structlog.get_logger(__name__)

TaskTable = Mapping[int, Sequence[TaskInfo]]


def minute_index(start_s: float) -> int:
    """Return the 1-based minute a detection or tag starts in.

    A start of exactly 0 belongs to minute 1; otherwise the minute is
    ``ceil(start_s / 60)``.
    """
    if start_s == 0:
        return 1
    return math.ceil(start_s / 60)


def project_key(
    resolution: Resolution,
    *,
    project_id: int,
    location_id: int,
    recording_id: int,
    species_code: str,
    task_id: int | None = None,
    start_s: float | None = None,
) -> AggregationKey:
    """Project identity fields onto the key used at ``resolution``.

    Args:
        resolution: Matching resolution.
        project_id: Project identifier.
        location_id: Location identifier.
        recording_id: Recording identifier.
        species_code: Species code.
        task_id: Task identifier (required for TASK).
        start_s: Start offset in seconds (required for MINUTE).

    Returns:
        AggregationKey with the fields unused by ``resolution`` set to ``None``.

    Raises:
        ValueError: If a field the resolution needs is missing.
    """
    if resolution == Resolution.TASK:
        if task_id is None:
            msg = "Task resolution requires a task_id"
            raise ValueError(msg)
        return AggregationKey(project_id, location_id, recording_id, task_id, None, species_code)
    if resolution == Resolution.MINUTE:
        if start_s is None:
            msg = "Minute resolution requires a start offset"
            raise ValueError(msg)
        return AggregationKey(
            project_id, location_id, recording_id, None, minute_index(start_s), species_code
        )
    if resolution == Resolution.RECORDING:
        return AggregationKey(project_id, location_id, recording_id, None, None, species_code)
    if resolution == Resolution.LOCATION:
        return AggregationKey(project_id, location_id, None, None, None, species_code)
    return AggregationKey(project_id, None, None, None, None, species_code)


def join_tasks(
    events: Iterable[DetectionEvent],
    tasks: TaskTable,
) -> Iterator[tuple[DetectionEvent, TaskInfo]]:
    """Pair each detection with every task of its recording.

    A detection that already names its task is only paired with that task.
    Pairs whose start offset exceeds the task duration are dropped, so a
    detection outside a shorter task window never counts for that task.

    Args:
        events: Classifier detections.
        tasks: Distinct tasks keyed by recording_id.

    Yields:
        (detection, task) pairs that survive the duration filter.
    """
    for event in events:
        for task in tasks.get(event.recording_id, ()):
            if event.task_id is not None and event.task_id != task.task_id:
                continue
            if event.start_s > task.task_duration:
                continue
            yield event, task


def keyed_detections(
    events: Iterable[DetectionEvent],
    resolution: Resolution,
    tasks: TaskTable | None = None,
) -> Iterator[tuple[AggregationKey, DetectionEvent, TaskInfo | None]]:
    """Attach the resolution key to every detection.

    Args:
        events: Classifier detections.
        resolution: Matching resolution.
        tasks: Task table, required for TASK resolution.

    Yields:
        (key, detection, task) triples; ``task`` is ``None`` above task level.

    Raises:
        ValueError: If TASK resolution is requested without a task table.
    """
    if resolution == Resolution.TASK:
        if tasks is None:
            msg = "Task resolution requires the task table from the main report"
            raise ValueError(msg)
        for event, task in join_tasks(events, tasks):
            key = project_key(
                resolution,
                project_id=event.project_id,
                location_id=event.location_id,
                recording_id=event.recording_id,
                species_code=event.species_code,
                task_id=task.task_id,
            )
            yield key, event, task
        return

    for event in events:
        key = project_key(
            resolution,
            project_id=event.project_id,
            location_id=event.location_id,
            recording_id=event.recording_id,
            species_code=event.species_code,
            start_s=event.start_s,
        )
        yield key, event, None


def aggregate_detections(
    events: Iterable[DetectionEvent],
    resolution: Resolution,
    tasks: TaskTable | None = None,
) -> dict[AggregationKey, AggregatedDetection]:
    """Reduce detections to the maximum confidence per key.

    Args:
        events: Classifier detections.
        resolution: Matching resolution.
        tasks: Task table, required for TASK resolution.

    Returns:
        Mapping of key to its aggregated detection (classifier=1).
    """
    best: dict[AggregationKey, float] = {}
    n_events = 0
    for key, event, _ in keyed_detections(events, resolution, tasks):
        n_events += 1
        current = best.get(key)
        if current is None or event.confidence > current:
            best[key] = event.confidence

    logger.debug(
        "detections_aggregated",
        resolution=str(resolution),
        n_events=n_events,
        n_keys=len(best),
    )
    return {key: AggregatedDetection(key=key, confidence=conf) for key, conf in best.items()}


def filter_allowed(
    events: Iterable[DetectionEvent],
    remove_disallowed_species: bool,
) -> list[DetectionEvent]:
    """Optionally drop detections of species not enabled in the project."""
    if not remove_disallowed_species:
        return list(events)
    return [e for e in events if e.is_species_allowed_in_project]
