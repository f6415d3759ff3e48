"""Reshape novel detections into upload-ready tag rows and export them."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import structlog

from arueval.config import TagSettings
from arueval.core.enums import Resolution
from arueval.core.exceptions import MissingSinkError
from arueval.core.models import GroundTruthEvent, NovelRecord, TagRecord, TaskInfo
from arueval.evaluation.ground_truth import build_task_table
from arueval.io.writers import write_tags

logger = structlog.get_logger(__name__)


def _find_task(
    record: NovelRecord,
    tasks: Mapping[int, Sequence[TaskInfo]],
) -> TaskInfo | None:
    recording_tasks = tasks.get(record.recording_id, [])
    if record.task_id is not None:
        for task in recording_tasks:
            if task.task_id == record.task_id:
                return task
        return None
    # Resolved above task level: fall back to the recording's first task.
    return recording_tasks[0] if recording_tasks else None


def format_tags(
    records: Sequence[NovelRecord],
    tasks: Mapping[int, Sequence[TaskInfo]],
    settings: TagSettings | None = None,
) -> list[TagRecord]:
    """Convert novel records into tag upload rows.

    Rows are sorted by species then start time, numbered within each
    (location, recording date, species) group, and dropped when the
    detection starts after the end of its task.

    Args:
        records: Novel detections.
        tasks: Distinct tasks keyed by recording_id.
        settings: Tag defaults (transcriber, vocalization, abundance).

    Returns:
        TagRecord list in upload order.
    """
    settings = settings or TagSettings()

    tags: list[TagRecord] = []
    n_no_task = 0
    for record in records:
        task = _find_task(record, tasks)
        if task is None:
            n_no_task += 1
            continue
        tags.append(
            TagRecord(
                location=record.location or "",
                recording_date=record.recording_date_time or "",
                method=task.task_method,
                task_length=task.task_duration,
                transcriber=settings.transcriber,
                species=record.species_code,
                vocalization=settings.vocalization,
                abundance=settings.abundance,
                start_time=record.start_s,
                species_individual_comment=record.confidence,
            )
        )

    tags.sort(key=lambda t: (t.species, t.start_time))
    counters: dict[tuple[str, str, str], int] = {}
    numbered: list[TagRecord] = []
    for tag in tags:
        group = (tag.location, tag.recording_date, tag.species)
        counters[group] = counters.get(group, 0) + 1
        numbered.append(
            tag.model_copy(update={"species_individual_number": counters[group]})
        )

    result = [t for t in numbered if not t.start_time > t.task_length]
    logger.info(
        "tags_formatted",
        n_records=len(records),
        n_tags=len(result),
        n_without_task=n_no_task,
        n_outside_task=len(numbered) - len(result),
    )
    return result


def check_sink(output_dir: Path | None) -> Path:
    """Return ``output_dir`` as a Path if it is an existing directory.

    Raises:
        MissingSinkError: If ``output_dir`` is not given or does not exist.
    """
    if output_dir is None:
        msg = "Tag export requested but no output directory was given"
        raise MissingSinkError(msg)
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        msg = f"Tag export directory does not exist: {output_dir}"
        raise MissingSinkError(msg, path=output_dir)
    return output_dir


def export_tags(
    records: Sequence[NovelRecord],
    main: Sequence[GroundTruthEvent],
    output_dir: Path | None,
    resolution: Resolution,
    settings: TagSettings | None = None,
) -> Path:
    """Format novel records as tags and write them to ``output_dir``.

    Args:
        records: Novel detections.
        main: Human tags, used for task methods and lengths.
        output_dir: Existing directory receiving the tag CSV.
        resolution: Resolution the records were found at.
        settings: Tag defaults and output filename.

    Returns:
        Path to the written CSV.

    Raises:
        MissingSinkError: If ``output_dir`` is not given or does not exist.
    """
    settings = settings or TagSettings()
    output_dir = check_sink(output_dir)

    if resolution != Resolution.TASK:
        logger.warning(
            "tag_export_resolution",
            resolution=str(resolution),
            detail=(
                "Tag uploads are best supported at task resolution; "
                "task lengths fall back to the first task of each recording"
            ),
        )

    tags = format_tags(records, build_task_table(main), settings)
    return write_tags(tags, output_dir / settings.tags_filename)
