"""Evaluation orchestrator — threshold sweeps and novel detection discovery.

Wires the aggregation, ground-truth, confusion, metric, and novel detection
steps together behind the three public operations.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

from arueval.config import AruEvalConfig
from arueval.core.enums import EVALUATION_RESOLUTIONS, Resolution
from arueval.core.exceptions import InputShapeError
from arueval.core.models import NovelRecord, ReportBundle, ThresholdMetric
from arueval.evaluation.aggregation import aggregate_detections, filter_allowed
from arueval.evaluation.confusion import build_confusion_matrix
from arueval.evaluation.ground_truth import build_task_table, normalize_ground_truth
from arueval.evaluation.metrics import select_best_threshold, sweep_thresholds
from arueval.evaluation.novel import (
    RandomTieBreaker,
    TieBreaker,
    find_novel_detections,
    first_tie_breaker,
)
from arueval.evaluation.tags import check_sink, export_tags

logger = structlog.get_logger(__name__)


def _require_bundle(data: object) -> ReportBundle:
    if not isinstance(data, ReportBundle):
        msg = (
            "Input must be a ReportBundle holding the classifier and main "
            f"reports, got {type(data).__name__}"
        )
        raise InputShapeError(msg)
    return data


class EvaluationRunner:
    """Orchestrate classifier evaluation and novel detection workflows.

    Args:
        config: Defaults for category filters, rounding, and tag export.
        tie_breaker: Chooses among raw detections tied at a key's maximum.
            Defaults to first-by-order, or seeded random selection when
            ``config.novel.seed`` is set.
    """

    def __init__(
        self,
        config: AruEvalConfig | None = None,
        tie_breaker: TieBreaker | None = None,
    ) -> None:
        self.config = config or AruEvalConfig()
        if tie_breaker is None:
            seed = self.config.novel.seed
            tie_breaker = first_tie_breaker if seed is None else RandomTieBreaker(seed)
        self.tie_breaker = tie_breaker

    def evaluate(
        self,
        data: ReportBundle,
        resolution: Resolution | str = Resolution.RECORDING,
        remove_disallowed_species: bool = True,
        species: Iterable[str] | None = None,
        thresholds: tuple[int, int] = (10, 99),
    ) -> list[ThresholdMetric]:
        """Compute precision, recall, and F-score over a threshold range.

        Args:
            data: Classifier and main reports.
            resolution: task, minute, or recording.
            remove_disallowed_species: Drop species not enabled in the project.
            species: Optional species subset; a bare code selects one species.
            thresholds: Inclusive (start, end) of the integer sweep.

        Returns:
            One ThresholdMetric per threshold.

        Raises:
            InputShapeError: If ``data`` is not a ReportBundle.
            MethodIncompatibleError: If the transcription method cannot
                support ``resolution``.
            ValueError: If the resolution is not an evaluation resolution.
        """
        bundle = _require_bundle(data)
        resolution = Resolution(resolution)
        if resolution not in EVALUATION_RESOLUTIONS:
            msg = (
                f"Resolution '{resolution}' is not supported for evaluation; "
                f"use one of {sorted(str(r) for r in EVALUATION_RESOLUTIONS)}"
            )
            raise ValueError(msg)

        human_keys = normalize_ground_truth(
            bundle.main,
            resolution,
            excluded_categories=self.config.ground_truth.excluded_categories,
        )
        events = filter_allowed(bundle.classifier, remove_disallowed_species)
        tasks = build_task_table(bundle.main) if resolution == Resolution.TASK else None
        detections = aggregate_detections(events, resolution, tasks)

        species_list: list[str] | None = None
        if species is not None:
            species_list = [species] if isinstance(species, str) else list(species)
        matrix = build_confusion_matrix(detections, human_keys, species=species_list)
        metrics = sweep_thresholds(matrix, thresholds)

        logger.info(
            "evaluation_complete",
            resolution=str(resolution),
            n_detections=len(events),
            n_species=len(species_list) if species_list is not None else None,
            best_threshold=self.select_best_threshold(metrics),
        )
        return metrics

    def select_best_threshold(self, metrics: Sequence[ThresholdMetric]) -> int | None:
        """Return the threshold with the best rounded F-score (largest on ties)."""
        return select_best_threshold(metrics, decimals=self.config.evaluation.fscore_decimals)

    def find_novel_detections(
        self,
        data: ReportBundle,
        remove_disallowed_species: bool = True,
        threshold: float = 50,
        resolution: Resolution | str = Resolution.TASK,
        export_to_tags: bool = False,
        output_dir: Path | None = None,
    ) -> list[NovelRecord]:
        """Find classifier detections with no human tag at ``resolution``.

        Args:
            data: Classifier and main reports.
            remove_disallowed_species: Drop species not enabled in the project.
            threshold: Minimum classifier score considered.
            resolution: task, recording, location, or project.
            export_to_tags: Also write the records as tag upload rows.
            output_dir: Directory receiving the tag CSV.

        Returns:
            One NovelRecord per unmatched key.

        Raises:
            InputShapeError: If ``data`` is not a ReportBundle.
            NoNovelDetectionsError: If nothing is unmatched.
            MissingSinkError: If export is requested without an existing directory.
        """
        bundle = _require_bundle(data)
        resolution = Resolution(resolution)
        if export_to_tags:
            check_sink(output_dir)
        records = find_novel_detections(
            bundle.classifier,
            bundle.main,
            threshold=threshold,
            resolution=resolution,
            remove_disallowed_species=remove_disallowed_species,
            excluded_categories=self.config.ground_truth.excluded_categories,
            tie_breaker=self.tie_breaker,
        )

        if export_to_tags:
            path = export_tags(
                records,
                bundle.main,
                output_dir,
                resolution,
                settings=self.config.tags,
            )
            logger.info("tags_exported", path=str(path), n_records=len(records))

        return records
