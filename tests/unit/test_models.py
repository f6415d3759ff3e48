"""Tests for core Pydantic data models."""
from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from arueval.core.enums import Outcome, TaskMethod
from arueval.core.models import (
    AggregationKey,
    ConfusionMatrix,
    ConfusionRow,
    DetectionEvent,
    NovelRecord,
    TagRecord,
)

KEY = AggregationKey(1, 2, 3, None, None, "OVEN")


def test_detection_minimal() -> None:
    """Detection defaults: start at zero, species allowed."""
    e = DetectionEvent(
        project_id=1, location_id=2, recording_id=3, species_code="OVEN", confidence=70
    )
    assert e.start_s == 0.0
    assert e.is_species_allowed_in_project is True
    assert e.task_id is None


def test_detection_is_frozen(make_detection: Any) -> None:
    e = make_detection("OVEN", 70)
    with pytest.raises(ValidationError):
        e.confidence = 10


def test_detection_rejects_negative_start() -> None:
    with pytest.raises(ValidationError):
        DetectionEvent(
            project_id=1, location_id=2, recording_id=3, species_code="OVEN",
            confidence=70, start_s=-1,
        )


def test_ground_truth_requires_task_method(make_tag: Any) -> None:
    with pytest.raises(ValidationError):
        make_tag("OVEN", task_method="2SPT")


def test_novel_record_extends_detection(make_detection: Any) -> None:
    record = NovelRecord(**make_detection("OVEN", 70).model_dump(), task_duration=180)
    assert isinstance(record, DetectionEvent)
    assert record.task_duration == 180


def test_sort_key_places_none_first() -> None:
    keys = [
        AggregationKey(1, 2, 3, None, None, "OVEN"),
        AggregationKey(1, None, None, None, None, "WTSP"),
        AggregationKey(1, 2, None, None, None, "BOCH"),
    ]
    ordered = sorted(keys, key=AggregationKey.sort_key)
    assert [k.species_code for k in ordered] == ["WTSP", "BOCH", "OVEN"]


class TestConfusionRow:
    """ConfusionRow validation."""

    def test_outcome_property(self) -> None:
        assert ConfusionRow(key=KEY, human=1, classifier=1, confidence=80, tp=1).outcome == Outcome.TP
        assert ConfusionRow(key=KEY, human=0, classifier=1, confidence=80, fp=1).outcome == Outcome.FP
        assert ConfusionRow(key=KEY, human=1, classifier=0, fn=1).outcome == Outcome.FN

    def test_at_most_one_outcome(self) -> None:
        with pytest.raises(ValidationError):
            ConfusionRow(key=KEY, human=1, classifier=1, confidence=80, tp=1, fp=1)

    def test_confidence_only_for_classifier_rows(self) -> None:
        with pytest.raises(ValidationError):
            ConfusionRow(key=KEY, human=1, classifier=0, confidence=50, fn=1)

    def test_flags_are_binary(self) -> None:
        with pytest.raises(ValidationError):
            ConfusionRow(key=KEY, human=2, classifier=1, confidence=80)  # type: ignore[arg-type]

    def test_count_properties_documented(self) -> None:
        for name in ("n_tp", "n_fp", "n_fn"):
            assert getattr(ConfusionMatrix, name).__doc__

    def test_matrix_counts(self) -> None:
        matrix = ConfusionMatrix(
            rows=[
                ConfusionRow(key=KEY, human=1, classifier=1, confidence=80, tp=1),
                ConfusionRow(key=KEY, human=1, classifier=0, fn=1),
            ],
            human_total=2,
        )
        assert (matrix.n_tp, matrix.n_fp, matrix.n_fn) == (1, 0, 1)


class TestTagRecord:
    """TagRecord aliases and row output."""

    def test_populate_by_alias(self) -> None:
        tag = TagRecord.model_validate({
            "location": "BU-20",
            "recordingDate": "2023-06-03 05:10:00",
            "method": "1SPT",
            "taskLength": 180,
            "species": "OVEN",
            "startTime": 12,
            "speciesIndividualComment": 88,
        })
        assert tag.recording_date == "2023-06-03 05:10:00"
        assert tag.method == TaskMethod.ONE_SPT
        assert tag.species_individual_number == 1

    def test_row_values(self) -> None:
        tag = TagRecord(
            method=TaskMethod.ONE_SPM, task_length=60, species="OVEN",
            start_time=12, species_individual_comment=88,
        )
        row = tag.to_row()
        assert row["taskLength"] == 60.0
        assert row["speciesIndividualComment"] == 88.0
        assert row["transcriber"] == "birdnet"
        assert row["internal_tag_id"] == ""
