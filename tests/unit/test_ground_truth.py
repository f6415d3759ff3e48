"""Tests for main report normalisation."""
from __future__ import annotations

from typing import Any

import pytest

from arueval.core.enums import Resolution, TaskMethod
from arueval.core.exceptions import InputShapeError, MethodIncompatibleError
from arueval.core.models import AggregationKey
from arueval.evaluation.ground_truth import (
    build_task_table,
    check_task_methods,
    filter_categories,
    normalize_ground_truth,
)


class TestCheckTaskMethods:
    """Tests for check_task_methods."""

    def test_none_method_rejected_at_any_resolution(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", task_method=TaskMethod.NONE)]
        for resolution in (Resolution.TASK, Resolution.RECORDING, Resolution.MINUTE):
            with pytest.raises(MethodIncompatibleError) as exc_info:
                check_task_methods(main, resolution)
            assert exc_info.value.method == "NONE"

    def test_minute_requires_per_minute_method(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", task_method=TaskMethod.ONE_SPT)]
        with pytest.raises(MethodIncompatibleError, match="1SPM"):
            check_task_methods(main, Resolution.MINUTE)

    def test_per_task_method_fine_for_recording(self, make_tag: Any) -> None:
        check_task_methods([make_tag("OVEN")], Resolution.RECORDING)

    def test_every_row_is_checked(self, make_tag: Any) -> None:
        main = [
            make_tag("OVEN", task_method=TaskMethod.ONE_SPM),
            make_tag("WTSP", recording_id=200, task_method=TaskMethod.ONE_SPT),
        ]
        with pytest.raises(MethodIncompatibleError):
            check_task_methods(main, Resolution.MINUTE)


class TestFilterCategories:
    """Tests for filter_categories."""

    def test_drops_non_target_categories(self, make_tag: Any) -> None:
        main = [
            make_tag("OVEN", category="bird"),
            make_tag("RESQ", category="mammal"),
            make_tag("LIBG", category="Abiotic"),
            make_tag("UNKN", category=None),
        ]
        kept = filter_categories(main)
        assert [t.species_code for t in kept] == ["OVEN", "UNKN"]

    def test_custom_excluded_categories(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", category="bird"), make_tag("WOFR", category="amphibian")]
        kept = filter_categories(main, excluded_categories=["bird"])
        assert [t.species_code for t in kept] == ["WOFR"]


class TestNormalizeGroundTruth:
    """Tests for normalize_ground_truth."""

    def test_deduplicates_to_keys(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", start_s=3), make_tag("OVEN", start_s=90)]
        keys = normalize_ground_truth(main, Resolution.RECORDING)
        assert keys == {AggregationKey(1144, 10, 100, None, None, "OVEN")}

    def test_task_keys_carry_task_id(self, make_tag: Any) -> None:
        keys = normalize_ground_truth([make_tag("OVEN", task_id=77)], Resolution.TASK)
        assert {k.task_id for k in keys} == {77}

    def test_minute_keys(self, make_tag: Any) -> None:
        main = [
            make_tag("OVEN", task_method=TaskMethod.ONE_SPM, start_s=0),
            make_tag("OVEN", task_method=TaskMethod.ONE_SPM, start_s=65),
        ]
        keys = normalize_ground_truth(main, Resolution.MINUTE)
        assert {k.minute for k in keys} == {1, 2}

    def test_minute_without_start_is_shape_error(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", task_method=TaskMethod.ONE_SPM)]
        with pytest.raises(InputShapeError):
            normalize_ground_truth(main, Resolution.MINUTE)

    def test_method_check_can_be_skipped(self, make_tag: Any) -> None:
        main = [make_tag("OVEN", task_method=TaskMethod.NONE)]
        keys = normalize_ground_truth(main, Resolution.LOCATION, check_method=False)
        assert len(keys) == 1

    def test_excluded_categories_do_not_produce_keys(self, make_tag: Any) -> None:
        main = [make_tag("RESQ", category="mammal")]
        assert normalize_ground_truth(main, Resolution.RECORDING) == set()


class TestBuildTaskTable:
    """Tests for build_task_table."""

    def test_distinct_tasks_per_recording(self, make_tag: Any) -> None:
        main = [
            make_tag("OVEN", task_id=1),
            make_tag("WTSP", task_id=1),
            make_tag("OVEN", task_id=2, task_duration=60.0),
            make_tag("OVEN", recording_id=200, task_id=3),
        ]
        table = build_task_table(main)
        assert [t.task_id for t in table[100]] == [1, 2]
        assert table[100][1].task_duration == 60.0
        assert [t.task_id for t in table[200]] == [3]
