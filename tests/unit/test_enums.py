"""Tests for core enums."""
from arueval.core.enums import (
    EVALUATION_RESOLUTIONS,
    NOVEL_RESOLUTIONS,
    Outcome,
    Resolution,
    TaskMethod,
)


def test_resolution_values() -> None:
    assert Resolution("task") is Resolution.TASK
    assert Resolution.MINUTE == "minute"
    assert str(Resolution.RECORDING) == "recording"


def test_evaluation_resolutions() -> None:
    assert EVALUATION_RESOLUTIONS == {Resolution.TASK, Resolution.MINUTE, Resolution.RECORDING}


def test_novel_resolutions() -> None:
    """Minute is not a discovery level; location and project are."""
    assert Resolution.MINUTE not in NOVEL_RESOLUTIONS
    assert {Resolution.LOCATION, Resolution.PROJECT} <= NOVEL_RESOLUTIONS


def test_task_method_values() -> None:
    assert TaskMethod("1SPM") is TaskMethod.ONE_SPM
    assert TaskMethod.ONE_SPT == "1SPT"
    assert TaskMethod.NONE == "NONE"


def test_outcome_values() -> None:
    assert [o.value for o in Outcome] == ["tp", "fp", "fn"]
