"""Shared pytest fixtures for arueval tests."""
from __future__ import annotations

import os

# Prevent Rich/Typer from emitting ANSI escape codes in CLI output.
os.environ["NO_COLOR"] = "1"

import csv
from pathlib import Path
from typing import Any

import pytest

from arueval.core.enums import TaskMethod
from arueval.core.models import DetectionEvent, GroundTruthEvent, ReportBundle

PROJECT = 1144
LOCATION = 10
R1 = 100
R2 = 200


def _make_detection(
    species_code: str,
    confidence: float,
    recording_id: int = R1,
    start_s: float = 3.0,
    **kwargs: Any,
) -> DetectionEvent:
    """Build a classifier detection with sensible defaults."""
    data: dict[str, Any] = {
        "project_id": PROJECT,
        "location_id": LOCATION,
        "recording_id": recording_id,
        "species_code": species_code,
        "confidence": confidence,
        "start_s": start_s,
        "location": "ABMI-10",
        "recording_date_time": "2023-06-01 05:00:00",
    }
    data.update(kwargs)
    return DetectionEvent(**data)


def _make_tag(
    species_code: str,
    recording_id: int = R1,
    task_id: int | None = None,
    category: str | None = "bird",
    task_duration: float = 180.0,
    task_method: TaskMethod = TaskMethod.ONE_SPT,
    **kwargs: Any,
) -> GroundTruthEvent:
    """Build a human tag; task_id defaults to recording_id * 10."""
    data: dict[str, Any] = {
        "project_id": PROJECT,
        "location_id": LOCATION,
        "recording_id": recording_id,
        "task_id": task_id if task_id is not None else recording_id * 10,
        "species_code": species_code,
        "category": category,
        "task_duration": task_duration,
        "task_method": task_method,
        "location": "ABMI-10",
        "recording_date_time": "2023-06-01 05:00:00",
    }
    data.update(kwargs)
    return GroundTruthEvent(**data)


def write_csv(path: Path, rows: list[dict[str, Any]]) -> Path:
    """Write dict rows to a CSV file."""
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def make_detection() -> Any:
    """Factory for classifier detections."""
    return _make_detection


@pytest.fixture
def make_tag() -> Any:
    """Factory for human tags."""
    return _make_tag


@pytest.fixture
def csv_writer() -> Any:
    """Helper writing dict rows to a CSV file."""
    return write_csv


@pytest.fixture
def scenario_a() -> ReportBundle:
    """A@R1 and B@R2 tagged; classifier finds A@R1=60, A@R2=90, B@R2=40."""
    return ReportBundle(
        classifier=[
            _make_detection("A", 60, recording_id=R1),
            _make_detection("A", 90, recording_id=R2),
            _make_detection("B", 40, recording_id=R2),
        ],
        main=[
            _make_tag("A", recording_id=R1),
            _make_tag("B", recording_id=R2),
        ],
    )


@pytest.fixture
def scenario_b() -> ReportBundle:
    """Species C at location 10 is only reported by the classifier."""
    return ReportBundle(
        classifier=[
            _make_detection("A", 95, recording_id=R1),
            _make_detection("C", 85, recording_id=R1, start_s=12.0),
            _make_detection("C", 60, recording_id=R2),
        ],
        main=[_make_tag("A", recording_id=R1)],
    )


@pytest.fixture
def report_files(tmp_path: Path) -> tuple[Path, Path]:
    """Scenario A written as classifier and main report CSVs."""
    classifier = write_csv(tmp_path / "classifier.csv", [
        {"project_id": PROJECT, "location_id": LOCATION, "recording_id": R1,
         "species_code": "A", "confidence": 60, "start_s": 3,
         "is_species_allowed_in_project": "TRUE", "location": "ABMI-10",
         "recording_date_time": "2023-06-01 05:00:00"},
        {"project_id": PROJECT, "location_id": LOCATION, "recording_id": R2,
         "species_code": "A", "confidence": 90, "start_s": 3,
         "is_species_allowed_in_project": "TRUE", "location": "ABMI-10",
         "recording_date_time": "2023-06-02 05:00:00"},
        {"project_id": PROJECT, "location_id": LOCATION, "recording_id": R2,
         "species_code": "B", "confidence": 40, "start_s": 3,
         "is_species_allowed_in_project": "TRUE", "location": "ABMI-10",
         "recording_date_time": "2023-06-02 05:00:00"},
    ])
    main = write_csv(tmp_path / "main.csv", [
        {"project_id": PROJECT, "location_id": LOCATION, "recording_id": R1,
         "task_id": 1000, "species_code": "A", "category": "bird",
         "task_duration": 180, "task_method": "1SPT", "start_s": 5},
        {"project_id": PROJECT, "location_id": LOCATION, "recording_id": R2,
         "task_id": 2000, "species_code": "B", "category": "bird",
         "task_duration": 180, "task_method": "1SPT", "start_s": 5},
    ])
    return classifier, main
