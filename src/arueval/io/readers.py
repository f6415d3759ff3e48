"""Report readers -- load classifier and main reports into typed models."""
from __future__ import annotations

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from arueval.core.exceptions import InputShapeError, UnsupportedFormatError
from arueval.core.models import (
    DetectionEvent,
    GroundTruthEvent,
    ReportBundle,
    ThresholdMetric,
)

logger = structlog.get_logger(__name__)

SUPPORTED_EXTENSIONS = {".csv", ".xlsx"}

CLASSIFIER_REQUIRED_COLUMNS = [
    "project_id",
    "location_id",
    "recording_id",
    "species_code",
    "confidence",
    "start_s",
]

MAIN_REQUIRED_COLUMNS = [
    "project_id",
    "location_id",
    "recording_id",
    "task_id",
    "species_code",
    "task_duration",
    "task_method",
]

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_classifier_report(path: Path) -> list[DetectionEvent]:
    """Read a classifier report into DetectionEvent rows.

    Args:
        path: Path to a .csv or .xlsx classifier report.

    Returns:
        List of DetectionEvent objects in file order.

    Raises:
        UnsupportedFormatError: If the extension is not recognised.
        FileNotFoundError: If the file does not exist.
        InputShapeError: If required columns are missing or a row is invalid.
    """
    columns, rows = _read_rows(Path(path))
    return _to_models(columns, rows, DetectionEvent, CLASSIFIER_REQUIRED_COLUMNS, Path(path))


def read_main_report(path: Path) -> list[GroundTruthEvent]:
    """Read a main (human tag) report into GroundTruthEvent rows.

    Args:
        path: Path to a .csv or .xlsx main report.

    Returns:
        List of GroundTruthEvent objects in file order.

    Raises:
        UnsupportedFormatError: If the extension is not recognised.
        FileNotFoundError: If the file does not exist.
        InputShapeError: If required columns are missing or a row is invalid.
    """
    columns, rows = _read_rows(Path(path))
    for row in rows:
        method = row.get("task_method")
        if isinstance(method, str):
            row["task_method"] = method.strip().upper()
    return _to_models(columns, rows, GroundTruthEvent, MAIN_REQUIRED_COLUMNS, Path(path))


def read_reports(classifier_path: Path, main_path: Path) -> ReportBundle:
    """Read the classifier and main reports into a ReportBundle."""
    bundle = ReportBundle(
        classifier=read_classifier_report(classifier_path),
        main=read_main_report(main_path),
    )
    logger.info(
        "read_reports",
        classifier=str(classifier_path),
        main=str(main_path),
        n_detections=len(bundle.classifier),
        n_tags=len(bundle.main),
    )
    return bundle


def read_metrics(path: Path) -> list[ThresholdMetric]:
    """Read a saved threshold sweep (.json or .csv).

    Args:
        path: Path written by ``write_metrics``.

    Returns:
        List of ThresholdMetric objects.

    Raises:
        UnsupportedFormatError: If the extension is not .json or .csv.
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in {".json", ".csv"}:
        raise UnsupportedFormatError(ext, [".csv", ".json"])
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if ext == ".json":
        data = json.loads(path.read_text())
        return [ThresholdMetric.model_validate(item) for item in data]
    return [
        ThresholdMetric.model_validate(_blank_to_none(row))
        for row in _read_csv(path)[1]
    ]


def _read_rows(path: Path) -> tuple[list[str], list[dict[str, Any]]]:
    """Read the header and raw rows, auto-detecting format by extension."""
    ext = path.suffix.lower()

    # Check extension first so unsupported formats fail fast
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(ext, sorted(SUPPORTED_EXTENSIONS))

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if ext == ".xlsx":
        return _read_excel(path)
    return _read_csv(path)


def _to_models(
    columns: list[str],
    rows: list[dict[str, Any]],
    model: type[ModelT],
    required: list[str],
    path: Path,
) -> list[ModelT]:
    """Validate raw rows against ``model``, reporting shape problems."""
    present = {c.strip() for c in columns}
    missing = [c for c in required if c not in present]
    if missing:
        msg = f"{path} is missing required column(s): {', '.join(missing)}"
        raise InputShapeError(msg, missing=missing)

    fields = set(model.model_fields)
    results: list[ModelT] = []
    for line, row in enumerate(rows, start=2):
        data = {k: v for k, v in _blank_to_none(row).items() if k in fields and v is not None}
        try:
            results.append(model.model_validate(data))
        except ValidationError as exc:
            msg = f"Invalid row {line} in {path}: {exc.errors()[0]['msg']}"
            raise InputShapeError(msg) from exc
    return results


def _blank_to_none(row: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in row.items():
        if key is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if value == "" or value.upper() == "NA":
                value = None
        elif isinstance(value, float) and value != value:  # NaN from pandas
            value = None
        cleaned[key.strip()] = value
    return cleaned


def _read_csv(path: Path) -> tuple[list[str], list[dict[str, Any]]]:
    """Read CSV file with delimiter auto-detection.

    Args:
        path: Path to .csv file.

    Returns:
        Header column names and raw row dicts.
    """
    text = _read_text_with_fallback(path)
    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=",;\t")
        delimiter = dialect.delimiter
    except csv.Error:
        delimiter = ","

    reader = csv.DictReader(StringIO(text), delimiter=delimiter)
    rows = list(reader)
    return list(reader.fieldnames or []), rows


def _read_excel(path: Path) -> tuple[list[str], list[dict[str, Any]]]:
    """Read Excel file via pandas.

    Args:
        path: Path to .xlsx file.

    Returns:
        Header column names and raw row dicts.
    """
    import pandas as pd  # noqa: PLC0415

    df = pd.read_excel(path, engine="openpyxl")
    records: list[dict[str, Any]] = df.to_dict(orient="records")
    return [str(c) for c in df.columns], records


def _read_text_with_fallback(path: Path) -> str:
    """Read text file with encoding fallback (UTF-8 -> latin-1).

    Args:
        path: Path to text file.

    Returns:
        File content as string.
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return path.read_text(encoding="latin-1")
