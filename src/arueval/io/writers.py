"""Result writers -- threshold sweeps, novel detections, and tag uploads."""
from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from arueval.core.exceptions import UnsupportedFormatError
from arueval.core.models import TAG_COLUMNS, NovelRecord, TagRecord, ThresholdMetric

logger = structlog.get_logger(__name__)

SUPPORTED_WRITE_FORMATS = {".csv", ".json", ".xlsx"}

METRIC_FIELDS = ["threshold", "precision", "recall", "fscore"]

NOVEL_FIELDS = list(NovelRecord.model_fields)


def write_metrics(metrics: Sequence[ThresholdMetric], path: Path) -> Path:
    """Write a threshold sweep, format chosen by extension.

    Args:
        metrics: ThresholdMetric rows.
        path: Output file path (.csv, .json, or .xlsx).

    Returns:
        Path to the written file.

    Raises:
        UnsupportedFormatError: If the extension is not recognised.
    """
    rows = [m.model_dump() for m in metrics]
    path = _write_rows(rows, METRIC_FIELDS, Path(path))
    logger.info("write_metrics", path=str(path), n_thresholds=len(rows))
    return path


def write_novel_records(records: Sequence[NovelRecord], path: Path) -> Path:
    """Write novel detections, format chosen by extension.

    Args:
        records: NovelRecord rows.
        path: Output file path (.csv, .json, or .xlsx).

    Returns:
        Path to the written file.
    """
    rows = [r.model_dump() for r in records]
    path = _write_rows(rows, NOVEL_FIELDS, Path(path))
    logger.info("write_novel_records", path=str(path), n_records=len(rows))
    return path


def write_tags(tags: Sequence[TagRecord], path: Path) -> Path:
    """Write tag upload rows as CSV in the fixed upload column order.

    Args:
        tags: TagRecord rows.
        path: Output CSV path.

    Returns:
        Path to the written file.

    Raises:
        UnsupportedFormatError: If ``path`` is not a .csv file.
    """
    path = Path(path)
    if path.suffix.lower() != ".csv":
        raise UnsupportedFormatError(path.suffix.lower(), [".csv"])
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=TAG_COLUMNS)
        writer.writeheader()
        writer.writerows(t.to_row() for t in tags)
    logger.info("write_tags", path=str(path), n_tags=len(tags))
    return path


def _write_rows(rows: list[dict[str, Any]], fields: list[str], path: Path) -> Path:
    ext = path.suffix.lower()
    if ext not in SUPPORTED_WRITE_FORMATS:
        raise UnsupportedFormatError(ext, sorted(SUPPORTED_WRITE_FORMATS))
    path.parent.mkdir(parents=True, exist_ok=True)

    if ext == ".csv":
        _write_csv(rows, fields, path)
    elif ext == ".json":
        path.write_text(json.dumps(rows, indent=2, default=str))
    else:
        _write_excel(rows, fields, path)
    return path


def _write_csv(rows: list[dict[str, Any]], fields: list[str], path: Path) -> None:
    """Write rows as CSV; ``None`` becomes an empty cell.

    Args:
        rows: Row dicts.
        fields: Column order.
        path: Output file path.
    """
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fields, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _write_excel(rows: list[dict[str, Any]], fields: list[str], path: Path) -> None:
    """Write rows as Excel via pandas.

    Args:
        rows: Row dicts.
        fields: Column order.
        path: Output file path.
    """
    import pandas as pd  # noqa: PLC0415

    df = pd.DataFrame(rows, columns=fields)
    df.to_excel(path, index=False, engine="openpyxl")
