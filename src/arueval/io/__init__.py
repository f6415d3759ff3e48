"""arueval I/O module — report readers and result writers."""
from arueval.io.readers import (
    read_classifier_report,
    read_main_report,
    read_metrics,
    read_reports,
)
from arueval.io.writers import write_metrics, write_novel_records, write_tags

__all__ = [
    "read_classifier_report",
    "read_main_report",
    "read_metrics",
    "read_reports",
    "write_metrics",
    "write_novel_records",
    "write_tags",
]
