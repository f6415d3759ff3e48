"""Custom exception hierarchy for arueval.

Never use bare except clauses. Always catch specific exceptions.
"""
from __future__ import annotations

from pathlib import Path


class AruEvalError(Exception):
    """Base exception for all arueval errors."""


# Input exceptions
class InputShapeError(AruEvalError):
    """Input is not the classifier/main report pair that was expected."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class UnsupportedFormatError(AruEvalError):
    """Unsupported file format."""

    def __init__(self, format: str, supported: list[str] | None = None) -> None:  # noqa: A002
        supported_str = ", ".join(supported) if supported else "unknown"
        super().__init__(f"Unsupported format '{format}'. Supported: {supported_str}")
        self.format = format
        self.supported = supported or []


# Domain exceptions
class MethodIncompatibleError(AruEvalError):
    """Transcription method cannot support the requested resolution."""

    def __init__(self, message: str, method: str, resolution: str) -> None:
        super().__init__(message)
        self.method = method
        self.resolution = resolution


class NoNovelDetectionsError(AruEvalError):
    """Every classifier detection above the threshold has a human match."""


class MissingSinkError(AruEvalError):
    """Tag export requested without a usable output directory."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
