"""Core enumerations for arueval."""
from enum import StrEnum


class Resolution(StrEnum):
    """Granularity at which classifier and human events are matched.

    Evaluation supports TASK, MINUTE and RECORDING. Novel detection
    discovery supports TASK, RECORDING, LOCATION and PROJECT.
    """

    TASK = "task"
    MINUTE = "minute"
    RECORDING = "recording"
    LOCATION = "location"
    PROJECT = "project"


EVALUATION_RESOLUTIONS = frozenset(
    {Resolution.TASK, Resolution.MINUTE, Resolution.RECORDING}
)
NOVEL_RESOLUTIONS = frozenset(
    {Resolution.TASK, Resolution.RECORDING, Resolution.LOCATION, Resolution.PROJECT}
)


class TaskMethod(StrEnum):
    """Transcription method used by human listeners on a task."""

    ONE_SPM = "1SPM"  # one tag per species per minute
    ONE_SPT = "1SPT"  # one tag per species per task
    NONE = "NONE"     # not transcribed


class Outcome(StrEnum):
    """Agreement outcome of a single confusion row."""

    TP = "tp"
    FP = "fp"
    FN = "fn"
