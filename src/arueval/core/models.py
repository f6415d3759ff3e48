"""Core data models for arueval.

Raw report rows are frozen Pydantic models; derived rows (aggregations,
confusion rows, threshold metrics) are rebuilt on every call and never
mutated after construction.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from arueval.core.enums import Outcome, TaskMethod


class DetectionEvent(BaseModel):
    """A single classifier detection from the classifier report.

    Attributes:
        project_id: Project identifier.
        location_id: Location identifier.
        recording_id: Recording identifier.
        task_id: Owning task, when the classifier report carries it.
        species_code: Species code (e.g., "OVEN").
        confidence: Classifier score on the 0-100 scale.
        start_s: Offset of the detection window from recording start, seconds.
        end_s: End of the detection window, seconds.
        is_species_allowed_in_project: Whether the species is enabled in the project.
        location: Human-readable location name.
        recording_date_time: Recording timestamp as exported.
        species_common_name: Common name of the species.
    """

    project_id: int
    location_id: int
    recording_id: int
    task_id: int | None = None
    species_code: str = Field(min_length=1)
    confidence: float
    start_s: float = Field(default=0.0, ge=0)
    end_s: float | None = None
    is_species_allowed_in_project: bool = True
    location: str | None = None
    recording_date_time: str | None = None
    species_common_name: str | None = None

    model_config = {"frozen": True}


class GroundTruthEvent(BaseModel):
    """A single human tag from the main report.

    Attributes:
        project_id: Project identifier.
        location_id: Location identifier.
        recording_id: Recording identifier.
        task_id: Task the tag was made in.
        species_code: Species code.
        category: Species class or marker category (e.g., "bird", "abiotic").
        task_duration: Length of the task, seconds.
        task_method: Transcription method of the task.
        start_s: Offset of the tag from recording start, seconds.
        location: Human-readable location name.
        recording_date_time: Recording timestamp as exported.
    """

    project_id: int
    location_id: int
    recording_id: int
    task_id: int
    species_code: str = Field(min_length=1)
    category: str | None = None
    task_duration: float = Field(ge=0)
    task_method: TaskMethod
    start_s: float | None = Field(default=None, ge=0)
    location: str | None = None
    recording_date_time: str | None = None

    model_config = {"frozen": True}


class ReportBundle(BaseModel):
    """The classifier report paired with the main (human tag) report.

    Attributes:
        classifier: Classifier detections.
        main: Human tags.
    """

    classifier: list[DetectionEvent] = Field(default_factory=list)
    main: list[GroundTruthEvent] = Field(default_factory=list)


@dataclass(frozen=True)
class TaskInfo:
    """Distinct task row derived from the main report."""

    recording_id: int
    task_id: int
    task_duration: float
    task_method: TaskMethod


@dataclass(frozen=True, order=False)
class AggregationKey:
    """Composite identity used to group and join events.

    Fields a resolution does not use stay ``None`` so two keys compare
    equal exactly when every identity field and the species code match.
    """

    project_id: int
    location_id: int | None
    recording_id: int | None
    task_id: int | None
    minute: int | None
    species_code: str

    def sort_key(self) -> tuple[int, int, int, int, int, str]:
        """Return a total ordering key with ``None`` sorted first."""
        return (
            self.project_id,
            -1 if self.location_id is None else self.location_id,
            -1 if self.recording_id is None else self.recording_id,
            -1 if self.task_id is None else self.task_id,
            -1 if self.minute is None else self.minute,
            self.species_code,
        )


@dataclass(frozen=True)
class AggregatedDetection:
    """Maximum classifier confidence for one key."""

    key: AggregationKey
    confidence: float
    classifier: int = 1


class ConfusionRow(BaseModel):
    """One outer-joined row of the confusion table.

    Attributes:
        key: Identity key shared by both sides of the join.
        human: 1 if a human tagged the key.
        classifier: 1 if the classifier detected the key.
        confidence: Aggregated classifier confidence (``None`` when classifier=0).
        tp: True positive flag.
        fp: False positive flag.
        fn: False negative flag.
    """

    key: AggregationKey
    human: Literal[0, 1]
    classifier: Literal[0, 1]
    confidence: float | None = None
    tp: Literal[0, 1] = 0
    fp: Literal[0, 1] = 0
    fn: Literal[0, 1] = 0

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def _check_outcome(self) -> ConfusionRow:
        if self.tp + self.fp + self.fn > 1:
            msg = "A confusion row carries at most one of tp, fp, fn"
            raise ValueError(msg)
        if self.classifier == 0 and self.confidence is not None:
            msg = "Confidence is only defined for classifier detections"
            raise ValueError(msg)
        return self

    @property
    def outcome(self) -> Outcome | None:
        """The row's outcome, or ``None`` for an (unrepresented) true negative."""
        if self.tp:
            return Outcome.TP
        if self.fp:
            return Outcome.FP
        if self.fn:
            return Outcome.FN
        return None


class ConfusionMatrix(BaseModel):
    """Full outer join of aggregated classifier output and human tags.

    Attributes:
        rows: Confusion rows ordered by key.
        human_total: Number of rows with human=1, fixed for every threshold.
    """

    rows: list[ConfusionRow] = Field(default_factory=list)
    human_total: int = 0

    model_config = {"arbitrary_types_allowed": True}

    @property
    def n_tp(self) -> int:
        """Number of true positive rows."""
        return sum(r.tp for r in self.rows)

    @property
    def n_fp(self) -> int:
        """Number of false positive rows."""
        return sum(r.fp for r in self.rows)

    @property
    def n_fn(self) -> int:
        """Number of false negative rows."""
        return sum(r.fn for r in self.rows)


class ThresholdMetric(BaseModel):
    """Precision, recall, and F-score at one score threshold.

    Undefined values (zero denominators) are ``None``.

    Attributes:
        threshold: Integer score threshold.
        precision: tp / (tp + fp) over detections at or above the threshold.
        recall: tp / human_total.
        fscore: Harmonic mean of precision and recall.
    """

    threshold: int
    precision: float | None = None
    recall: float | None = None
    fscore: float | None = None


class NovelRecord(DetectionEvent):
    """Highest-scoring classifier detection for a key no human tagged.

    Attributes:
        task_duration: Length of the owning task, when resolved at task level.
    """

    task_duration: float | None = None


TAG_COLUMNS = [
    "location",
    "recordingDate",
    "method",
    "taskLength",
    "transcriber",
    "species",
    "speciesIndividualNumber",
    "vocalization",
    "abundance",
    "startTime",
    "tagLength",
    "minFreq",
    "maxFreq",
    "speciesIndividualComment",
    "internal_tag_id",
]


class TagRecord(BaseModel):
    """A novel detection reshaped into the tag upload schema.

    Field aliases are the upload column names; ``TAG_COLUMNS`` fixes
    their order.
    """

    location: str = ""
    recording_date: str = Field(default="", alias="recordingDate")
    method: TaskMethod = Field(alias="method")
    task_length: float = Field(alias="taskLength")
    transcriber: str = "birdnet"
    species: str
    species_individual_number: int = Field(default=1, alias="speciesIndividualNumber")
    vocalization: str = "SONG"
    abundance: int = 1
    start_time: float = Field(alias="startTime")
    tag_length: str = Field(default="", alias="tagLength")
    min_freq: str = Field(default="", alias="minFreq")
    max_freq: str = Field(default="", alias="maxFreq")
    species_individual_comment: float = Field(alias="speciesIndividualComment")
    internal_tag_id: str = ""

    model_config = {"populate_by_name": True}

    def to_row(self) -> dict[str, object]:
        """Return the record as an upload row in column order."""
        data = self.model_dump(by_alias=True, mode="json")
        return {col: data[col] for col in TAG_COLUMNS}
