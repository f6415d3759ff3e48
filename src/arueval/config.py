"""Configuration loading for arueval.

Loads evaluation defaults, ground-truth category filters, novel detection
settings, and tag export defaults from YAML for reproducible runs.
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from arueval.core.enums import Resolution

DEFAULT_EXCLUDED_CATEGORIES = [
    "mammal",
    "amphibian",
    "abiotic",
    "insect",
    "human",
    "unknown",
]


class EvaluationSettings(BaseModel):
    """Threshold sweep configuration.

    Attributes:
        resolution: Default matching resolution.
        thresholds: Inclusive (start, end) of the integer threshold sweep.
        remove_disallowed_species: Drop classifier species not enabled in the project.
        fscore_decimals: Rounding applied before picking the best F-score.
    """

    resolution: Resolution = Resolution.RECORDING
    thresholds: tuple[int, int] = (10, 99)
    remove_disallowed_species: bool = True
    fscore_decimals: int = Field(default=2, ge=0)

    @field_validator("thresholds")
    @classmethod
    def _ordered(cls, value: tuple[int, int]) -> tuple[int, int]:
        if value[0] > value[1]:
            msg = f"Threshold range start must not exceed end: {value}"
            raise ValueError(msg)
        return value


class GroundTruthSettings(BaseModel):
    """Main report normalisation.

    Attributes:
        excluded_categories: Categories dropped from the human tags.
    """

    excluded_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_CATEGORIES)
    )


class NovelSettings(BaseModel):
    """Novel detection defaults.

    Attributes:
        threshold: Minimum classifier score considered.
        resolution: Grouping level for the anti-join.
        seed: Seed for random tie-breaking (``None`` keeps first-by-order).
    """

    threshold: int = 50
    resolution: Resolution = Resolution.TASK
    seed: int | None = None


class TagSettings(BaseModel):
    """Tag upload export defaults."""

    transcriber: str = "birdnet"
    vocalization: str = "SONG"
    abundance: int = 1
    tags_filename: str = "birdnet_tags.csv"


class AruEvalConfig(BaseModel):
    """Root configuration for arueval.

    Attributes:
        evaluation: Threshold sweep settings.
        ground_truth: Main report normalisation settings.
        novel: Novel detection settings.
        tags: Tag export settings.
    """

    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)
    ground_truth: GroundTruthSettings = Field(default_factory=GroundTruthSettings)
    novel: NovelSettings = Field(default_factory=NovelSettings)
    tags: TagSettings = Field(default_factory=TagSettings)


def load_config(path: Path) -> AruEvalConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        AruEvalConfig with defaults for any missing section.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return AruEvalConfig(
        evaluation=EvaluationSettings(**data.get("evaluation", {})),
        ground_truth=GroundTruthSettings(**data.get("ground_truth", {})),
        novel=NovelSettings(**data.get("novel", {})),
        tags=TagSettings(**data.get("tags", {})),
    )
