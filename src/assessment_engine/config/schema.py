from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

PASSING_THRESHOLD = 70

# Score awarded to an essay when the grader fails or times out.
ESSAY_FALLBACK_SCORE = 0.0


class ModelConfig(BaseModel):
    """Model-level settings for the LLM used to grade essays."""

    name: str = Field("gpt-4o-mini", description="LLM identifier.")
    temperature: float = Field(0.0, ge=0, le=2)
    max_output_tokens: int = Field(512, ge=64)


class ScoringConfig(BaseModel):
    """Policy constants for score aggregation and essay grading."""

    passing_threshold: int = Field(PASSING_THRESHOLD, ge=0, le=100)
    essay_fallback_score: float = Field(ESSAY_FALLBACK_SCORE, ge=0, le=100)
    essay_timeout_seconds: float = Field(20.0, gt=0)
    max_concurrent_gradings: int = Field(4, ge=1)
    weight_by_points: bool = False

    @field_validator("passing_threshold")
    @classmethod
    def threshold_is_fixed(cls, value: int) -> int:
        """The pass mark is a fixed policy constant shared with the remediation messages."""
        if value != PASSING_THRESHOLD:
            raise ValueError(f"passing_threshold is fixed at {PASSING_THRESHOLD}")
        return value


class PathsConfig(BaseModel):
    """Filesystem layout for question sets and student profiles."""

    question_sets_dir: Path = Field(Path("data/question_sets"))
    profiles_dir: Path = Field(Path("data/profiles"))


class LoggingConfig(BaseModel):
    """Controls for engine logging output and format."""

    level: str = Field("INFO")
    use_json: bool = False
    file: Optional[Path] = None


class Settings(BaseModel):
    """Top-level engine configuration aggregating all sub-settings."""

    project_name: str = Field("Adaptive Assessment Engine")
    model: ModelConfig = Field(default_factory=ModelConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
