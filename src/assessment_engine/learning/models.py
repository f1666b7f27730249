from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from assessment_engine.config.schema import PASSING_THRESHOLD

DEFAULT_POINTS = {"MULTIPLE_CHOICE": 1, "ESSAY": 5}


class QuestionKind(str, Enum):
    """Question types supported by the assessment engine."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    ESSAY = "ESSAY"


class Variant(str, Enum):
    """Attempt variant within one level: first try, first remediation, last chance."""

    A = "A"
    B = "B"
    C = "C"

    @property
    def rank(self) -> int:
        return "ABC".index(self.value)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Variant):
            return NotImplemented
        return self.rank < other.rank


def question_set_id(level: int, variant: Variant | str) -> str:
    """Identity of the question set for one (level, variant) pair, e.g. ``L3-B``."""
    return f"L{level}-{Variant(variant).value}"


def _new_question_id() -> str:
    return uuid.uuid4().hex


class Question(BaseModel):
    """Single assessable item belonging to one (level, variant) question set."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_question_id)
    kind: QuestionKind
    prompt: str
    options: List[str] = Field(default_factory=list)
    correct_option_index: Optional[int] = None
    answer_key: Optional[str] = None
    points: int = Field(1, ge=1)
    order: int = Field(1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def default_points_for_kind(cls, data: Any) -> Any:
        """Essays are worth 5 points and multiple-choice items 1 unless stated."""
        if isinstance(data, dict) and data.get("points") is None:
            kind = data.get("kind")
            key = kind.value if isinstance(kind, QuestionKind) else str(kind or "")
            data = {**data, "points": DEFAULT_POINTS.get(key, 1)}
        return data

    @model_validator(mode="after")
    def check_correct_index(self) -> "Question":
        if self.correct_option_index is None:
            return self
        if self.kind is not QuestionKind.MULTIPLE_CHOICE:
            raise ValueError("correct_option_index only applies to multiple-choice questions")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError("correct_option_index must point at one of the options")
        return self

    @property
    def correct_answer(self) -> Optional[str]:
        """Text of the correct option, or None when no option is marked."""
        if self.correct_option_index is None:
            return None
        return self.options[self.correct_option_index]


class AssessmentState(BaseModel):
    """Student position on the remediation ladder."""

    model_config = ConfigDict(frozen=True)

    level: int = Field(1, ge=1)
    variant: Variant = Variant.A


class EssayGrade(BaseModel):
    """Score and feedback returned by the essay grader."""

    score: float
    feedback: str = ""

    @field_validator("score")
    @classmethod
    def score_in_range(cls, value: float) -> float:
        if not 0 <= value <= 100:
            raise ValueError("essay score must be between 0 and 100")
        return value


class QuestionScore(BaseModel):
    """Contribution of one question to the attempt score."""

    question_id: str
    kind: QuestionKind
    earned: float
    possible: float
    is_correct: Optional[bool] = None
    grade: Optional[EssayGrade] = None
    fallback_used: bool = False
    error: Optional[str] = None


class ScoreBreakdown(BaseModel):
    """Aggregate score plus per-question detail."""

    score: int = Field(ge=0, le=100)
    raw_score: float
    questions: List[QuestionScore] = Field(default_factory=list)

    @property
    def fallback_count(self) -> int:
        return sum(1 for item in self.questions if item.fallback_used)


class Transition(BaseModel):
    """Outcome of applying the remediation policy to one attempt."""

    model_config = ConfigDict(frozen=True)

    next_state: AssessmentState
    message: str
    exits_ladder: bool = False
    needs_teacher: bool = False


class AttemptResult(BaseModel):
    """Outcome of one completed assessment attempt."""

    question_set_id: str
    score: int = Field(ge=0, le=100)
    passed: bool
    prior_state: AssessmentState
    next_state: AssessmentState
    message: str
    needs_teacher: bool = False
    breakdown: ScoreBreakdown


class SkillLevelRecord(BaseModel):
    """Skill level recorded for a student after a passed assessment."""

    student_id: str
    skill: str
    level: int = Field(ge=1)
    recorded_at: datetime = Field(default_factory=datetime.utcnow)
