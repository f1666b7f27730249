from .models import (
    AssessmentState,
    AttemptResult,
    EssayGrade,
    Question,
    QuestionKind,
    QuestionScore,
    ScoreBreakdown,
    Transition,
    Variant,
)
from .progress import ProgressTracker
from .remediation import is_floor_terminal, transition
from .scoring import EssayGrader, ScoreAggregator
from .session import AssessmentSession

__all__ = [
    "AssessmentSession",
    "AssessmentState",
    "AttemptResult",
    "EssayGrade",
    "EssayGrader",
    "ProgressTracker",
    "Question",
    "QuestionKind",
    "QuestionScore",
    "ScoreAggregator",
    "ScoreBreakdown",
    "Transition",
    "Variant",
    "is_floor_terminal",
    "transition",
]
