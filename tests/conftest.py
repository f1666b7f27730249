"""Shared fixtures and fake collaborators for engine tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from assessment_engine.config import ScoringConfig
from assessment_engine.learning.models import EssayGrade, Question, QuestionKind, Variant
from assessment_engine.learning.progress import ProgressTracker
from assessment_engine.learning.scoring import ScoreAggregator
from assessment_engine.storage import JsonlQuestionStore


class FixedGrader:
    """Grader that returns the same score for every essay and records its calls."""

    def __init__(self, score: float, feedback: str = "Well argued."):
        self.score = score
        self.feedback = feedback
        self.calls: List[Tuple[str, str]] = []

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade:
        self.calls.append((prompt, answer))
        return EssayGrade(score=self.score, feedback=self.feedback)


class FailingGrader:
    """Grader whose service is always down."""

    def __init__(self):
        self.calls = 0

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade:
        self.calls += 1
        raise ConnectionError("grading service unavailable")


class SlowGrader:
    """Grader that never answers within the test timeout."""

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade:
        await asyncio.sleep(5)
        return EssayGrade(score=100, feedback="too late")


class ScriptedGrader:
    """Grader returning per-prompt scores; prompts mapped to None raise."""

    def __init__(self, scores: Dict[str, float | None]):
        self.scores = scores

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade:
        score = self.scores[prompt]
        if score is None:
            raise RuntimeError(f"cannot grade {prompt!r}")
        return EssayGrade(score=score, feedback="ok")


def mc(qid: str, prompt: str, options: List[str], correct: int | None, order: int = 1, points: int | None = None) -> Question:
    return Question(
        id=qid,
        kind=QuestionKind.MULTIPLE_CHOICE,
        prompt=prompt,
        options=options,
        correct_option_index=correct,
        order=order,
        points=points,
    )


def essay(qid: str, prompt: str, order: int = 1, points: int | None = None) -> Question:
    return Question(id=qid, kind=QuestionKind.ESSAY, prompt=prompt, order=order, points=points)


@pytest.fixture
def mc_questions() -> List[Question]:
    """Three multiple-choice questions with known answers."""
    return [
        mc("q1", "What is the capital of France?", ["London", "Paris", "Berlin", "Madrid"], 1, order=1),
        mc("q2", "Which word is a noun?", ["Run", "Beautiful", "Computer", "Quickly"], 2, order=2),
        mc("q3", "Choose the past tense of 'go'.", ["goed", "went", "gone"], 1, order=3),
    ]


@pytest.fixture
def fast_policy() -> ScoringConfig:
    return ScoringConfig(essay_timeout_seconds=0.05)


@pytest.fixture
def question_store(tmp_path: Path) -> JsonlQuestionStore:
    return JsonlQuestionStore(tmp_path / "question_sets")


@pytest.fixture
def progress_tracker(tmp_path: Path) -> ProgressTracker:
    return ProgressTracker(tmp_path / "profiles")


@pytest.fixture
def aggregator(fast_policy: ScoringConfig) -> ScoreAggregator:
    return ScoreAggregator(FixedGrader(80), fast_policy)


@pytest.fixture
def seeded_store(question_store: JsonlQuestionStore) -> JsonlQuestionStore:
    """Store with one multiple-choice set for every variant of levels 1-3."""
    for level in (1, 2, 3):
        for variant in Variant:
            question_store.save_questions(
                f"L{level}-{variant.value}",
                [
                    mc(f"L{level}{variant.value}-1", f"Level {level} {variant.value} first", ["yes", "no"], 0),
                    mc(f"L{level}{variant.value}-2", f"Level {level} {variant.value} second", ["yes", "no"], 0),
                ],
            )
    return question_store
