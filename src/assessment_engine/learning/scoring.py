from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Mapping, Optional, Protocol, Sequence

from pydantic import ValidationError

from assessment_engine.config.schema import ScoringConfig
from assessment_engine.learning.models import (
    EssayGrade,
    Question,
    QuestionKind,
    QuestionScore,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)


class EssayGrader(Protocol):
    """External collaborator that grades a free-text answer on a 0-100 scale."""

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade: ...


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _question_shares(questions: Sequence[Question], weight_by_points: bool) -> List[float]:
    if not weight_by_points:
        return [100 / len(questions)] * len(questions)
    total_points = sum(question.points for question in questions)
    return [100 * question.points / total_points for question in questions]


class ScoreAggregator:
    """
    Blend multiple-choice and essay results into one percentage score.

    Every question gets an equal share of 100 points unless the policy weights
    shares by ``points``. Multiple-choice answers earn the full share on an exact
    match with the correct option. Essays are sent to the grader concurrently and
    earn ``share * score / 100``. A grader failure, timeout or out-of-range score
    only affects that one essay: it receives the fallback score and its
    ``QuestionScore.fallback_used`` flag is set. The per-question shares are
    summed in question order and rounded once.
    """

    def __init__(self, grader: Optional[EssayGrader], policy: ScoringConfig | None = None):
        self.grader = grader
        self.policy = policy or ScoringConfig()

    def score(self, questions: Sequence[Question], answers: Mapping[str, str]) -> ScoreBreakdown:
        """Synchronously score an attempt; wraps `ascore` in `asyncio.run`."""
        return asyncio.run(self.ascore(questions, answers))

    def score_percentage(self, questions: Sequence[Question], answers: Mapping[str, str]) -> int:
        """Return only the 0-100 percentage of an attempt."""
        return self.score(questions, answers).score

    async def ascore(
        self, questions: Sequence[Question], answers: Mapping[str, str]
    ) -> ScoreBreakdown:
        if not questions:
            return ScoreBreakdown(score=0, raw_score=0.0, questions=[])

        shares = _question_shares(questions, self.policy.weight_by_points)
        semaphore = asyncio.Semaphore(self.policy.max_concurrent_gradings)

        tasks = []
        for question, share in zip(questions, shares):
            answer = answers.get(question.id)
            if question.kind is QuestionKind.MULTIPLE_CHOICE:
                tasks.append(self._score_multiple_choice(question, answer, share))
            else:
                tasks.append(self._score_essay(question, answer or "", share, semaphore))
        results: List[QuestionScore] = list(await asyncio.gather(*tasks))

        raw_score = sum(result.earned for result in results)
        score = max(0, min(100, round_half_up(raw_score)))
        breakdown = ScoreBreakdown(score=score, raw_score=raw_score, questions=results)
        if breakdown.fallback_count:
            logger.warning(
                "Scored attempt with %d essay grading fallback(s)", breakdown.fallback_count
            )
        return breakdown

    async def _score_multiple_choice(
        self, question: Question, answer: Optional[str], share: float
    ) -> QuestionScore:
        correct = question.correct_answer
        is_correct = correct is not None and answer is not None and answer == correct
        return QuestionScore(
            question_id=question.id,
            kind=question.kind,
            earned=share if is_correct else 0.0,
            possible=share,
            is_correct=is_correct,
        )

    async def _score_essay(
        self,
        question: Question,
        answer: str,
        share: float,
        semaphore: asyncio.Semaphore,
    ) -> QuestionScore:
        async with semaphore:
            grade, error = await self._grade_with_fallback(question, answer)
        return QuestionScore(
            question_id=question.id,
            kind=question.kind,
            earned=share * grade.score / 100,
            possible=share,
            grade=grade,
            fallback_used=error is not None,
            error=error,
        )

    async def _grade_with_fallback(self, question: Question, answer: str):
        if self.grader is None:
            return self._fallback_grade(), "no essay grader configured"
        try:
            grade = await asyncio.wait_for(
                self.grader.grade_essay(question.prompt, answer),
                timeout=self.policy.essay_timeout_seconds,
            )
            if not isinstance(grade, EssayGrade):
                grade = EssayGrade.model_validate(grade)
        except asyncio.TimeoutError:
            error = f"grading timed out after {self.policy.essay_timeout_seconds}s"
        except (ValidationError, TypeError) as exc:
            error = f"invalid grade: {exc}"
        except Exception as exc:  # noqa: BLE001 - any grader failure falls back
            error = f"{exc.__class__.__name__}: {exc}"
        else:
            return grade, None

        logger.warning("Essay grading failed for question %s: %s", question.id, error)
        return self._fallback_grade(), error

    def _fallback_grade(self) -> EssayGrade:
        return EssayGrade(
            score=self.policy.essay_fallback_score,
            feedback="Error connecting to grading service. Please try again.",
        )
