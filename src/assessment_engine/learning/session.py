"""Controller for one student's assessment attempts.

The session owns an explicit AssessmentState: it reads it when constructed,
loads the question set at ``begin``, grades at ``submit_answers`` and only
writes the state back in ``advance``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, List, Mapping, Optional, Protocol

from assessment_engine.errors import NoContentError, SessionStateError
from assessment_engine.learning.models import (
    AssessmentState,
    AttemptResult,
    Question,
    SkillLevelRecord,
    Variant,
    question_set_id,
)
from assessment_engine.learning.remediation import transition
from assessment_engine.learning.scoring import ScoreAggregator
from assessment_engine.utils.logging import get_logger

if TYPE_CHECKING:
    from assessment_engine.storage.question_store import QuestionStore

logger = get_logger(__name__)


class ProfileStore(Protocol):
    """Collaborator that persists ladder state and receives skill-level commands."""

    def save_state(self, student_id: str, state: AssessmentState) -> None: ...

    def record_skill_level(self, student_id: str, skill: str, level: int) -> SkillLevelRecord: ...


class AssessmentSession:
    """Run assessment attempts for one student on the remediation ladder."""

    def __init__(
        self,
        student_id: str,
        state: AssessmentState,
        question_store: "QuestionStore",
        aggregator: ScoreAggregator,
        profile_store: Optional[ProfileStore] = None,
        skill: Optional[str] = None,
    ):
        self.student_id = student_id
        self._state = state
        self.question_store = question_store
        self.aggregator = aggregator
        self.profile_store = profile_store
        self.skill = skill
        self._questions: List[Question] = []
        self._active: Optional[AssessmentState] = None
        self._pending: Optional[AttemptResult] = None
        self._lock = asyncio.Lock()
        self._log = logger.bind(student_id=student_id)

    @property
    def state(self) -> AssessmentState:
        return self._state

    @property
    def questions(self) -> List[Question]:
        return list(self._questions)

    @property
    def pending_result(self) -> Optional[AttemptResult]:
        """Result of the last submission that has not been applied by `advance`."""
        return self._pending

    def begin(self, level: Optional[int] = None, variant: Variant | str | None = None) -> List[Question]:
        """
        Load the question set for (level, variant), defaulting to the current state.

        Raises
        ------
        NoContentError
            If no questions exist for the pair. The attempt cannot proceed and the
            condition should be reported rather than retried.
        """
        active = AssessmentState(
            level=self._state.level if level is None else level,
            variant=self._state.variant if variant is None else Variant(variant),
        )
        questions = list(self.question_store.load_question_set(active.level, active.variant))
        if not questions:
            self._log.warning("no_content", ladder_level=active.level, variant=active.variant.value)
            raise NoContentError(active.level, active.variant.value)

        self._questions = sorted(questions, key=lambda question: question.order)
        self._active = active
        self._pending = None
        self._log.info(
            "attempt_started",
            ladder_level=active.level,
            variant=active.variant.value,
            questions=len(self._questions),
        )
        return self.questions

    def submit_answers(self, answers: Mapping[str, str]) -> AttemptResult:
        """Synchronously grade an attempt; wraps `submit_answers_async` in `asyncio.run`."""
        return asyncio.run(self.submit_answers_async(answers))

    async def submit_answers_async(self, answers: Mapping[str, str]) -> AttemptResult:
        """
        Grade the loaded question set and compute the remediation transition.

        Unanswered multiple-choice questions count as incorrect and unanswered
        essays are graded as an empty string. Answers for unknown question ids are
        ignored.
        """
        async with self._lock:
            if self._active is None or not self._questions:
                raise SessionStateError("begin() must be called before submitting answers.")
            if self._pending is not None:
                raise SessionStateError("Attempt already submitted; call advance() or begin() again.")

            known_ids = {question.id for question in self._questions}
            unknown = sorted(set(answers) - known_ids)
            if unknown:
                self._log.debug("ignoring_unknown_answers", question_ids=unknown)
            filtered = {qid: answer for qid, answer in answers.items() if qid in known_ids}

            breakdown = await self.aggregator.ascore(self._questions, filtered)
            passed = breakdown.score >= self.aggregator.policy.passing_threshold
            outcome = transition(self._active, passed)

            result = AttemptResult(
                question_set_id=question_set_id(self._active.level, self._active.variant),
                score=breakdown.score,
                passed=passed,
                prior_state=self._active,
                next_state=outcome.next_state,
                message=outcome.message,
                needs_teacher=outcome.needs_teacher,
                breakdown=breakdown,
            )
            self._pending = result
            self._log.info(
                "attempt_graded",
                set_id=result.question_set_id,
                score=result.score,
                passed=passed,
                fallbacks=breakdown.fallback_count,
                next_level=outcome.next_state.level,
                next_variant=outcome.next_state.variant.value,
            )
            return result

    def advance(self) -> AssessmentState:
        """
        Apply the pending transition exactly once and return the new state.

        A second call without a new submission raises `SessionStateError` instead
        of applying the transition again. The profile store is written first; if
        it raises, the session keeps its state and pending result so the call can
        be retried.
        """
        result = self._pending
        if result is None:
            raise SessionStateError("No submitted attempt to advance from.")

        if self.profile_store is not None:
            self.profile_store.save_state(self.student_id, result.next_state)
            if result.passed and self.skill:
                self.profile_store.record_skill_level(
                    self.student_id, self.skill, result.prior_state.level
                )

        self._state = result.next_state
        self._pending = None
        self._active = None
        self._questions = []

        if result.needs_teacher:
            self._log.warning("teacher_referral", ladder_level=self._state.level)
        return self._state
