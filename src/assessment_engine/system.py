from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from assessment_engine.agents.essay_grader import LLMEssayGrader
from assessment_engine.agents.llm_client import LLMClient
from assessment_engine.config import Settings, load_settings
from assessment_engine.ingestion import (
    ReviewIssue,
    count_question_markers,
    is_test_ready,
    parse_questions_from_text,
    review_question_set,
)
from assessment_engine.learning import (
    AssessmentSession,
    EssayGrader,
    ProgressTracker,
    Question,
    ScoreAggregator,
    Variant,
)
from assessment_engine.learning.models import question_set_id
from assessment_engine.storage import JsonlQuestionStore
from assessment_engine.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class ImportReport(BaseModel):
    """Questions extracted from pasted text plus the review findings."""

    set_id: Optional[str] = None
    expected_count: int
    questions: List[Question] = Field(default_factory=list)
    issues: List[ReviewIssue] = Field(default_factory=list)
    saved: bool = False

    @property
    def test_ready(self) -> bool:
        return is_test_ready(self.issues)


class AssessmentSystem:
    """
    Facade wiring the parser, question store, grader, and student progress store.

    Attributes
    ----------
    settings : Settings
        Configuration loaded from YAML.
    question_store : JsonlQuestionStore
        Question sets keyed by (level, variant).
    progress_tracker : ProgressTracker
        Per-student ladder state and skill levels.
    grader : EssayGrader | None
        Essay grader; built from the model settings when an API key is available.
        Without one, essays receive the fallback score.
    """

    def __init__(
        self,
        settings: Settings,
        api_key: Optional[str] = None,
        grader: Optional[EssayGrader] = None,
    ):
        self.settings = settings
        configure_logging(settings.logging.level, settings.logging.use_json, settings.logging.file)

        self.question_store = JsonlQuestionStore(settings.paths.question_sets_dir)
        self.progress_tracker = ProgressTracker(settings.paths.profiles_dir)

        if grader is None:
            try:
                grader = LLMEssayGrader(LLMClient(settings.model, api_key=api_key))
            except RuntimeError as exc:
                logger.warning("Essay grading disabled: %s", exc)
        self.grader = grader
        self.aggregator = ScoreAggregator(self.grader, settings.scoring)

    @classmethod
    def from_config(
        cls,
        config_path: Optional[Path] = None,
        api_key: Optional[str] = None,
        grader: Optional[EssayGrader] = None,
    ) -> "AssessmentSystem":
        return cls(load_settings(config_path), api_key=api_key, grader=grader)

    def preview_import(self, text: str) -> ImportReport:
        """Parse pasted text and review it without saving anything."""
        expected = count_question_markers(text)
        questions = parse_questions_from_text(text)
        return ImportReport(
            expected_count=expected,
            questions=questions,
            issues=review_question_set(questions, expected_count=expected),
        )

    def import_questions(
        self,
        text: str,
        level: int,
        variant: Variant | str,
        replace: bool = False,
        allow_incomplete: bool = False,
    ) -> ImportReport:
        """
        Parse pasted text and store it as the question set for (level, variant).

        Nothing is saved when the review finds errors unless `allow_incomplete` is set.
        """
        report = self.preview_import(text)
        report.set_id = question_set_id(level, variant)
        if not report.questions:
            logger.warning("No questions could be parsed for %s", report.set_id)
            return report
        if not report.test_ready and not allow_incomplete:
            logger.warning("Not saving %s: %d review issue(s)", report.set_id, len(report.issues))
            return report

        if replace:
            self.question_store.save_questions(report.set_id, report.questions)
            report.questions = self.question_store.load(report.set_id)
        else:
            report.questions = self.question_store.append_questions(report.set_id, report.questions)
        report.saved = True
        return report

    def start_session(
        self,
        student_id: str,
        skill: Optional[str] = None,
        default_level: int = 1,
    ) -> AssessmentSession:
        """Create a session positioned at the student's stored ladder state."""
        state = self.progress_tracker.load_state(student_id, default_level=default_level)
        return AssessmentSession(
            student_id=student_id,
            state=state,
            question_store=self.question_store,
            aggregator=self.aggregator,
            profile_store=self.progress_tracker,
            skill=skill,
        )
