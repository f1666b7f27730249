from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel

from assessment_engine.learning.models import Question, QuestionKind

MIN_OPTIONS = 2


class ReviewIssue(BaseModel):
    """Problem an author must look at before a question set is published."""

    severity: str  # "error" or "warning"
    message: str
    order: Optional[int] = None


def review_question_set(
    questions: Sequence[Question],
    expected_count: Optional[int] = None,
) -> List[ReviewIssue]:
    """Flag questions that are not ready to be used in a test."""
    issues: List[ReviewIssue] = []
    if expected_count is not None and expected_count != len(questions):
        issues.append(
            ReviewIssue(
                severity="warning",
                message=f"Expected {expected_count} question(s) but parsed {len(questions)}.",
            )
        )
    if not questions:
        issues.append(ReviewIssue(severity="error", message="Question set is empty."))

    for question in questions:
        if not question.prompt.strip():
            issues.append(
                ReviewIssue(severity="error", message="Question text is required.", order=question.order)
            )
        if question.kind is not QuestionKind.MULTIPLE_CHOICE:
            continue
        if len(question.options) < MIN_OPTIONS:
            issues.append(
                ReviewIssue(
                    severity="error",
                    message=f"At least {MIN_OPTIONS} options are required.",
                    order=question.order,
                )
            )
        if any(not option.strip() for option in question.options):
            issues.append(
                ReviewIssue(severity="error", message="Option text is required.", order=question.order)
            )
        if question.correct_option_index is None:
            issues.append(
                ReviewIssue(
                    severity="error",
                    message="No option is marked as the correct answer.",
                    order=question.order,
                )
            )
    return issues


def is_test_ready(issues: Sequence[ReviewIssue]) -> bool:
    return not any(issue.severity == "error" for issue in issues)
