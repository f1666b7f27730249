from __future__ import annotations


class AssessmentError(Exception):
    """Base class for errors raised by the assessment engine."""


class NoContentError(AssessmentError):
    """No questions exist for a (level, variant) pair.

    This is a content-authoring gap rather than a transient fault, so callers
    should report it instead of retrying.
    """

    def __init__(self, level: int, variant: str):
        self.level = level
        self.variant = variant
        super().__init__(f"No content available for Level {level} Variant {variant}.")


class SessionStateError(AssessmentError):
    """Session operation called out of order (submit before begin, double advance)."""


class GradingError(AssessmentError):
    """The external essay grader failed or returned an unusable result."""
