"""Remediation ladder: variant A -> B -> C, then drop a level.

A struggling student gets two remedial attempts at the same difficulty before
the level is conceded. Level 1 is the floor; failing variant C there resets to
variant A at level 1 and flags the attempt for a teacher instead of demoting.
"""

from __future__ import annotations

from assessment_engine.config.schema import PASSING_THRESHOLD
from assessment_engine.learning.models import AssessmentState, Transition, Variant

MIN_LEVEL = 1

MASTERED_MESSAGE = "Excellent! You have mastered this level."
RETAKE_MESSAGE = f"Score below {PASSING_THRESHOLD}. Redirecting to Variant B (Retake)."
LAST_CHANCE_MESSAGE = f"Score below {PASSING_THRESHOLD}. Redirecting to Variant C (Last Chance)."
DROP_PREFIX = f"Score below {PASSING_THRESHOLD} on Variant C."
DROP_MESSAGE = DROP_PREFIX + " Dropping to Level {level}."
FLOOR_MESSAGE = (
    DROP_PREFIX + " Already at the lowest level. Please contact your teacher for assistance."
)


def transition(state: AssessmentState, passed: bool) -> Transition:
    """Return the next ladder position and message for one finished attempt.

    Passing exits the ladder without changing the state; advancing the
    curriculum on success belongs to the caller.
    """
    if passed:
        return Transition(next_state=state, message=MASTERED_MESSAGE, exits_ladder=True)

    if state.variant is Variant.A:
        return Transition(
            next_state=AssessmentState(level=state.level, variant=Variant.B),
            message=RETAKE_MESSAGE,
        )
    if state.variant is Variant.B:
        return Transition(
            next_state=AssessmentState(level=state.level, variant=Variant.C),
            message=LAST_CHANCE_MESSAGE,
        )

    next_level = max(state.level - 1, MIN_LEVEL)
    next_state = AssessmentState(level=next_level, variant=Variant.A)
    if state.level <= MIN_LEVEL:
        return Transition(next_state=next_state, message=FLOOR_MESSAGE, needs_teacher=True)
    return Transition(next_state=next_state, message=DROP_MESSAGE.format(level=next_level))


def is_floor_terminal(prior: AssessmentState, next_state: AssessmentState, passed: bool) -> bool:
    """True when a failed variant C at the floor level cycled back to variant A."""
    return (
        not passed
        and prior.variant is Variant.C
        and next_state.variant is Variant.A
        and prior.level == next_state.level == MIN_LEVEL
    )
