"""Quiz attempt state machine.

State progression: CREATED -> SUBMITTED -> SCORED
SCORED is terminal. Transitions are validated: no skipping backwards,
nothing leaves SCORED.
"""

from __future__ import annotations

from microlearn.db.models import AttemptState, AttemptStatus
from microlearn.errors import AlreadyScored

MASTERY_THRESHOLD = 0.8

VALID_TRANSITIONS: dict[AttemptState, list[AttemptState]] = {
    AttemptState.CREATED: [AttemptState.SUBMITTED],
    AttemptState.SUBMITTED: [AttemptState.SCORED],
    AttemptState.SCORED: [],
}


class InvalidTransition(ValueError):
    pass


def validate_transition(current: AttemptState, target: AttemptState) -> None:
    """Validate a state transition.

    Raises AlreadyScored for any transition out of SCORED and
    InvalidTransition for every other illegal move.
    """
    if current is AttemptState.SCORED:
        raise AlreadyScored()
    valid = VALID_TRANSITIONS.get(current, [])
    if target not in valid:
        raise InvalidTransition(
            f"Invalid transition: {current.value} -> {target.value}. "
            f"Valid transitions: {[s.value for s in valid]}"
        )


def mastery_status(score: float) -> AttemptStatus:
    """PASSED at or above the mastery threshold, FAILED below it."""
    return AttemptStatus.PASSED if score >= MASTERY_THRESHOLD else AttemptStatus.FAILED
