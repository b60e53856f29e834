"""Unit tests for the quiz attempt state machine and mastery threshold."""

from __future__ import annotations

import pytest

from microlearn.db.models import AttemptState, AttemptStatus
from microlearn.errors import AlreadyScored
from microlearn.quiz.state_machine import (
    MASTERY_THRESHOLD,
    VALID_TRANSITIONS,
    InvalidTransition,
    mastery_status,
    validate_transition,
)


class TestAttemptStateMachine:
    """Attempt transitions."""

    def test_valid_transitions_structure(self):
        assert set(VALID_TRANSITIONS.keys()) == set(AttemptState)

    def test_created_to_submitted(self):
        validate_transition(AttemptState.CREATED, AttemptState.SUBMITTED)

    def test_submitted_to_scored(self):
        validate_transition(AttemptState.SUBMITTED, AttemptState.SCORED)

    def test_scored_is_terminal(self):
        assert VALID_TRANSITIONS[AttemptState.SCORED] == []

    @pytest.mark.parametrize("target", list(AttemptState))
    def test_leaving_scored_is_already_scored(self, target):
        with pytest.raises(AlreadyScored):
            validate_transition(AttemptState.SCORED, target)

    def test_cannot_skip_submission(self):
        with pytest.raises(InvalidTransition, match="Invalid transition"):
            validate_transition(AttemptState.CREATED, AttemptState.SCORED)

    def test_cannot_go_backwards(self):
        with pytest.raises(InvalidTransition, match="Invalid transition"):
            validate_transition(AttemptState.SUBMITTED, AttemptState.CREATED)


class TestMasteryStatus:
    def test_threshold_value(self):
        assert MASTERY_THRESHOLD == 0.8

    def test_exactly_threshold_passes(self):
        assert mastery_status(0.8) is AttemptStatus.PASSED

    def test_four_of_five_passes(self):
        assert mastery_status(4 / 5) is AttemptStatus.PASSED

    def test_just_below_threshold_fails(self):
        assert mastery_status(0.79) is AttemptStatus.FAILED

    def test_bounds(self):
        assert mastery_status(0.0) is AttemptStatus.FAILED
        assert mastery_status(1.0) is AttemptStatus.PASSED
