"""Quiz attempt coordinator.

Owns the attempt lifecycle and talks to the quiz oracle. No database
transaction is held open across an oracle call; the scoring commit is a
single guarded UPDATE on the attempt row, keyed by its version, so two
concurrent submissions cannot both write a score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import AttemptState, AttemptStatus, ContentNode, QuizAttempt
from microlearn.errors import AlreadyScored, Forbidden, InternalFault, MicrolearnError, NoSourceText, NotFound
from microlearn.oracle.base import Oracle
from microlearn.quiz.state_machine import mastery_status, validate_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredAttempt:
    attempt_id: str
    score: float
    status: AttemptStatus
    results: list[Any]


class QuizCoordinator:
    """Quiz generation, submission and scoring."""

    def __init__(self, db: AsyncSession, oracle: Oracle | None = None) -> None:
        self.db = db
        self._oracle = oracle

    @property
    def oracle(self) -> Oracle:
        if self._oracle is None:
            msg = "QuizCoordinator was built without an oracle"
            raise RuntimeError(msg)
        return self._oracle

    async def generate(self, content_node_id: str, user_id: int) -> QuizAttempt:
        """Build a question set from the node's source text and persist it as CREATED."""
        node = await self.db.get(ContentNode, content_node_id)
        if node is None:
            raise NotFound("Content not found.")
        source_text = (node.transcript or "").strip()
        if not source_text:
            raise NoSourceText()

        await self.db.commit()
        questions = await self.oracle.generate_quiz(source_text)

        attempt = QuizAttempt(
            user_id=user_id,
            content_node_id=content_node_id,
            questions=questions,
            state=AttemptState.CREATED.value,
        )
        try:
            self.db.add(attempt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to persist quiz attempt for user %s", user_id)
            raise InternalFault() from e

        logger.info("Quiz attempt %s created (user=%s, %d questions)", attempt.id, user_id, len(questions))
        return attempt

    async def get_attempt(self, attempt_id: str, user_id: int) -> QuizAttempt:
        """Owner-only read. Unknown and foreign attempts are indistinguishable."""
        attempt = await self._load(attempt_id)
        if attempt is None or attempt.user_id != user_id:
            raise Forbidden()
        return attempt

    async def submit(self, attempt_id: str, user_answers: Any, requesting_user_id: int) -> ScoredAttempt:
        """Score an attempt and commit the outcome.

        Raises Forbidden for attempts the caller does not own, AlreadyScored
        when the attempt is (or concurrently became) SCORED, and
        OracleUnavailable when scoring failed; in that last case nothing has
        been written and the attempt keeps its state.
        """
        attempt = await self.get_attempt(attempt_id, requesting_user_id)
        state = AttemptState(attempt.state)
        if state is not AttemptState.SUBMITTED:
            # Raises AlreadyScored before the oracle is ever called.
            validate_transition(state, AttemptState.SUBMITTED)
            state = AttemptState.SUBMITTED
        questions = attempt.questions
        version = attempt.version

        # Release the read snapshot before the remote call.
        await self.db.commit()

        evaluation = await self.oracle.evaluate_quiz(questions, user_answers)
        validate_transition(state, AttemptState.SCORED)
        status = mastery_status(evaluation.score)

        try:
            result = await self.db.execute(
                update(QuizAttempt)
                .where(
                    QuizAttempt.id == attempt_id,
                    QuizAttempt.version == version,
                    QuizAttempt.state != AttemptState.SCORED.value,
                )
                .values(
                    state=AttemptState.SCORED.value,
                    status=status.value,
                    score=evaluation.score,
                    user_answers=user_answers,
                    results=evaluation.results,
                    version=version + 1,
                    scored_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise AlreadyScored()
            await self.db.commit()
        except MicrolearnError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to commit score for attempt %s", attempt_id)
            raise InternalFault() from e

        logger.info(
            "Quiz attempt %s scored %.3f -> %s (user=%s)",
            attempt_id, evaluation.score, status.value, requesting_user_id,
        )
        return ScoredAttempt(
            attempt_id=attempt_id,
            score=evaluation.score,
            status=status,
            results=evaluation.results,
        )

    async def _load(self, attempt_id: str) -> QuizAttempt | None:
        result = await self.db.execute(
            select(QuizAttempt)
            .where(QuizAttempt.id == attempt_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
