"""Quiz endpoints: generate an attempt, submit answers, read an attempt."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.auth.dependencies import get_current_user
from microlearn.database import get_session
from microlearn.db.models import User
from microlearn.dependencies import get_oracle
from microlearn.oracle.base import Oracle
from microlearn.quiz.schemas import (
    AttemptResponse,
    GenerateQuizRequest,
    GenerateQuizResponse,
    SubmitQuizRequest,
    SubmitQuizResponse,
)
from microlearn.quiz.service import QuizCoordinator

router = APIRouter(prefix="/api/v1/quiz", tags=["Quiz"])


@router.post("/generate", response_model=GenerateQuizResponse)
async def generate_quiz(
    body: GenerateQuizRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    oracle: Oracle = Depends(get_oracle),
) -> GenerateQuizResponse:
    """Create a quiz attempt for a content node."""
    user_id = user.id
    attempt = await QuizCoordinator(db, oracle).generate(str(body.content_node_id), user_id)
    return GenerateQuizResponse(attempt_id=attempt.id, questions=attempt.questions)


@router.post("/submit", response_model=SubmitQuizResponse)
async def submit_quiz(
    body: SubmitQuizRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    oracle: Oracle = Depends(get_oracle),
) -> SubmitQuizResponse:
    """Score an attempt. 409 already_scored on resubmission."""
    user_id = user.id
    scored = await QuizCoordinator(db, oracle).submit(body.attempt_id, body.user_answers, user_id)
    return SubmitQuizResponse(
        attempt_id=scored.attempt_id,
        score=scored.score,
        status=scored.status.value,
        results=scored.results,
    )


@router.get("/attempts/{attempt_id}", response_model=AttemptResponse)
async def get_attempt(
    attempt_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AttemptResponse:
    user_id = user.id
    attempt = await QuizCoordinator(db).get_attempt(attempt_id, user_id)
    return AttemptResponse(
        attempt_id=attempt.id,
        content_node_id=attempt.content_node_id,
        state=attempt.state,
        status=attempt.status,
        score=attempt.score,
        questions=attempt.questions,
        results=attempt.results,
    )
