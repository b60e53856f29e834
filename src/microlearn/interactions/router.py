"""Interaction ingestion endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from microlearn.auth.dependencies import get_current_user
from microlearn.config import get_settings
from microlearn.db.models import User
from microlearn.dependencies import get_redis_dep
from microlearn.interactions.schemas import InteractionAccepted, InteractionRequest
from microlearn.interactions.service import InteractionIngestionService

router = APIRouter(prefix="/api/v1/interactions", tags=["Interactions"])


@router.post("", status_code=status.HTTP_202_ACCEPTED, response_model=InteractionAccepted)
async def submit_interaction(
    body: InteractionRequest,
    user: User = Depends(get_current_user),
    redis: object = Depends(get_redis_dep),
) -> InteractionAccepted:
    """Accept an interaction event for asynchronous persistence.

    202 means the event is durably queued and will be stored exactly once.
    503 means it was not queued and the caller should retry.
    """
    settings = get_settings()
    svc = InteractionIngestionService(
        redis,  # type: ignore[arg-type]
        stream=settings.interaction_stream,
    )
    return await svc.submit(user.id, body)
