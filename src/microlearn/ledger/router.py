"""Hint endpoints: spend a credit, reveal a hint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.auth.dependencies import get_current_user
from microlearn.database import get_session
from microlearn.db.models import User
from microlearn.ledger.schemas import UseHintRequest, UseHintResponse
from microlearn.ledger.service import CreditLedger

router = APIRouter(prefix="/api/v1/hints", tags=["Hints"])


@router.post("/use", response_model=UseHintResponse)
async def use_hint(
    body: UseHintRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UseHintResponse:
    """Debit one hint credit and return the quiz hint.

    402 insufficient_credits when the balance is exhausted, 404
    hint_unavailable when the node is not a quiz or carries no hint; in both
    cases the balance is unchanged.
    """
    user_id = user.id
    debit = await CreditLedger(db).debit_hint_credit(user_id, str(body.content_node_id))
    return UseHintResponse(hint=debit.hint, remaining_credits=debit.remaining_credits)
