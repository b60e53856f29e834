"""Payment webhook endpoint. Authenticated by signature, not by bearer token."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.config import get_settings
from microlearn.database import get_session
from microlearn.payments.webhook import process_webhook

router = APIRouter(prefix="/api/v1/payments", tags=["Payments"])


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """Replays of the same event answer ``duplicate`` and credit nothing."""
    settings = get_settings()
    raw_body = await request.body()
    outcome = await process_webhook(
        db,
        raw_body,
        x_razorpay_signature,
        secret=settings.payment_webhook_secret,
        credits=settings.premium_hint_credits,
    )
    return {"status": outcome.status}
