"""Payment webhook handling: signature check and replay-safe crediting.

Only ``payment.captured`` events change state. Each one upgrades the user
to PREMIUM and grants ``premium_hint_credits`` exactly once, keyed by the
provider's event id (falling back to the payment id).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import SubscriptionTier
from microlearn.errors import InvalidSignature, ValidationError
from microlearn.ledger.service import CreditLedger

logger = logging.getLogger(__name__)

PAYMENT_CAPTURED = "payment.captured"


@dataclass(frozen=True)
class WebhookOutcome:
    status: str  # "credited" | "duplicate" | "ignored"


def verify_signature(raw_body: bytes, signature: str | None, secret: str) -> None:
    """HMAC-SHA256 of the raw body must match the provided hex signature."""
    if not secret or not signature:
        raise InvalidSignature()
    # Bytes compare: compare_digest rejects non-ASCII str with TypeError.
    if not hmac.compare_digest(sign(raw_body, secret).encode(), signature.strip().encode()):
        raise InvalidSignature()


def sign(raw_body: bytes, secret: str) -> str:
    """Compute the signature the provider sends for ``raw_body``."""
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def _parse_captured(event: dict[str, Any]) -> tuple[int, str]:
    """Extract (user_id, dedupe key) from a payment.captured event."""
    try:
        entity = event["payload"]["payment"]["entity"]
        user_id = int(entity["notes"]["userId"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError("Malformed payment.captured event") from e
    dedupe_key = event.get("id") or entity.get("id")
    if not dedupe_key:
        raise ValidationError("Payment event carries no identifier")
    return user_id, str(dedupe_key)


async def process_webhook(
    db: AsyncSession,
    raw_body: bytes,
    signature: str | None,
    secret: str,
    credits: int,
) -> WebhookOutcome:
    """Verify and apply one webhook delivery."""
    verify_signature(raw_body, signature, secret)
    try:
        event = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Webhook body is not JSON") from e
    if not isinstance(event, dict):
        raise ValidationError("Webhook body is not a JSON object")

    if event.get("event") != PAYMENT_CAPTURED:
        logger.info("Ignoring payment webhook event %r", event.get("event"))
        return WebhookOutcome(status="ignored")

    user_id, dedupe_key = _parse_captured(event)
    granted = await CreditLedger(db).grant_credits(
        user_id=user_id,
        amount=credits,
        idempotency_key=dedupe_key,
        event_type=PAYMENT_CAPTURED,
        tier=SubscriptionTier.PREMIUM,
    )
    if not granted:
        logger.info("Duplicate payment webhook %s for user %s", dedupe_key, user_id)
        return WebhookOutcome(status="duplicate")
    return WebhookOutcome(status="credited")
