"""Hint-credit ledger: atomic debit-if-available and idempotent grants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import ContentNode, NodeType, PaymentEvent, SubscriptionTier, User
from microlearn.errors import HintUnavailable, InsufficientCredits, InternalFault, MicrolearnError, NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HintDebit:
    """Result of a successful debit."""

    hint: Any
    remaining_credits: int


class CreditLedger:
    """The only writer of ``users.hint_credits``.

    Each public method is one transaction on the given session: it either
    commits everything it did or rolls everything back.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def debit_hint_credit(self, user_id: int, content_node_id: str) -> HintDebit:
        """Spend one credit and reveal the hint of a QUIZ node.

        The guarded UPDATE locks only this user's row; a concurrent debit for
        the same user waits for it and then re-checks ``hint_credits > 0``
        against the committed value, so two callers can never both spend the
        last credit. The hint lookup runs in the same transaction, so a
        missing hint rolls the decrement back.
        """
        try:
            result = await self.db.execute(
                update(User)
                .where(User.id == user_id, User.hint_credits > 0)
                .values(hint_credits=User.hint_credits - 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InsufficientCredits()

            node = await self.db.get(ContentNode, content_node_id)
            hint = _extract_hint(node)
            if hint is None:
                raise HintUnavailable()

            remaining = (
                await self.db.execute(select(User.hint_credits).where(User.id == user_id))
            ).scalar_one()
            await self.db.commit()
        except MicrolearnError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Hint debit failed for user %s", user_id)
            raise InternalFault() from e

        logger.info("Hint credit debited user=%s node=%s remaining=%d", user_id, content_node_id, remaining)
        return HintDebit(hint=hint, remaining_credits=remaining)

    async def grant_credits(
        self,
        user_id: int,
        amount: int,
        idempotency_key: str,
        event_type: str,
        tier: SubscriptionTier | None = None,
    ) -> bool:
        """Credit a user once per ``idempotency_key``. Returns False on replay.

        Raises NotFound when the user does not exist.

        The replay-ledger row and the increment commit together; a concurrent
        replay loses on the unique constraint and rolls back its increment.
        """
        existing = await self.db.execute(
            select(PaymentEvent.id).where(PaymentEvent.provider_event_id == idempotency_key)
        )
        if existing.scalar_one_or_none() is not None:
            await self.db.rollback()
            return False

        values: dict[str, Any] = {"hint_credits": User.hint_credits + amount}
        if tier is not None:
            values["subscription_tier"] = tier.value

        try:
            result = await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise NotFound("User not found")
            self.db.add(PaymentEvent(
                provider_event_id=idempotency_key,
                user_id=user_id,
                event_type=event_type,
                credits_granted=amount,
            ))
            await self.db.commit()
        except MicrolearnError:
            await self.db.rollback()
            raise
        except IntegrityError:
            await self.db.rollback()
            return False
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Credit grant failed for user %s", user_id)
            raise InternalFault() from e

        logger.info("Granted %d hint credits to user=%s (key=%s)", amount, user_id, idempotency_key)
        return True


def _extract_hint(node: ContentNode | None) -> Any:
    """Return the hint payload of a QUIZ node, or None when there is none."""
    if node is None or node.node_type != NodeType.QUIZ.value:
        return None
    payload = node.content_json or {}
    if not isinstance(payload, dict):
        return None
    return payload.get("hint") or None
