"""Report listing and generation trigger."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import LearnerReport, SubscriptionTier, User
from microlearn.errors import Unauthenticated
from microlearn.oracle.base import Oracle
from microlearn.reports.redaction import redact

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_reports(self, user_id: int) -> list[dict[str, Any]]:
        """All of the user's reports, newest first, redacted for their current tier."""
        tier_value = (
            await self.db.execute(select(User.subscription_tier).where(User.id == user_id))
        ).scalar_one_or_none()
        if tier_value is None:
            raise Unauthenticated("User not found")
        tier = _parse_tier(tier_value)

        result = await self.db.execute(
            select(LearnerReport)
            .where(LearnerReport.user_id == user_id)
            .order_by(LearnerReport.generated_at.desc(), LearnerReport.id.desc())
        )
        return [redact(_serialize(report), tier) for report in result.scalars().all()]

    async def trigger_generation(self, user_id: int, oracle: Oracle) -> None:
        """Ask the external generator for a fresh report. Raises OracleUnavailable on failure."""
        await oracle.request_report(user_id)
        logger.info("Report generation requested for user %s", user_id)


def _parse_tier(value: str) -> SubscriptionTier:
    try:
        return SubscriptionTier(value)
    except ValueError:
        # Unknown tiers fail closed to the most restrictive view.
        logger.warning("Unknown subscription tier %r, redacting as FREE", value)
        return SubscriptionTier.FREE


def _serialize(report: LearnerReport) -> dict[str, Any]:
    return {
        "id": report.id,
        "user_id": report.user_id,
        "generated_at": report.generated_at.isoformat() if report.generated_at else None,
        "report_data": report.report_data,
    }
