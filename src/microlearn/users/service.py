"""Dashboard read model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.db.models import ContentNode, LearnerProfile, User, UserInteraction
from microlearn.errors import NotFound, Unauthenticated

RECENT_INTERACTIONS_LIMIT = 5


async def get_dashboard(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Identity, tier, credit balance, learner profile and the most recent interactions.

    Interactions whose content node no longer exists are still listed, with
    a null title.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise Unauthenticated()

    result = await db.execute(
        select(UserInteraction, ContentNode.title)
        .outerjoin(ContentNode, ContentNode.id == UserInteraction.content_node_id)
        .where(UserInteraction.user_id == user_id)
        .order_by(UserInteraction.timestamp.desc(), UserInteraction.id.desc())
        .limit(RECENT_INTERACTIONS_LIMIT)
    )
    recent = [
        {
            "event_id": interaction.event_id,
            "content_node_id": interaction.content_node_id,
            "content_title": title,
            "interaction_type": interaction.interaction_type,
            "timestamp": interaction.timestamp,
        }
        for interaction, title in result.all()
    ]

    profile = await _load_profile(db, user_id)

    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "subscription_tier": user.subscription_tier,
        "hint_credits": user.hint_credits,
        "learner_profile": (
            {"engagement_score": profile.engagement_score, "competence_map": profile.competence_map}
            if profile is not None
            else None
        ),
        "recent_interactions": recent,
    }


async def get_learner_profile(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """The learner profile with the owner's name and email. NotFound until one exists."""
    result = await db.execute(
        select(LearnerProfile, User.name, User.email)
        .join(User, User.id == LearnerProfile.user_id)
        .where(LearnerProfile.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Profile not found.")
    profile, name, email = row
    return {
        "name": name,
        "email": email,
        "engagement_score": profile.engagement_score,
        "competence_map": profile.competence_map,
        "updated_at": profile.updated_at,
    }


async def _load_profile(db: AsyncSession, user_id: int) -> LearnerProfile | None:
    result = await db.execute(select(LearnerProfile).where(LearnerProfile.user_id == user_id))
    return result.scalar_one_or_none()
