"""Dashboard and learner profile response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class RecentInteraction(BaseModel):
    event_id: str
    content_node_id: str
    content_title: str | None = None
    interaction_type: str
    timestamp: datetime


class LearnerProfileSummary(BaseModel):
    engagement_score: float
    competence_map: dict[str, Any]


class DashboardResponse(BaseModel):
    id: int
    name: str | None = None
    email: str
    subscription_tier: str
    hint_credits: int
    learner_profile: LearnerProfileSummary | None = None
    recent_interactions: list[RecentInteraction]


class LearnerProfileResponse(LearnerProfileSummary):
    name: str | None = None
    email: str
    updated_at: datetime
