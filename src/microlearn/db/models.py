"""ORM models for the learning core.

Users own every other row through ``user_id``. Content nodes are authored
elsewhere and are read-only here; interactions are append-only.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from microlearn.db.base import Base, BigIntPK, JSONType

FREE_TIER_HINT_CREDITS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


class SubscriptionTier(str, Enum):
    """Subscription tiers, lowest first."""

    FREE = "FREE"
    PREMIUM = "PREMIUM"


class NodeType(str, Enum):
    VIDEO = "VIDEO"
    ARTICLE = "ARTICLE"
    QUIZ = "QUIZ"


class InteractionType(str, Enum):
    """Closed set of interaction events a client may report."""

    VIDEO_STARTED = "VIDEO_STARTED"
    VIDEO_COMPLETED = "VIDEO_COMPLETED"
    ARTICLE_VIEWED = "ARTICLE_VIEWED"
    QUIZ_ATTEMPT = "QUIZ_ATTEMPT"
    HINT_USED = "HINT_USED"


class AttemptState(str, Enum):
    """Quiz attempt lifecycle. SCORED is terminal."""

    CREATED = "CREATED"
    SUBMITTED = "SUBMITTED"
    SCORED = "SCORED"


class AttemptStatus(str, Enum):
    """Mastery outcome recorded when an attempt is scored."""

    PASSED = "PASSED"
    FAILED = "FAILED"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """One authoritative row per learner: tier and hint-credit balance."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("hint_credits >= 0", name="ck_users_hint_credits_non_negative"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    subscription_tier: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SubscriptionTier.FREE.value, server_default=SubscriptionTier.FREE.value
    )
    hint_credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=FREE_TIER_HINT_CREDITS, server_default=str(FREE_TIER_HINT_CREDITS)
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class LearnerProfile(Base):
    """Engagement and per-topic competence, maintained by the personalization engine."""

    __tablename__ = "learner_profiles"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    engagement_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # topic -> competence in [0, 1]
    competence_map: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


# ---------------------------------------------------------------------------
# Content catalog
# ---------------------------------------------------------------------------


class ContentNode(Base):
    """Immutable catalog entry. ``content_json`` shape depends on ``node_type``."""

    __tablename__ = "content_nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    node_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content_json: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_reference: Mapped[str | None] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


class UserInteraction(Base):
    """Append-only interaction event; ``event_id`` is the idempotency key."""

    __tablename__ = "user_interactions"
    __table_args__ = (
        Index("ix_user_interactions_user_created", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content_node_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    interaction_type: Mapped[str] = mapped_column(String(32), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    # Acceptance time, assigned by the ingestion service.
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Persistence time, assigned by the consumer.
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Quiz attempts
# ---------------------------------------------------------------------------


class QuizAttempt(Base):
    """A generated question set for one learner and, once scored, its outcome."""

    __tablename__ = "quiz_attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content_node_id: Mapped[str] = mapped_column(ForeignKey("content_nodes.id"), nullable=False)
    questions: Mapped[list[Any]] = mapped_column(JSONType, nullable=False)
    user_answers: Mapped[Any | None] = mapped_column(JSONType, nullable=True)
    results: Mapped[Any | None] = mapped_column(JSONType, nullable=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default=AttemptState.CREATED.value)
    status: Mapped[str | None] = mapped_column(String(16), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    scored_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class LearnerReport(Base):
    """Report written by the external generator; never mutated here."""

    __tablename__ = "learner_reports"
    __table_args__ = (
        Index("ix_learner_reports_user_generated", "user_id", "generated_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    report_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


class PaymentEvent(Base):
    """Replay ledger for payment webhooks, keyed by the provider's event id."""

    __tablename__ = "payment_events"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    provider_event_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    credits_granted: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
