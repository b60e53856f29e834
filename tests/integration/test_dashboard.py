"""Integration tests for the learner dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from conftest import auth_headers
from microlearn.db.models import LearnerProfile, NodeType, SubscriptionTier, UserInteraction


class TestDashboard:
    @pytest.mark.asyncio
    async def test_profile_and_balance(self, client: AsyncClient, make_user):
        user = await make_user(credits=4, tier=SubscriptionTier.PREMIUM, name="Grace")
        response = await client.get("/api/v1/users/me", headers=auth_headers(user.id))

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Grace"
        assert body["subscription_tier"] == "PREMIUM"
        assert body["hint_credits"] == 4
        assert body["learner_profile"] is None
        assert body["recent_interactions"] == []

    @pytest.mark.asyncio
    async def test_five_most_recent_interactions_with_titles(
        self, client: AsyncClient, db_session, make_user, make_content
    ):
        user = await make_user()
        node = await make_content(NodeType.VIDEO, title="Cell walls")
        base = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
        for i in range(6):
            db_session.add(UserInteraction(
                event_id=f"evt-{i}",
                user_id=user.id,
                # The newest event points at a node that no longer exists.
                content_node_id=node.id if i < 5 else "9f9f9f9f-0000-4000-8000-000000000000",
                interaction_type="VIDEO_STARTED",
                data={},
                timestamp=base + timedelta(minutes=i),
            ))
        await db_session.commit()

        body = (await client.get("/api/v1/users/me", headers=auth_headers(user.id))).json()
        recent = body["recent_interactions"]

        assert [r["event_id"] for r in recent] == ["evt-5", "evt-4", "evt-3", "evt-2", "evt-1"]
        assert recent[0]["content_title"] is None
        assert all(r["content_title"] == "Cell walls" for r in recent[1:])

    @pytest.mark.asyncio
    async def test_includes_learner_profile(self, client: AsyncClient, db_session, make_user):
        user = await make_user()
        db_session.add(LearnerProfile(
            user_id=user.id, engagement_score=0.82, competence_map={"biology": 0.7, "algebra": 0.35}
        ))
        await db_session.commit()

        body = (await client.get("/api/v1/users/me", headers=auth_headers(user.id))).json()

        assert body["learner_profile"] == {
            "engagement_score": 0.82,
            "competence_map": {"biology": 0.7, "algebra": 0.35},
        }


class TestLearnerProfile:
    @pytest.mark.asyncio
    async def test_profile_with_identity(self, client: AsyncClient, db_session, make_user):
        user = await make_user(name="Grace")
        db_session.add(LearnerProfile(user_id=user.id, engagement_score=0.5, competence_map={"physics": 0.9}))
        await db_session.commit()

        response = await client.get("/api/v1/users/me/profile", headers=auth_headers(user.id))

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Grace"
        assert body["email"] == user.email
        assert body["engagement_score"] == 0.5
        assert body["competence_map"] == {"physics": 0.9}
        assert "updated_at" in body

    @pytest.mark.asyncio
    async def test_missing_profile_is_404(self, client: AsyncClient, make_user):
        user = await make_user()
        response = await client.get("/api/v1/users/me/profile", headers=auth_headers(user.id))

        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "Profile not found."}

    @pytest.mark.asyncio
    async def test_other_learners_profile_is_not_returned(self, client: AsyncClient, db_session, make_user):
        owner = await make_user()
        other = await make_user()
        db_session.add(LearnerProfile(user_id=owner.id, engagement_score=0.9, competence_map={}))
        await db_session.commit()

        response = await client.get("/api/v1/users/me/profile", headers=auth_headers(other.id))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me/profile")
        assert response.status_code == 401
