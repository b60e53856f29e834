"""Integration tests for content delivery and recommendations."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from conftest import auth_headers
from microlearn.config import get_settings
from microlearn.db.models import NodeType


class TestGetContent:
    @pytest.mark.asyncio
    async def test_video_includes_resolved_links(self, client: AsyncClient, make_user, make_content):
        user = await make_user()
        node = await make_content(NodeType.VIDEO, title="Cell walls", file_reference="drive-file-1")

        response = await client.get(f"/api/v1/content/{node.id}", headers=auth_headers(user.id))

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Cell walls"
        assert body["video_links"] == {
            "download": "https://drive.example/uc?id=drive-file-1&export=download",
            "view": "https://drive.example/file/d/drive-file-1/view",
        }

    @pytest.mark.asyncio
    async def test_resolver_failure_omits_links(
        self, client: AsyncClient, fake_resolver, make_user, make_content
    ):
        user = await make_user()
        node = await make_content(NodeType.VIDEO, file_reference="drive-file-1")
        fake_resolver.unavailable = True

        response = await client.get(f"/api/v1/content/{node.id}", headers=auth_headers(user.id))

        assert response.status_code == 200
        assert "video_links" not in response.json()
        assert response.json()["id"] == node.id

    @pytest.mark.asyncio
    async def test_strict_resolution_surfaces_failure(
        self, client: AsyncClient, fake_resolver, make_user, make_content, monkeypatch
    ):
        monkeypatch.setenv("MICROLEARN_STRICT_LINK_RESOLUTION", "true")
        get_settings.cache_clear()
        user = await make_user()
        node = await make_content(NodeType.VIDEO, file_reference="drive-file-1")
        fake_resolver.unavailable = True

        response = await client.get(f"/api/v1/content/{node.id}", headers=auth_headers(user.id))

        assert response.status_code == 503
        assert response.json()["error"] == "external_dependency_failure"

    @pytest.mark.asyncio
    async def test_article_has_no_links(self, client: AsyncClient, fake_resolver, make_user, make_content):
        user = await make_user()
        node = await make_content(NodeType.ARTICLE, content_json={"body": "Mitochondria..."})

        response = await client.get(f"/api/v1/content/{node.id}", headers=auth_headers(user.id))

        assert response.json()["content_json"] == {"body": "Mitochondria..."}
        assert fake_resolver.calls == []

    @pytest.mark.asyncio
    async def test_unknown_node_is_404(self, client: AsyncClient, make_user):
        user = await make_user()
        response = await client.get(
            "/api/v1/content/7d1b3c2a-0000-4000-8000-000000000001", headers=auth_headers(user.id)
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestNextContent:
    @pytest.mark.asyncio
    async def test_serves_recommended_node(self, client: AsyncClient, fake_oracle, make_user, make_content):
        user = await make_user()
        node = await make_content(NodeType.ARTICLE, title="Next up")
        fake_oracle.recommendation = node.id

        response = await client.get("/api/v1/content/next", headers=auth_headers(user.id))

        assert response.status_code == 200
        assert response.json()["title"] == "Next up"
        assert ("recommend", user.id) in fake_oracle.calls

    @pytest.mark.asyncio
    async def test_no_recommendation_is_404(self, client: AsyncClient, fake_oracle, make_user):
        user = await make_user()
        fake_oracle.recommendation = None
        response = await client.get("/api/v1/content/next", headers=auth_headers(user.id))
        assert response.status_code == 404
        assert response.json()["detail"] == "No recommendation available."

    @pytest.mark.asyncio
    async def test_oracle_down_is_404(self, client: AsyncClient, fake_oracle, make_user):
        user = await make_user()
        fake_oracle.unavailable = True
        response = await client.get("/api/v1/content/next", headers=auth_headers(user.id))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_dangling_recommendation_is_404(self, client: AsyncClient, fake_oracle, make_user):
        user = await make_user()
        fake_oracle.recommendation = "0c5e8a9d-1111-4222-8333-444455556666"
        response = await client.get("/api/v1/content/next", headers=auth_headers(user.id))
        assert response.status_code == 404
        assert response.json()["detail"] == "Recommended content not found."
