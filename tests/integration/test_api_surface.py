"""Health probes, middleware and authentication at the HTTP boundary."""

from __future__ import annotations

import jwt
import pytest
from httpx import AsyncClient

from conftest import auth_headers
from microlearn.config import get_settings


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness(self, client: AsyncClient) -> None:
        response = await client.get("/ready")
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": "ok", "redis": "ok"}
        assert data["interaction_backlog"] == 0

    @pytest.mark.asyncio
    async def test_readiness_degraded_without_redis(self, client: AsyncClient, mock_redis) -> None:
        mock_redis.ping.side_effect = OSError("connection refused")
        data = (await client.get("/ready")).json()
        assert data["status"] == "degraded"
        assert data["checks"]["database"] == "ok"
        assert data["checks"]["redis"].startswith("error:")
        assert data["interaction_backlog"] is None

    @pytest.mark.asyncio
    async def test_version(self, client: AsyncClient) -> None:
        data = (await client.get("/version")).json()
        assert data["service"] == "microlearn-core"
        assert data["version"] == "0.1.0"
        assert "environment" in data


class TestMiddleware:
    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert len(response.headers["x-request-id"]) == 36

    @pytest.mark.asyncio
    async def test_request_id_preserved(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
        assert response.headers["x-request-id"] == "test-abc-123"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestAuthentication:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/api/v1/users/me"),
            ("GET", "/api/v1/reports"),
            ("GET", "/api/v1/content/next"),
            ("POST", "/api/v1/hints/use"),
            ("POST", "/api/v1/quiz/submit"),
        ],
    )
    async def test_missing_token_is_401(self, client: AsyncClient, method, path) -> None:
        response = await client.request(method, path, json={})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret_is_401(self, client: AsyncClient, make_user) -> None:
        user = await make_user()
        settings = get_settings()
        forged = jwt.encode(
            {"sub": str(user.id), "type": "access", "iss": settings.jwt_issuer},
            "some-other-secret-that-is-long-enough",
            algorithm="HS256",
        )
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user_is_401(self, client: AsyncClient, database) -> None:
        response = await client.get("/api/v1/users/me", headers=auth_headers(987654))
        assert response.status_code == 401
