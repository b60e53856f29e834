"""Shared test fixtures."""

from __future__ import annotations

import os

os.environ["MICROLEARN_JWT_ALGORITHM"] = "HS256"
os.environ["MICROLEARN_JWT_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["MICROLEARN_LOG_FORMAT"] = "console"
os.environ["MICROLEARN_PAYMENT_WEBHOOK_SECRET"] = "whsec-test"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from microlearn.auth.jwt import create_access_token, reset_keys  # noqa: E402
from microlearn.config import get_settings  # noqa: E402
from microlearn.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from microlearn.db.base import Base  # noqa: E402
from microlearn.db.models import ContentNode, NodeType, SubscriptionTier, User  # noqa: E402
from microlearn.dependencies import get_link_resolver, get_oracle, get_redis_dep  # noqa: E402
from microlearn.main import create_app  # noqa: E402
from microlearn.oracle.fake import FakeLinkResolver, FakeOracle  # noqa: E402

QUIZ_TRANSCRIPT = (
    "The sun is a star. Water boils at one hundred degrees. Plants need light. "
    "Paris is in France. Bees make honey."
)
QUIZ_ANSWERS = ["star", "degrees", "light", "france", "honey"]


@pytest.fixture(autouse=True)
def _fresh_settings() -> Any:
    """Every test sees settings and JWT keys built from the current environment."""
    get_settings.cache_clear()
    reset_keys()
    yield
    get_settings.cache_clear()
    reset_keys()


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[None, None]:
    """File-backed SQLite so concurrent sessions get separate connections."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'microlearn.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
def mock_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.xadd.return_value = "1700000000000-0"
    redis.ping.return_value = True
    redis.xlen.return_value = 0
    return redis


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def fake_resolver() -> FakeLinkResolver:
    return FakeLinkResolver()


@pytest_asyncio.fixture
async def client(
    database: None,
    mock_redis: AsyncMock,
    fake_oracle: FakeOracle,
    fake_resolver: FakeLinkResolver,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with collaborators replaced by in-process fakes."""
    app = create_app()
    app.dependency_overrides[get_redis_dep] = lambda: mock_redis
    app.dependency_overrides[get_oracle] = lambda: fake_oracle
    app.dependency_overrides[get_link_resolver] = lambda: fake_resolver

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    counter = 0

    async def _make(
        *,
        credits: int = 5,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        name: str | None = "Ada Learner",
    ) -> User:
        nonlocal counter
        counter += 1
        user = User(
            email=f"learner{counter}@example.com",
            name=name,
            subscription_tier=tier.value,
            hint_credits=credits,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_content(db_session: AsyncSession) -> Callable[..., Awaitable[ContentNode]]:
    async def _make(
        node_type: NodeType = NodeType.QUIZ,
        *,
        title: str = "Photosynthesis basics",
        content_json: dict[str, Any] | None = None,
        transcript: str | None = None,
        file_reference: str | None = None,
    ) -> ContentNode:
        node = ContentNode(
            title=title,
            node_type=node_type.value,
            content_json=content_json or {},
            transcript=transcript,
            file_reference=file_reference,
        )
        db_session.add(node)
        await db_session.commit()
        return node

    return _make


def auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
