"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from microlearn.config import get_settings
from microlearn.oracle.base import LinkResolver, Oracle
from microlearn.oracle.http import DriveLinkResolver, HttpOracle
from microlearn.redis_client import get_redis as _get_redis


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client as a FastAPI dependency."""
    yield _get_redis()


async def get_oracle() -> AsyncGenerator[Oracle, None]:
    """Yield an HTTP oracle client scoped to the request."""
    settings = get_settings()
    oracle = HttpOracle(
        base_url=settings.oracle_base_url,
        api_key=settings.oracle_api_key,
        timeout=settings.oracle_timeout_seconds,
    )
    try:
        yield oracle
    finally:
        await oracle.aclose()


async def get_link_resolver() -> AsyncGenerator[LinkResolver, None]:
    """Yield the storage link resolver scoped to the request."""
    settings = get_settings()
    resolver = DriveLinkResolver(
        base_url=settings.drive_api_base_url,
        access_token=settings.drive_access_token,
        timeout=settings.oracle_timeout_seconds,
    )
    try:
        yield resolver
    finally:
        await resolver.aclose()
