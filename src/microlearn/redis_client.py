"""Redis connection pool backing the interaction event stream."""

import redis.asyncio as redis

_pool: redis.Redis | None = None


async def init_redis(url: str, *, socket_timeout: float | None = 5.0, max_connections: int = 50) -> None:
    """Initialize the Redis connection pool.

    A bounded socket timeout makes an unreachable queue surface as an error
    on XADD instead of hanging the accepting request.
    """
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool
