"""Liveness, readiness and version probes."""

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microlearn.config import get_settings
from microlearn.database import get_session
from microlearn.dependencies import get_redis_dep

router = APIRouter()

SERVICE_NAME = "microlearn-core"


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> dict[str, object]:
    """Ready when the ledger store and the interaction queue both answer.

    ``interaction_backlog`` is the current stream length; informational,
    it never makes the service unready.
    """
    settings = get_settings()
    checks: dict[str, str] = {}
    backlog: int | None = None

    try:
        (await db.execute(text("SELECT 1"))).scalar()
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        checks["database"] = f"error: {exc}"

    try:
        await redis.ping()  # type: ignore[attr-defined]
        backlog = int(await redis.xlen(settings.interaction_stream))  # type: ignore[attr-defined]
        checks["redis"] = "ok"
    except (RedisError, OSError) as exc:
        checks["redis"] = f"error: {exc}"

    ready = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if ready else "degraded",
        "checks": checks,
        "interaction_backlog": backlog,
    }


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {
        "service": SERVICE_NAME,
        "version": settings.app_version,
        "environment": settings.environment,
    }
