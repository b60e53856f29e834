"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from microlearn.config import get_settings
from microlearn.content.router import router as content_router
from microlearn.database import close_db, init_db
from microlearn.health.router import router as health_router
from microlearn.interactions.router import router as interactions_router
from microlearn.ledger.router import router as hints_router
from microlearn.middleware import setup_middleware
from microlearn.payments.router import router as payments_router
from microlearn.quiz.router import router as quiz_router
from microlearn.redis_client import close_redis, init_redis
from microlearn.reports.router import router as reports_router
from microlearn.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Micro-Learning Core API",
        description="Hint credits, quiz scoring, interaction ingestion and learner reports",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(content_router)
    app.include_router(hints_router)
    app.include_router(quiz_router)
    app.include_router(interactions_router)
    app.include_router(reports_router)
    app.include_router(payments_router)

    return app


app = create_app()
