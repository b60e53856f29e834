"""HTTP middleware stack and exception handlers."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from microlearn.config import Settings
from microlearn.middleware.error_handler import setup_error_handlers
from microlearn.middleware.logging import setup_logging
from microlearn.middleware.request_id import RequestContextMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers, request context and CORS.

    The last middleware added is the outermost one. CORS goes last so its
    headers are present on error responses too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    # The learner web app only reads and posts; the payment webhook is
    # server-to-server and never needs CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )
