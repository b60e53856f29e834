"""Global error handlers: every failure leaves as ``{"error": kind, "detail": ...}``."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from microlearn.errors import MicrolearnError

logger = structlog.get_logger()

_HTTP_KINDS = {
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(MicrolearnError)
    async def domain_exception_handler(request: Request, exc: MicrolearnError) -> JSONResponse:
        """Map domain errors to their stable kind and status."""
        if exc.status_code >= 500:
            logger.warning("domain_error", kind=exc.kind, path=request.url.path, detail=exc.message)
        else:
            logger.info("domain_rejection", kind=exc.kind, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "detail": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": _HTTP_KINDS.get(exc.status_code, "http_error"), "detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed input is rejected before any mutation happens."""
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "detail": "Validation error",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all: log with traceback, answer with a generic message."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "internal_fault", "detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Strip non-serializable context (e.g. raised exceptions) from pydantic errors."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
