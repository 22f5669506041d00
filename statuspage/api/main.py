"""Statuspage FastAPI application entry point.

Configures the FastAPI app with:
- CORS, request-id and security-header middleware
- Lifespan events for database and Redis connections
- Public status routes (rate limited) and the management routes
- Envelope-shaped error handlers
- OpenAPI documentation at /docs (debug mode only)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from statuspage.api.middleware.security import RequestIDMiddleware, SecurityHeadersMiddleware
from statuspage.api.routes import components, health, incidents, projects, subscribers
from statuspage.api.routes import status as status_routes
from statuspage.api.routes.status import limiter
from statuspage.api.version import API_VERSION
from statuspage.core.config import get_settings
from statuspage.core.database import create_engine
from statuspage.core.errors import ConflictError, NotFoundError, PayloadValidationError
from statuspage.core.redis import create_redis_client, verify_redis_connectivity

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown.

    On startup: create the database pool and the Redis client.
    On shutdown: close both.
    """
    settings = get_settings()

    # -- PostgreSQL ---
    engine, session_factory = create_engine(settings)
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    logger.info("PostgreSQL connection pool initialized")

    # -- Redis ---
    redis_client = create_redis_client(settings)
    app.state.redis_client = redis_client
    if await verify_redis_connectivity(redis_client):
        logger.info("Redis connection verified")
    else:
        logger.warning("Redis is not reachable; realtime events will be dropped")

    yield

    # -- Shutdown ---
    await redis_client.aclose()
    await engine.dispose()
    logger.info("All connections closed")


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    errors: list[dict[str, str]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict = {
        "success": False,
        "data": None,
        "message": message,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _field_name(loc: tuple) -> str:
    # Drop the leading "body"/"query"/"path" marker.
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions and framework errors to envelope responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(request, 404, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return _error_response(request, 409, str(exc))

    @app.exception_handler(PayloadValidationError)
    async def payload_error_handler(request: Request, exc: PayloadValidationError) -> JSONResponse:
        errors = [{"field": exc.field, "message": str(exc)}] if exc.field else None
        return _error_response(request, 400, str(exc), errors)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("Validation error [%s]: %s", request_id, exc)
        return _error_response(request, 400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "")} for err in exc.errors()
        ]
        return _error_response(request, 400, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        client = request.client.host if request.client else "unknown"
        logger.info("Rate limit exceeded for %s on %s", client, request.url.path)
        return _error_response(request, 429, f"Rate limit exceeded: {exc.detail}")

    @app.exception_handler(Exception)  # Intentionally broad: top-level global error handler
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled error [%s]: %s", request_id, exc)
        return _error_response(request, 500, "Internal server error")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.getLogger("statuspage").setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description="Public status pages with component status, incident timelines and uptime rollups",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # -- Rate Limiter (slowapi) ---
    app.state.limiter = limiter

    # Middleware is applied in reverse order (last added = first executed).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(health.router)
    app.include_router(status_routes.router)
    app.include_router(projects.router)
    app.include_router(components.router)
    app.include_router(incidents.router)
    app.include_router(subscribers.router)

    register_exception_handlers(app)

    return app


# Application instance used by uvicorn
app = create_app()
