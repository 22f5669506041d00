"""Security middleware for the statuspage API.

Provides:
- Request ID middleware (X-Request-ID header)
- Security headers middleware (X-Content-Type-Options, etc.)

Per-client rate limiting is done with slowapi on the public routes.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from statuspage.api.version import API_VERSION
from statuspage.core.config import get_settings

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/v1/status/"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add a unique X-Request-ID header to every response.

    If the client sends an X-Request-ID, it is preserved. Otherwise,
    a new UUID4 is generated.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers and API version to every response.

    Public status page reads may be embedded by the project's own site,
    so they are served with SAMEORIGIN framing and a short public cache
    instead of DENY/no-store. Public POSTs (subscriptions) stay no-store.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        response = await call_next(request)
        is_public = request.method in ("GET", "HEAD") and request.url.path.startswith(PUBLIC_PREFIX)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN" if is_public else "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "public, max-age=30" if is_public else "no-store"
        response.headers["X-API-Version"] = API_VERSION
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response
