# =============================================================================
# HTTP Middleware — Access Log, Security Headers, Error Envelope
# =============================================================================
#
#   RequestLoggingMiddleware   one INFO line per request:
#                              "POST /api/evaluation → 201 (1834 ms, client=…)"
#   SecurityHeadersMiddleware  conservative browser-hardening headers on
#                              every response
#   UnhandledErrorMiddleware   turns any exception that escaped the routes
#                              into the 500 error envelope
#
# UnhandledErrorMiddleware is mounted innermost, so the outer layers (CORS,
# security headers, access log) see every 500 as an ordinary response.
# Starlette would otherwise hand a stray exception to ServerErrorMiddleware,
# which sits outside all of them.
# =============================================================================

from __future__ import annotations

import logging
import time

from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import Response

from app.api.errors import unhandled_exception_handler

logger = logging.getLogger(__name__)

# Polled constantly by load balancers / browsed by humans; not worth a line
_QUIET_PATHS = {"/api/health", "/docs", "/redoc", "/openapi.json"}

# Swagger UI at /docs loads scripts and styles from a CDN, so no CSP here
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        started = time.monotonic()
        response = await call_next(request)

        logger.info(
            "%s %s → %d (%d ms, client=%s)",
            request.method,
            request.url.path,
            response.status_code,
            int((time.monotonic() - started) * 1000),
            request.client.host if request.client else None,
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds SECURITY_HEADERS unless the route already set them."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)
