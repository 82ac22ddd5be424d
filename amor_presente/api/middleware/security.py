"""
Security middleware.

Provides:
- Security headers
- Request ID tracking
- Rate limiting by IP
"""

import secrets
import time
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from amor_presente.config import get_settings

logger = structlog.get_logger()

RATE_LIMIT_EXEMPT_PATHS = {"/health", "/ready", "/live", "/metrics"}


# =============================================================================
# Security Headers
# =============================================================================


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if response.headers.get("content-type", "").startswith("text/html"):
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "img-src 'self' data: https:; "
                "frame-ancestors 'none';"
            )

        return response


# =============================================================================
# Request ID Tracking
# =============================================================================


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echoed back in `X-Request-ID`."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or secrets.token_hex(8)
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers["X-Request-ID"] = request_id
        return response


# =============================================================================
# Rate Limiting by IP
# =============================================================================


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding-window rate limiting by client IP.

    State is per process; run behind a single worker or accept per-worker limits.
    """

    def __init__(
        self,
        app: ASGIApp,
        requests_per_minute: int = 120,
        burst_limit: int = 20,
    ):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.burst_limit = burst_limit
        self._requests: dict[str, list[float]] = {}

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _is_rate_limited(self, client_ip: str, now: float | None = None) -> tuple[bool, int]:
        now = time.time() if now is None else now
        window_start = now - 60

        history = [t for t in self._requests.get(client_ip, []) if t > window_start]
        self._requests[client_ip] = history

        recent = sum(1 for t in history if t > now - 1)
        if recent >= self.burst_limit:
            return True, 1

        if len(history) >= self.requests_per_minute:
            retry_after = int(min(history) + 60 - now) + 1
            return True, retry_after

        history.append(now)
        return False, 0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Stripe retries webhooks on its own schedule.
        if request.url.path in RATE_LIMIT_EXEMPT_PATHS or request.url.path.endswith("/checkout/webhook"):
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        is_limited, retry_after = self._is_rate_limited(client_ip)

        if is_limited:
            logger.warning(
                "Rate limit exceeded",
                client_ip=client_ip,
                path=request.url.path,
                retry_after=retry_after,
            )
            return Response(
                content='{"detail": "Rate limit exceeded", "code": "http.429"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)


# =============================================================================
# CORS
# =============================================================================


def get_cors_origins() -> list[str]:
    """Configured origins; outside production, local dev servers too."""
    settings = get_settings()
    origins = list(settings.cors_origins)
    if settings.web_app_url and settings.web_app_url.rstrip("/") not in origins:
        origins.append(settings.web_app_url.rstrip("/"))

    if settings.environment == "production":
        return origins

    dev_origins = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://localhost:8081",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
        "http://127.0.0.1:8081",
    ]
    return sorted(set(origins + dev_origins))
