"""API middleware modules."""

from .security import (
    SecurityHeadersMiddleware,
    RequestIDMiddleware,
    RateLimitMiddleware,
    get_cors_origins,
)

__all__ = [
    "SecurityHeadersMiddleware",
    "RequestIDMiddleware",
    "RateLimitMiddleware",
    "get_cors_origins",
]
