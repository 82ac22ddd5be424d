"""
Amor&Presente API - FastAPI Application

Backend for the gift registry and event site builder:
- Creator accounts (Supabase Auth) with admin approval
- Sites with themes, countdowns and curated gift lists
- Guest RSVPs and Stripe Checkout for gifts
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from amor_presente import __version__
from amor_presente.api.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    get_cors_origins,
)
from amor_presente.api.routes import (
    admin,
    auth,
    checkout,
    guests,
    health,
    layouts,
    products,
    public,
    sites,
    uploads,
)
from amor_presente.config import get_settings
from amor_presente.db.client import close_db, init_db
from amor_presente.kernel.http.errors import register_exception_handlers

_LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _get_log_level() -> int:
    return _LOG_LEVEL_MAP.get(get_settings().log_level.lower(), logging.INFO)


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if get_settings().log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(
        "Starting Amor&Presente API",
        version=__version__,
        environment=settings.environment,
    )
    await init_db()
    logger.info("PostgreSQL connection initialized")

    yield

    logger.info("Shutting down Amor&Presente API")
    await close_db()


app = FastAPI(
    title="Amor&Presente API",
    description="Gift registries and event sites with RSVPs and Stripe checkout",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

settings = get_settings()

# Middleware order: last added runs first.
if settings.environment == "production":
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
        burst_limit=settings.rate_limit_burst,
    )

app.add_middleware(RequestIDMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

register_exception_handlers(app)

metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(guests.router, prefix="/api/v1")
app.include_router(layouts.router, prefix="/api/v1")
app.include_router(sites.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(public.router, prefix="/api/v1")
app.include_router(checkout.router, prefix="/api/v1")
app.include_router(uploads.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Amor&Presente API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
    }
