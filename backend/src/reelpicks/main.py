"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from reelpicks.adapters.inbound.rest import (
    health_router,
    providers_router,
    recommendations_router,
)
from reelpicks.config import Settings, get_settings
from reelpicks.dependencies import close_adapters
from reelpicks.shared.errors import register_exception_handlers
from reelpicks.shared.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    RequestIdMiddleware,
)
from reelpicks.shared.observability import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — startup & shutdown hooks."""
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    logger.info(
        "application_starting",
        env=settings.app_env.value,
        backends=[b.name for b in settings.backend_catalog()],
        gemini_configured=bool(settings.gemini_api_key),
        openrouter_configured=bool(settings.openrouter_api_key),
    )

    yield

    await close_adapters()
    logger.info("application_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory — creates a fully configured FastAPI instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.app_debug,
        description=(
            "Movie and series recommendations generated by a pool of AI model "
            "backends with per-backend budgets and automatic failover."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Store settings in app state for lifecycle access
    app.state.settings = settings

    # ── Middleware (order matters: first added = outermost) ───
    cors_origins = settings.cors_origins
    allow_all_origins = "*" in cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all_origins else cors_origins,
        allow_origin_regex=".*" if allow_all_origins else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── REST routers (versioned) ─────────────────────────────
    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    app.include_router(recommendations_router, prefix=api_v1)
    app.include_router(providers_router, prefix=api_v1)

    return app


# Uvicorn entry-point
app = create_app()
