"""CARAMEL API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery); the 404 fallback last
    - The database pool is owned by the app: opened in lifespan startup,
      stored on app.state.db, disposed on shutdown
    - Middleware order (outermost first): proxy headers, security headers,
      CORS, body size limit, rate limit
    - X-Forwarded-For is honoured only from FORWARDED_ALLOW_IPS peers, so the
      rate-limit key cannot be chosen by the caller
    - Global error handlers map CaramelError → structured JSON responses

Design Decisions:
    - create_app() factory: tests build isolated apps (own limiter, own
      settings); the module-level `app` is what uvicorn serves
    - Lifespan over @app.on_event: uvicorn turns SIGTERM into a lifespan
      shutdown, which drains the pool before exit
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from caramel.api.error_handlers import register_error_handlers
from caramel.api.middleware import (
    BodySizeLimitMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware,
)
from caramel.api.routes import (
    catalog, fallback, health, orders, preorders, root,
)
from caramel.api.routes import settings as settings_routes
from caramel.config import Settings, get_settings
from caramel.core.rate_limit import SlidingWindowRateLimiter
from caramel.infrastructure.database import DatabaseSessionManager
from caramel.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(
        settings.log_level, settings.log_format, settings.service_name,
    )
    app.state.db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        idle_timeout_seconds=settings.database_idle_timeout_seconds,
        connect_timeout_seconds=settings.database_connect_timeout_seconds,
        use_ssl=settings.is_production,
    )
    logger.info(
        f"{settings.service_name} running on port {settings.port} "
        f"(environment: {settings.environment}, "
        f"health check: http://localhost:{settings.port}/api/health)",
    )
    try:
        yield
    finally:
        logger.info("Shutting down gracefully...")
        await app.state.db.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = SlidingWindowRateLimiter(
        settings.rate_limit_max_requests,
        settings.rate_limit_window_seconds,
    )

    # add_middleware wraps: the last one added runs first
    app.add_middleware(
        RateLimitMiddleware, limiter=app.state.rate_limiter, path_prefix="/api",
    )
    app.add_middleware(
        BodySizeLimitMiddleware, max_bytes=settings.max_request_body_bytes,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        ProxyHeadersMiddleware,
        trusted_hosts=settings.forwarded_allow_ips,
    )

    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(catalog.router)
    app.include_router(orders.router)
    app.include_router(preorders.router)
    app.include_router(settings_routes.router)
    app.include_router(fallback.router)

    register_error_handlers(app)
    return app


app = create_app()
