"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per marketplace resource, plus health)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Database schema creation at start-up

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from nexusmarket.core.config import settings
from nexusmarket.infrastructure.marketplace.database import init_schema
from nexusmarket.interfaces.health import router as health_router
from nexusmarket.interfaces.marketplace.dependencies import get_db_engine
from nexusmarket.interfaces.marketplace.router import (
    identities_router,
    items_router,
    trade_requests_router,
    transactions_router,
)
from nexusmarket.shared.errors.handlers import register_error_handlers
from nexusmarket.shared.logging import configure_logging
from nexusmarket.shared.security.headers import SecurityHeadersMiddleware
from nexusmarket.shared.security.rate_limiting import (
    limiter,
    rate_limit_exceeded_handler,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: make sure the marketplace tables exist."""
    init_schema(get_db_engine())
    logger.info("%s %s started", settings.project_name, settings.version)
    yield
    get_db_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(identities_router, prefix="/api/v1")
    app.include_router(items_router, prefix="/api/v1")
    app.include_router(trade_requests_router, prefix="/api/v1")
    app.include_router(transactions_router, prefix="/api/v1")

    return app


app = create_app()
