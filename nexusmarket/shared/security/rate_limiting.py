"""
Rate limiting configuration and setup.

Uses slowapi to enforce per-endpoint rate limits.
State-changing endpoints (mint, trade requests, responses, top-ups)
get the stricter write limit.
"""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from nexusmarket.core.config import settings

WRITE_RATE_LIMIT = settings.rate_limit_write

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Handle rate limit exceeded errors with a clean JSON response.

    Args:
        _request: The incoming HTTP request.
        exc: The rate limit exceeded exception.

    Returns:
        A 429 JSON response with a clear error message.
    """
    return JSONResponse(
        status_code=429,
        content={"error": "RateLimitExceeded", "detail": str(exc.detail)},
    )
