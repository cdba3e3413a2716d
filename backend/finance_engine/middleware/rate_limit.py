# backend/finance_engine/middleware/rate_limit.py
"""
Rate limiting for the HTTP surface.

slowapi limiter keyed by client IP. Limits live in services/constants.py:
- RATE_LIMIT_DEFAULT: pure calculation endpoints
- RATE_LIMIT_RATES: endpoints that may reach the external rate provider
- RATE_LIMIT_REFRESH: cache refresh
- RATE_LIMIT_HEALTH: health checks

Storage is in-memory, which suits a single instance.

Usage:
    @router.get("/exchange-rates")
    @limiter.limit(RATE_LIMIT_RATES)
    def exchange_rates(request: Request):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from finance_engine.config import settings
from finance_engine.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_RATES,
    RATE_LIMIT_REFRESH,
)

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60


def _is_trusted_proxy(request: Request) -> bool:
    """Forwarded headers count only from a configured proxy address."""
    if settings.trust_proxy_headers:
        return True
    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Client address used as the limiter key.

    X-Forwarded-For (first hop) and X-Real-IP are honoured only behind a
    trusted proxy, so clients cannot pick their own bucket.
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return get_remote_address(request)


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=not settings.is_test,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the shared ErrorDetail shape, with Retry-After."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)} on {request.url.path}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_RATES",
    "RATE_LIMIT_REFRESH",
    "RATE_LIMIT_HEALTH",
]
