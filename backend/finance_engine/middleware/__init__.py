# backend/finance_engine/middleware/__init__.py
"""
ASGI middleware for the Personal Finance Engine.

- Correlation ID tracking for request tracing
- Rate limiting (slowapi)

Usage:
    from finance_engine.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from finance_engine.middleware.correlation import CorrelationIdMiddleware
from finance_engine.middleware.rate_limit import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_RATES,
    RATE_LIMIT_REFRESH,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_RATES",
    "RATE_LIMIT_REFRESH",
    "RATE_LIMIT_HEALTH",
]
