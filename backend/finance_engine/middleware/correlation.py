# backend/finance_engine/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

For every request the middleware:
1. Takes the correlation ID from X-Correlation-ID, else X-Request-ID,
   else generates a UUID4
2. Stores it in the request context so every log line carries it
3. Echoes it back in the X-Correlation-ID response header

Usage:
    app.add_middleware(CorrelationIdMiddleware)

Client Usage:
    curl -H "X-Correlation-ID: trace-123" http://localhost:8000/currencies
    # X-Correlation-ID: trace-123
"""

import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from finance_engine.utils.context import reset_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Longer inbound IDs are replaced rather than logged
MAX_CORRELATION_ID_LENGTH = 128


def _inbound_correlation_id(request: Request) -> str | None:
    for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
        value = request.headers.get(header, "").strip()
        if value and len(value) <= MAX_CORRELATION_ID_LENGTH:
            return value
    return None


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to the request context for the request's lifetime."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = _inbound_correlation_id(request) or str(uuid.uuid4())
        token = set_correlation_id(correlation_id)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            reset_correlation_id(token)
