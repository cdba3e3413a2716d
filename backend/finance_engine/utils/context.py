# backend/finance_engine/utils/context.py
"""
Request context for the Personal Finance Engine.

Holds the correlation ID of the request being served. contextvars keep
the value per request under both async handlers and the threadpool that
runs sync endpoints.

Usage:
    from finance_engine.utils.context import get_correlation_id, set_correlation_id

    # In middleware
    token = set_correlation_id("abc-123")
    ...
    reset_correlation_id(token)

    # Anywhere while the request is served
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """
    Set the correlation ID for the current request.

    Returns:
        Token for reset_correlation_id()
    """
    return _correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    """Restore the value that was current before the matching set."""
    _correlation_id_var.reset(token)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)
