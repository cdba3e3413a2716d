# backend/finance_engine/utils/__init__.py
"""
Cross-cutting utilities for the Personal Finance Engine.

- logging: Logging setup with correlation ID support
- context: Request-scoped correlation ID
- date_utils: Calendar helpers (month arithmetic, business days)

Usage:
    from finance_engine.utils import setup_logging, get_logger
    from finance_engine.utils import get_correlation_id, set_correlation_id
    from finance_engine.utils.date_utils import add_months
"""

from finance_engine.utils.context import (
    clear_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from finance_engine.utils.logging import get_logger, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "reset_correlation_id",
    "clear_correlation_id",
]
