# backend/finance_engine/utils/logging.py
"""
Logging configuration for the Personal Finance Engine.

Centralized logging setup:
- Level from settings (LOG_LEVEL), overridable per call
- Correlation ID on every record, taken from the request context
- Text output for development, JSON for log aggregation (LOG_FORMAT)
- Chatty third-party loggers (yfinance and its HTTP stack) held at WARNING

Usage:
    from finance_engine.utils import setup_logging

    # In main.py, before creating the FastAPI app
    setup_logging()

Log Levels:
    DEBUG   - Cache hits, coalesced fetches, skipped records
    INFO    - Provider fetches, cache refreshes, startup
    WARNING - Stale rates served, unconverted amounts, retries
    ERROR   - Rates unavailable, unexpected exceptions
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from finance_engine.config import settings
from finance_engine.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

# Third-party loggers held at WARNING
NOISY_LOGGERS = [
    "yfinance",
    "peewee",
    "urllib3",
    "urllib3.connectionpool",
    "curl_cffi",
    "httpx",
    "httpcore",
    "asyncio",
]

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Attributes every LogRecord has; anything else came in through `extra=`
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "correlation_id",
    "message",
    "taskName",
}


# =============================================================================
# CORRELATION ID FILTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """
    Stamps `correlation_id` onto every record passing through the handler.

    Format strings can then use %(correlation_id)s.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for log aggregation.

    {
        "timestamp": "2024-01-15T10:30:00.123000+00:00",
        "level": "WARNING",
        "logger": "finance_engine.services.currency.rate_service",
        "correlation_id": "abc-123-def",
        "message": "Serving stale EUR/USD rate ...",
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)
        if extra:
            entry["extra"] = extra

        return json.dumps(entry)


# =============================================================================
# SETUP
# =============================================================================

def _get_log_level(level_str: str) -> int:
    """
    Map a level name to its logging constant.

    Raises:
        ValueError: If the name is not a known level
    """
    key = level_str.upper().strip()
    if key not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. Valid levels are: {', '.join(LOG_LEVELS)}"
        )
    return LOG_LEVELS[key]


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger once at startup.

    Args:
        level: Log level name; defaults to settings.log_level
        log_format: 'text' or 'json'; defaults to settings.log_format
        suppress_noisy_loggers: Hold NOISY_LOGGERS at WARNING

    Example:
        setup_logging(level="DEBUG")           # development
        setup_logging(log_format="json")       # production
    """
    level_name = level or settings.log_level
    log_level = _get_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    if suppress_noisy_loggers:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}",
        extra={"config": {"level": level_name, "format": format_type}},
    )


def get_logger(name: str) -> logging.Logger:
    """Standard logger; the correlation ID is added by the handler filter."""
    return logging.getLogger(name)
