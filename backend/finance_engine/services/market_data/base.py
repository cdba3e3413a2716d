# backend/finance_engine/services/market_data/base.py
"""
Abstract interface for exchange rate providers.

The engine treats the rate source as an external collaborator that may be
unavailable at any time. Using an abstract base class allows for:
- Swapping the live provider for the static reference table by config
- Deterministic fakes in tests
- Consistent retry behavior across all providers

Providers return raw observations. Caching, staleness and fallback policy
belong to ExchangeRateService, never to a provider.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, TypeVar

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from finance_engine.services.exceptions import RateProviderError

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class RateQuote:
    """
    Latest rate for a pair as reported by a provider.

    Attributes:
        from_currency: Base currency (1 unit of this...)
        to_currency: Quote currency (...buys `rate` of this)
        rate: Positive exchange rate
        timestamp: When the provider observed the rate
    """

    from_currency: str
    to_currency: str
    rate: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")


@dataclass(frozen=True)
class RateObservation:
    """Closing rate for one calendar day."""

    date: date
    rate: Decimal

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class RateProvider(ABC):
    """
    Abstract base class for exchange rate providers.

    Retry Behavior:
        `_execute_with_retry` retries RateProviderError (transient: network,
        timeouts, upstream throttling) with exponential backoff. Subclasses
        tune it with class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Non-Retryable:
        - RateNotFoundError: the provider has no data for the pair
    """

    # Label stamped on rates this provider produced
    SOURCE: str = "api"

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: float = 1
    RETRY_MAX_WAIT: float = 10
    RETRY_MULTIPLIER: float = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier used in logs, errors and rate sources."""

    @abstractmethod
    def fetch_rate(self, from_currency: str, to_currency: str) -> RateQuote:
        """
        Fetch the latest rate for a pair.

        Raises:
            RateNotFoundError: Pair not available from this provider
            RateProviderError: Transient failure (retryable)
        """

    @abstractmethod
    def fetch_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> list[RateObservation]:
        """
        Fetch daily closing rates between two dates (inclusive).

        Returns observations sorted by ascending date. Days without data
        (weekends, holidays, provider gaps) are simply absent.
        """

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Returns:
            Return value of func

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type(RateProviderError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()

    def is_available(self) -> bool:
        """Health hint; providers with a circuit breaker override this."""
        return True
