# backend/finance_engine/services/currency/rate_service.py
"""
Exchange Rate Service: cached rate lookups with a stale fallback.

Rate convention:
    rate = "1 from_currency = X to_currency"
    to_amount = from_amount × rate

Resolution order for get_rate(from, to):
    1. Identity pair       -> rate 1, source "internal" (provider never called)
    2. Fresh cache entry   -> source "cache"
    3. Provider fetch      -> cached, source "api" ("static" for the table)
    4. Provider failure    -> last cached value regardless of age,
                              source "stale-cache"
    5. Nothing cached      -> RateUnavailableError

Design Principles:
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Financial Precision: Uses Decimal for all rates
- Provider and cache are injected, so tests use fakes and a manual clock

Usage:
    service = ExchangeRateService(provider, InMemoryRateCache(ttl_seconds=900))
    rate = service.get_rate("EUR", "USD")
    usd_amount = eur_amount * rate.rate
"""

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Iterator

from finance_engine.services.circuit_breaker import CircuitBreakerOpen
from finance_engine.services.constants import MAX_HISTORY_DAYS
from finance_engine.services.currency.rate_cache import (
    CachedRate,
    CacheStatus,
    LookupStatus,
    RateCache,
)
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.currency.types import ExchangeRate, HistoricalExchangeRate
from finance_engine.services.exceptions import (
    RateError,
    RateUnavailableError,
    ValidationError,
)
from finance_engine.services.market_data.base import RateProvider

logger = logging.getLogger(__name__)

# Failures that trigger the stale fallback
_FETCH_FAILURES = (RateError, CircuitBreakerOpen)


class ExchangeRateService:
    """
    Resolves exchange rates through a shared cache.

    Attributes:
        provider: External rate source
        cache: Shared RateCache (one per process)

    Example:
        rate = service.get_rate("usd", " eur ")
        print(f"1 USD = {rate.rate} EUR ({rate.source})")
    """

    def __init__(self, provider: RateProvider, cache: RateCache) -> None:
        self._provider = provider
        self._cache = cache
        logger.info(f"ExchangeRateService initialized (provider={provider.name})")

    @property
    def provider(self) -> RateProvider:
        return self._provider

    # =========================================================================
    # PUBLIC METHODS
    # =========================================================================

    def get_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        """
        Get the current rate for a currency pair.

        Raises:
            ValidationError: Malformed or unsupported currency code
            RateUnavailableError: Provider failed and nothing is cached
        """
        from_currency = require_supported(from_currency, field="from_currency")
        to_currency = require_supported(to_currency, field="to_currency")

        if from_currency == to_currency:
            return ExchangeRate.identity(to_currency)

        key = (from_currency, to_currency)
        try:
            lookup = self._cache.get_or_fetch(
                key, lambda: self._fetch(from_currency, to_currency)
            )
        except _FETCH_FAILURES as e:
            stale = self._cache.get_stale(key)
            if stale is None:
                logger.error(f"No rate for {from_currency}/{to_currency}: {e}")
                raise RateUnavailableError(from_currency, to_currency, reason=str(e)) from e
            logger.warning(
                f"Serving stale {from_currency}/{to_currency} rate "
                f"from {stale.timestamp.isoformat()} after provider failure: {e}"
            )
            return self._to_exchange_rate(from_currency, to_currency, stale, "stale-cache")

        if lookup.status == LookupStatus.FETCHED:
            source = lookup.entry.source
        elif lookup.status == LookupStatus.STALE:
            source = "stale-cache"
        else:
            source = "cache"
        return self._to_exchange_rate(from_currency, to_currency, lookup.entry, source)

    def get_historical_rates(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> Iterator[HistoricalExchangeRate]:
        """
        Daily rates between two dates (inclusive), ascending by date.

        Arguments are validated immediately; the provider is called lazily
        when iteration starts. Days without data are absent, never
        interpolated. An identity pair yields nothing.

        Raises:
            ValidationError: Bad codes, start after end, or range too long
        """
        from_currency = require_supported(from_currency, field="from_currency")
        to_currency = require_supported(to_currency, field="to_currency")
        if start_date > end_date:
            raise ValidationError(
                f"start_date ({start_date}) must not be after end_date ({end_date})",
                field="start_date",
            )
        if (end_date - start_date).days > MAX_HISTORY_DAYS:
            raise ValidationError(
                f"Date range exceeds {MAX_HISTORY_DAYS} days",
                field="end_date",
            )

        return self._iter_history(from_currency, to_currency, start_date, end_date)

    def get_multiple_rates(self, pairs: Iterable[tuple[str, str]]) -> dict[str, ExchangeRate]:
        """
        Resolve several pairs; keys are "FROM-TO".

        Pairs that fail (bad code, no rate) are omitted and logged.
        """
        rates: dict[str, ExchangeRate] = {}
        for from_currency, to_currency in pairs:
            try:
                rate = self.get_rate(from_currency, to_currency)
            except (ValidationError, RateUnavailableError) as e:
                logger.warning(f"Skipping pair {from_currency}-{to_currency}: {e}")
                continue
            rates[f"{rate.from_currency}-{rate.to_currency}"] = rate
        return rates

    def refresh_rates(self) -> int:
        """
        Drop every cached rate; the next lookups go to the provider.

        Returns:
            Number of pairs that were cached
        """
        cleared = len(self._cache.keys())
        self._cache.clear()
        return cleared

    def cache_status(self) -> CacheStatus:
        return self._cache.status()

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _fetch(self, from_currency: str, to_currency: str) -> CachedRate:
        quote = self._provider.fetch_rate(from_currency, to_currency)
        logger.debug(f"Fetched {from_currency}/{to_currency} = {quote.rate} from {self._provider.name}")
        return CachedRate(rate=quote.rate, timestamp=quote.timestamp, source=self._provider.SOURCE)

    def _iter_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> Iterator[HistoricalExchangeRate]:
        if from_currency == to_currency:
            return

        observations = self._provider.fetch_history(from_currency, to_currency, start_date, end_date)
        for obs in sorted(observations, key=lambda o: o.date):
            if not start_date <= obs.date <= end_date:
                continue
            yield HistoricalExchangeRate(
                from_currency=from_currency,
                to_currency=to_currency,
                rate=obs.rate,
                timestamp=_start_of_day(obs.date),
                source=self._provider.SOURCE,
                date=obs.date,
            )

    @staticmethod
    def _to_exchange_rate(
            from_currency: str,
            to_currency: str,
            entry: CachedRate,
            source: str,
    ) -> ExchangeRate:
        return ExchangeRate(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=entry.rate,
            timestamp=entry.timestamp,
            source=source,
        )


def _start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
