# backend/finance_engine/services/market_data/yahoo.py
"""
Yahoo Finance exchange rate provider.

Implements RateProvider using the yfinance library. Yahoo quotes currency
pairs as tickers of the form "EURUSD=X" (1 EUR in USD); the daily Close
column is used as the rate.

Key features:
- Latest rate from the most recent daily bar
- Historical daily closes for volatility and projections
- Retry with backoff inherited from the base class
- Circuit breaker so a Yahoo outage fails fast instead of stalling requests

Limitations:
- Rate limits exist but are not documented
- Quotes may be delayed; fine for personal finance, not for trading
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import yfinance as yf

from finance_engine.services.circuit_breaker import CircuitBreaker
from finance_engine.services.constants import RATE_PRECISION
from finance_engine.services.exceptions import RateNotFoundError, RateProviderError
from finance_engine.services.market_data.base import (
    RateObservation,
    RateProvider,
    RateQuote,
)

logger = logging.getLogger(__name__)


class YahooFinanceRateProvider(RateProvider):
    """
    Yahoo Finance implementation of RateProvider.

    Configuration:
        timeout: Request timeout in seconds passed to yfinance
        circuit_breaker: Breaker guarding every call (one is created if omitted)

    Example:
        provider = YahooFinanceRateProvider(timeout=10)
        quote = provider.fetch_rate("EUR", "USD")
        print(quote.rate)  # e.g. Decimal("1.08450000")
    """

    # Window used to find the latest close; covers weekends and holidays
    LATEST_RATE_PERIOD: str = "5d"

    def __init__(
            self,
            timeout: int = 10,
            circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        self._timeout = timeout
        self._breaker = circuit_breaker or CircuitBreaker(
            name="yahoo-fx",
            excluded_exceptions=(RateNotFoundError,),
        )
        logger.info(f"YahooFinanceRateProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    def is_available(self) -> bool:
        return not self._breaker.is_open

    # =========================================================================
    # PUBLIC METHODS
    # =========================================================================

    def fetch_rate(self, from_currency: str, to_currency: str) -> RateQuote:
        """
        Fetch the latest close for a currency pair.

        Raises:
            RateNotFoundError: Yahoo has no data for the pair
            RateProviderError: Yahoo unavailable after retries
            CircuitBreakerOpen: Recent failures opened the circuit
        """
        with self._breaker:
            return self._execute_with_retry(self._fetch_latest, from_currency, to_currency)

    def fetch_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> list[RateObservation]:
        """Fetch daily closes between two dates (inclusive), ascending."""
        with self._breaker:
            return self._execute_with_retry(
                self._fetch_history,
                from_currency,
                to_currency,
                start_date,
                end_date,
            )

    # =========================================================================
    # INTERNAL FETCHERS (called by the retry wrapper)
    # =========================================================================

    def _fetch_latest(self, from_currency: str, to_currency: str) -> RateQuote:
        symbol = self.build_symbol(from_currency, to_currency)
        logger.debug(f"Fetching latest rate for {symbol}")

        df = self._download(
            symbol,
            from_currency,
            to_currency,
            period=self.LATEST_RATE_PERIOD,
        )
        observations = self._dataframe_to_observations(df)
        if not observations:
            raise RateNotFoundError(from_currency, to_currency, provider=self.name)

        latest = observations[-1]
        return RateQuote(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=latest.rate,
            timestamp=datetime.now(timezone.utc),
        )

    def _fetch_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> list[RateObservation]:
        symbol = self.build_symbol(from_currency, to_currency)
        logger.debug(f"Fetching rate history for {symbol}: {start_date} to {end_date}")

        # Yahoo Finance end date is exclusive
        df = self._download(
            symbol,
            from_currency,
            to_currency,
            start=start_date.isoformat(),
            end=(end_date + timedelta(days=1)).isoformat(),
        )
        observations = [
            o for o in self._dataframe_to_observations(df)
            if start_date <= o.date <= end_date
        ]
        logger.debug(f"Fetched {len(observations)} observations for {symbol}")
        return observations

    def _download(self, symbol: str, from_currency: str, to_currency: str, **kwargs: Any):
        """Run Ticker.history and map yfinance failures to rate errors."""
        try:
            df = yf.Ticker(symbol).history(
                interval="1d",
                auto_adjust=False,
                timeout=self._timeout,
                **kwargs,
            )
        except Exception as e:
            error_str = str(e).lower()
            if "not found" in error_str or "delisted" in error_str:
                raise RateNotFoundError(from_currency, to_currency, provider=self.name)

            logger.error(f"Yahoo Finance error for {symbol}: {e}")
            raise RateProviderError(
                provider=self.name,
                reason=str(e),
                from_currency=from_currency,
                to_currency=to_currency,
            )

        if df is None or df.empty:
            raise RateNotFoundError(from_currency, to_currency, provider=self.name)
        return df

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    @staticmethod
    def build_symbol(from_currency: str, to_currency: str) -> str:
        """Yahoo FX ticker, e.g. EUR -> USD is "EURUSD=X"."""
        return f"{from_currency.upper()}{to_currency.upper()}=X"

    def _dataframe_to_observations(self, df) -> list[RateObservation]:
        """
        Convert a yfinance DataFrame into ascending observations.

        Rows with a missing or non-positive Close are skipped.
        """
        observations: dict[date, Decimal] = {}

        for idx, row in df.iterrows():
            rate = self._to_decimal(row.get("Close"))
            if rate is None or rate <= 0:
                logger.debug(f"Skipping {idx}: missing close")
                continue
            observed_on = idx.date() if hasattr(idx, "date") else idx
            observations[observed_on] = rate

        return [RateObservation(date=d, rate=r) for d, r in sorted(observations.items())]

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/None."""
        if value is None:
            return None
        try:
            if math.isnan(float(value)):
                return None
            return Decimal(str(value)).quantize(RATE_PRECISION)
        except (TypeError, ValueError):
            return None
