# backend/finance_engine/services/market_data/static.py
"""
Static reference-table rate provider.

Serves approximate real-world rates from a fixed table. Selected with
RATE_PROVIDER=static for offline development and demos; never used as a
silent fallback for a failing live provider.

Lookup order for a pair:
    1. Direct entry ("USD-EUR")
    2. Inverse of the reverse entry (1 / "EUR-USD")
    3. Cross rate through USD (FROM->USD x USD->TO)
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from finance_engine.services.constants import RATE_PRECISION
from finance_engine.services.exceptions import RateNotFoundError
from finance_engine.services.market_data.base import (
    RateObservation,
    RateProvider,
    RateQuote,
)
from finance_engine.utils.date_utils import get_business_days

logger = logging.getLogger(__name__)

REFERENCE_RATES: dict[str, Decimal] = {
    "USD-EUR": Decimal("0.85"),
    "USD-GBP": Decimal("0.73"),
    "USD-JPY": Decimal("110.0"),
    "USD-CHF": Decimal("0.92"),
    "USD-CAD": Decimal("1.25"),
    "USD-AUD": Decimal("1.35"),
    "USD-INR": Decimal("87.0"),
    "USD-CNY": Decimal("7.15"),
    "USD-KRW": Decimal("1320.0"),
    "USD-SGD": Decimal("1.35"),
    "USD-HKD": Decimal("7.80"),
    "USD-NOK": Decimal("10.50"),
    "USD-SEK": Decimal("10.80"),
    "USD-DKK": Decimal("6.85"),
    "USD-NZD": Decimal("1.65"),
    "USD-MXN": Decimal("17.50"),
    "USD-BRL": Decimal("5.20"),
    "USD-RUB": Decimal("75.0"),
    "USD-ZAR": Decimal("18.50"),
    "EUR-USD": Decimal("1.18"),
    "EUR-GBP": Decimal("0.86"),
    "EUR-JPY": Decimal("129.4"),
    "GBP-USD": Decimal("1.37"),
    "GBP-EUR": Decimal("1.16"),
}

_PIVOT = "USD"


class StaticRateProvider(RateProvider):
    """RateProvider backed by REFERENCE_RATES."""

    SOURCE = "static"

    def __init__(self, rates: dict[str, Decimal] | None = None) -> None:
        self._rates = dict(REFERENCE_RATES if rates is None else rates)
        logger.info(f"StaticRateProvider initialized ({len(self._rates)} pairs)")

    @property
    def name(self) -> str:
        return "static"

    def fetch_rate(self, from_currency: str, to_currency: str) -> RateQuote:
        return RateQuote(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=self._lookup(from_currency, to_currency),
            timestamp=datetime.now(timezone.utc),
        )

    def fetch_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> list[RateObservation]:
        """A flat series: the reference rate on every weekday in range."""
        rate = self._lookup(from_currency, to_currency)
        return [
            RateObservation(date=day, rate=rate)
            for day in get_business_days(start_date, end_date)
        ]

    def _lookup(self, from_currency: str, to_currency: str) -> Decimal:
        rate = self._direct_or_inverse(from_currency, to_currency)
        if rate is None and _PIVOT not in (from_currency, to_currency):
            to_pivot = self._direct_or_inverse(from_currency, _PIVOT)
            from_pivot = self._direct_or_inverse(_PIVOT, to_currency)
            if to_pivot is not None and from_pivot is not None:
                rate = to_pivot * from_pivot
        if rate is None:
            raise RateNotFoundError(from_currency, to_currency, provider=self.name)
        return rate.quantize(RATE_PRECISION)

    def _direct_or_inverse(self, from_currency: str, to_currency: str) -> Decimal | None:
        direct = self._rates.get(f"{from_currency}-{to_currency}")
        if direct is not None:
            return direct
        reverse = self._rates.get(f"{to_currency}-{from_currency}")
        if reverse:
            return Decimal("1") / reverse
        return None
