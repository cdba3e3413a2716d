# backend/finance_engine/services/analytics/volatility.py
"""
Exchange rate volatility functions.

Pure functions over daily rate observations (anything with `.date` and
`.rate`, e.g. HistoricalExchangeRate or RateObservation).

Formulas:
    r_t = rate_t / rate_(t-1) - 1                  (simple daily return)
    σ = sqrt(Σ(r - r̄)² / (n - 1))                  (sample standard deviation)
    Volatility (annualized, %) = σ × √252 × 100

Windows are calendar-day look-backs from `as_of`: 30 days, 90 days and
one year. A window with fewer than MIN_OBSERVATIONS_FOR_VOLATILITY rates
has no volatility (None) rather than a misleading zero.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Protocol, Sequence

from finance_engine.services.constants import (
    HUNDRED,
    MIN_OBSERVATIONS_FOR_VOLATILITY,
    ONE,
    PERCENTAGE_PRECISION,
    TRADING_DAYS_PER_YEAR,
    VOLATILITY_TREND_THRESHOLD,
    VOLATILITY_WINDOW_1Y,
    VOLATILITY_WINDOW_30D,
    VOLATILITY_WINDOW_90D,
    ZERO,
)
from finance_engine.services.currency.types import CurrencyVolatility, VolatilityTrend

logger = logging.getLogger(__name__)


class DatedRate(Protocol):
    date: date
    rate: Decimal


# =============================================================================
# HELPERS
# =============================================================================

def calculate_daily_returns(rates: Sequence[Decimal]) -> list[Decimal]:
    """Simple returns between consecutive rates; non-positive rates are skipped."""
    returns: list[Decimal] = []
    previous: Decimal | None = None
    for rate in rates:
        if rate is None or rate <= ZERO:
            continue
        if previous is not None:
            returns.append(rate / previous - ONE)
        previous = rate
    return returns


def _decimal_stdev(values: list[Decimal]) -> Decimal | None:
    """Sample standard deviation in pure Decimal arithmetic."""
    if len(values) < 2:
        return None

    n = Decimal(len(values))
    mean_val = sum(values, ZERO) / n
    variance = sum(((x - mean_val) ** 2 for x in values), ZERO) / (n - ONE)
    try:
        return variance.sqrt()
    except InvalidOperation:
        logger.warning(f"Could not take square root of variance {variance}")
        return None


# =============================================================================
# VOLATILITY
# =============================================================================

def calculate_volatility(rates: Sequence[Decimal]) -> Decimal | None:
    """
    Annualized volatility of a rate series, as a percentage.

    Args:
        rates: Rates in ascending date order

    Returns:
        Volatility (e.g. 8.25 for 8.25%), or None with too few observations
    """
    if len(rates) < MIN_OBSERVATIONS_FOR_VOLATILITY:
        return None

    std = _decimal_stdev(calculate_daily_returns(rates))
    if std is None:
        return None

    annualization_factor = Decimal(TRADING_DAYS_PER_YEAR).sqrt()
    return (std * annualization_factor * HUNDRED).quantize(PERCENTAGE_PRECISION)


def _window(observations: list[DatedRate], as_of: date, days: int) -> list[Decimal]:
    start = as_of - timedelta(days=days)
    return [o.rate for o in observations if start < o.date <= as_of]


def classify_trend(
        short_term: Decimal | None,
        medium_term: Decimal | None,
        threshold: Decimal = VOLATILITY_TREND_THRESHOLD,
) -> VolatilityTrend:
    """
    Compare 30-day against 90-day volatility.

    More than `threshold` (10%) above is increasing, more than 10% below is
    decreasing. Missing data is stable.
    """
    if short_term is None or medium_term is None or medium_term == ZERO:
        return VolatilityTrend.STABLE
    if short_term > medium_term * (ONE + threshold):
        return VolatilityTrend.INCREASING
    if short_term < medium_term * (ONE - threshold):
        return VolatilityTrend.DECREASING
    return VolatilityTrend.STABLE


def calculate_currency_volatility(
        currency: str,
        observations: Iterable[DatedRate],
        as_of: date,
) -> CurrencyVolatility:
    """
    30-day, 90-day and 1-year volatility of a currency plus its trend.

    Args:
        currency: Code the observations describe (against the base currency)
        observations: Daily rates, any order
        as_of: Last day of every window
    """
    ordered = sorted(observations, key=lambda o: o.date)

    vol_30d = calculate_volatility(_window(ordered, as_of, VOLATILITY_WINDOW_30D))
    vol_90d = calculate_volatility(_window(ordered, as_of, VOLATILITY_WINDOW_90D))
    vol_1y = calculate_volatility(_window(ordered, as_of, VOLATILITY_WINDOW_1Y))

    return CurrencyVolatility(
        currency=currency,
        volatility_30d=vol_30d,
        volatility_90d=vol_90d,
        volatility_1y=vol_1y,
        trend=classify_trend(vol_30d, vol_90d),
    )
