# tests/services/analytics/test_volatility.py
"""
Tests for exchange rate volatility functions.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from finance_engine.services.analytics.volatility import (
    calculate_currency_volatility,
    calculate_daily_returns,
    calculate_volatility,
    classify_trend,
)
from finance_engine.services.currency.types import VolatilityTrend
from finance_engine.services.market_data.base import RateObservation


def observations(end: date, rates: list[str]) -> list[RateObservation]:
    """Consecutive daily observations ending on `end`."""
    start = end - timedelta(days=len(rates) - 1)
    return [RateObservation(date=start + timedelta(days=i), rate=Decimal(r)) for i, r in enumerate(rates)]


class TestDailyReturns:
    def test_simple_returns(self):
        returns = calculate_daily_returns([Decimal("100"), Decimal("110"), Decimal("99")])

        assert returns == [Decimal("0.1"), Decimal("-0.1")]

    def test_non_positive_rates_skipped(self):
        returns = calculate_daily_returns([Decimal("1"), Decimal("0"), Decimal("1.5")])

        assert returns == [Decimal("0.5")]

    def test_single_rate(self):
        assert calculate_daily_returns([Decimal("1.1")]) == []


class TestCalculateVolatility:
    """Tests for annualized volatility."""

    def test_known_series(self):
        # returns +10% and -10%: sample stdev sqrt(0.02), x sqrt(252) x 100
        vol = calculate_volatility([Decimal("100"), Decimal("110"), Decimal("99")])

        assert vol == Decimal("224.50")

    def test_flat_series_is_zero(self):
        assert calculate_volatility([Decimal("1.1")] * 10) == Decimal("0.00")

    @pytest.mark.parametrize("rates", [[], ["1.1"], ["1.1", "1.2"]])
    def test_too_few_observations(self, rates):
        assert calculate_volatility([Decimal(r) for r in rates]) is None


class TestClassifyTrend:
    @pytest.mark.parametrize("short, medium, expected", [
        ("12", "10", VolatilityTrend.INCREASING),
        ("8", "10", VolatilityTrend.DECREASING),
        ("10.5", "10", VolatilityTrend.STABLE),
        ("11", "10", VolatilityTrend.STABLE),
        ("5", "0", VolatilityTrend.STABLE),
    ])
    def test_thresholds(self, short, medium, expected):
        assert classify_trend(Decimal(short), Decimal(medium)) == expected

    def test_missing_data_is_stable(self):
        assert classify_trend(None, Decimal("10")) == VolatilityTrend.STABLE
        assert classify_trend(Decimal("10"), None) == VolatilityTrend.STABLE


class TestCurrencyVolatility:
    """Tests for the 30d / 90d / 1y windows."""

    AS_OF = date(2024, 6, 30)

    def test_windows_share_recent_data(self):
        history = observations(self.AS_OF, ["1.10", "1.12", "1.09", "1.11", "1.10"])

        vol = calculate_currency_volatility("EUR", history, self.AS_OF)

        assert vol.currency == "EUR"
        assert vol.volatility_30d is not None
        assert vol.volatility_30d == vol.volatility_90d == vol.volatility_1y
        assert vol.trend == VolatilityTrend.STABLE

    def test_short_window_without_data(self):
        # Only data from about two months ago
        history = observations(self.AS_OF - timedelta(days=60), ["1.10", "1.15", "1.05", "1.12"])

        vol = calculate_currency_volatility("EUR", history, self.AS_OF)

        assert vol.volatility_30d is None
        assert vol.volatility_90d is not None
        assert vol.representative == vol.volatility_1y
        assert vol.trend == VolatilityTrend.STABLE

    def test_order_does_not_matter(self):
        history = observations(self.AS_OF, ["1.10", "1.12", "1.09", "1.11"])

        forward = calculate_currency_volatility("EUR", history, self.AS_OF)
        backward = calculate_currency_volatility("EUR", list(reversed(history)), self.AS_OF)

        assert forward == backward

    def test_future_observations_ignored(self):
        history = observations(self.AS_OF + timedelta(days=5), ["1.10", "1.12", "1.09"])

        vol = calculate_currency_volatility("EUR", history, self.AS_OF)

        assert vol.representative is None

    def test_increasing_trend(self):
        calm = ["1.100", "1.101", "1.100", "1.101"] * 15
        choppy = ["1.10", "1.20", "1.05", "1.18", "1.02", "1.15"] * 4
        history = observations(self.AS_OF, calm + choppy)

        vol = calculate_currency_volatility("EUR", history, self.AS_OF)

        assert vol.volatility_30d > vol.volatility_90d
        assert vol.trend == VolatilityTrend.INCREASING
