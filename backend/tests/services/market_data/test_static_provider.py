# tests/services/market_data/test_static_provider.py
"""
Tests for the static reference-table rate provider.
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_engine.services.exceptions import RateNotFoundError
from finance_engine.services.market_data.static import StaticRateProvider


@pytest.fixture
def provider() -> StaticRateProvider:
    return StaticRateProvider({
        "USD-EUR": Decimal("0.80"),
        "USD-GBP": Decimal("0.50"),
        "EUR-USD": Decimal("1.30"),
    })


class TestStaticRates:
    """Tests for rate lookup order."""

    def test_direct_entry(self, provider):
        assert provider.fetch_rate("USD", "EUR").rate == Decimal("0.80")

    def test_direct_entry_beats_inverse(self, provider):
        # EUR-USD is listed explicitly, so it is not 1 / 0.80
        assert provider.fetch_rate("EUR", "USD").rate == Decimal("1.30")

    def test_inverse_entry(self, provider):
        assert provider.fetch_rate("GBP", "USD").rate == Decimal("2.00000000")

    def test_cross_rate_through_usd(self, provider):
        # GBP -> USD (2.0) x USD -> EUR (0.80)
        assert provider.fetch_rate("GBP", "EUR").rate == Decimal("1.60000000")

    def test_unknown_pair(self, provider):
        with pytest.raises(RateNotFoundError):
            provider.fetch_rate("USD", "JPY")

    def test_default_table(self):
        provider = StaticRateProvider()

        assert provider.fetch_rate("USD", "JPY").rate == Decimal("110.00000000")
        assert provider.SOURCE == "static"
        assert provider.is_available()


class TestStaticHistory:
    """Tests for the flat historical series."""

    def test_weekdays_only(self, provider):
        # 2024-01-01 is a Monday
        history = provider.fetch_history("USD", "EUR", date(2024, 1, 1), date(2024, 1, 7))

        assert [o.date.weekday() for o in history] == [0, 1, 2, 3, 4]
        assert {o.rate for o in history} == {Decimal("0.80")}
