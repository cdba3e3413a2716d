# tests/services/currency/test_rate_service.py
"""
Tests for ExchangeRateService.

Resolution order: identity, fresh cache, provider, stale cache, error.
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_engine.services.circuit_breaker import CircuitBreakerOpen
from finance_engine.services.currency.rate_cache import InMemoryRateCache
from finance_engine.services.currency.rate_service import ExchangeRateService
from finance_engine.services.exceptions import (
    CurrencyNotSupportedError,
    RateProviderError,
    RateUnavailableError,
    ValidationError,
)
from tests.conftest import FakeRateProvider, ManualClock, daily_history


class TestGetRate:
    """Tests for current rate lookups."""

    def test_identity_never_calls_provider(self, rate_service, fake_provider):
        rate = rate_service.get_rate("USD", "usd")

        assert rate.rate == Decimal("1")
        assert rate.source == "internal"
        assert fake_provider.call_count == 0

    def test_first_lookup_comes_from_provider(self, rate_service):
        rate = rate_service.get_rate("EUR", "USD")

        assert rate.rate == Decimal("1.10")
        assert rate.source == "api"

    def test_second_lookup_comes_from_cache(self, rate_service, fake_provider):
        rate_service.get_rate("EUR", "USD")
        rate = rate_service.get_rate("eur", " usd ")

        assert rate.source == "cache"
        assert fake_provider.call_count == 1

    def test_expired_entry_is_refetched(self, rate_service, fake_provider, clock):
        rate_service.get_rate("EUR", "USD")
        fake_provider.set_rate("EUR", "USD", "1.12")
        clock.advance(901)

        rate = rate_service.get_rate("EUR", "USD")

        assert rate.rate == Decimal("1.12")
        assert rate.source == "api"
        assert fake_provider.call_count == 2

    def test_stale_fallback_on_provider_failure(self, rate_service, fake_provider, clock):
        rate_service.get_rate("EUR", "USD")
        clock.advance(901)
        fake_provider.fail_all(RateProviderError("fake", "timeout"))

        rate = rate_service.get_rate("EUR", "USD")

        assert rate.rate == Decimal("1.10")
        assert rate.source == "stale-cache"

    def test_stale_fallback_when_circuit_open(self, rate_service, fake_provider, clock):
        rate_service.get_rate("EUR", "USD")
        clock.advance(901)
        fake_provider.fail_all(CircuitBreakerOpen("yahoo-fx", 30))

        assert rate_service.get_rate("EUR", "USD").source == "stale-cache"

    def test_unavailable_without_cache(self, rate_service, fake_provider):
        fake_provider.fail_all(RateProviderError("fake", "timeout"))

        with pytest.raises(RateUnavailableError) as exc_info:
            rate_service.get_rate("EUR", "USD")

        assert exc_info.value.from_currency == "EUR"
        assert exc_info.value.to_currency == "USD"

    def test_unknown_pair_is_unavailable(self, rate_service):
        with pytest.raises(RateUnavailableError):
            rate_service.get_rate("CHF", "SEK")

    def test_static_provider_source(self):
        from finance_engine.services.market_data.static import StaticRateProvider

        service = ExchangeRateService(StaticRateProvider(), InMemoryRateCache())

        assert service.get_rate("USD", "EUR").source == "static"
        assert service.get_rate("USD", "EUR").source == "cache"

    def test_unsupported_currency(self, rate_service):
        with pytest.raises(CurrencyNotSupportedError):
            rate_service.get_rate("XYZ", "USD")

    def test_malformed_currency(self, rate_service):
        with pytest.raises(ValidationError):
            rate_service.get_rate("EURO", "USD")


class TestMultipleRates:
    """Tests for get_multiple_rates and refresh."""

    def test_skips_failing_pairs(self, rate_service):
        rates = rate_service.get_multiple_rates([("EUR", "USD"), ("CHF", "SEK"), ("XYZ", "USD")])

        assert list(rates) == ["EUR-USD"]

    def test_refresh_clears_cache(self, rate_service, fake_provider):
        rate_service.get_rate("EUR", "USD")
        rate_service.get_rate("GBP", "USD")

        cleared = rate_service.refresh_rates()

        assert cleared == 2
        assert rate_service.cache_status().cached_pairs == 0
        assert rate_service.get_rate("EUR", "USD").source == "api"
        assert fake_provider.call_count == 3


class TestHistoricalRates:
    """Tests for historical rate iteration."""

    def test_ascending_and_in_range(self, rate_service, fake_provider):
        fake_provider.set_history("EUR", "USD", [
            (date(2024, 1, 3), "1.12"),
            (date(2024, 1, 1), "1.10"),
            (date(2024, 1, 2), "1.11"),
            (date(2024, 1, 10), "1.20"),
        ])

        history = list(rate_service.get_historical_rates("EUR", "USD", date(2024, 1, 1), date(2024, 1, 5)))

        assert [h.date for h in history] == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
        assert history[0].rate == Decimal("1.10")
        assert all(h.source == "api" for h in history)

    def test_gaps_are_not_filled(self, rate_service, fake_provider):
        fake_provider.set_history("EUR", "USD", [(date(2024, 1, 5), "1.10"), (date(2024, 1, 8), "1.11")])

        history = list(rate_service.get_historical_rates("EUR", "USD", date(2024, 1, 5), date(2024, 1, 8)))

        assert len(history) == 2

    def test_identity_pair_is_empty(self, rate_service, fake_provider):
        history = list(rate_service.get_historical_rates("USD", "USD", date(2024, 1, 1), date(2024, 1, 31)))

        assert history == []
        assert fake_provider.history_calls == []

    def test_start_after_end(self, rate_service):
        with pytest.raises(ValidationError) as exc_info:
            rate_service.get_historical_rates("EUR", "USD", date(2024, 2, 1), date(2024, 1, 1))
        assert exc_info.value.field == "start_date"

    def test_range_too_long(self, rate_service):
        with pytest.raises(ValidationError):
            rate_service.get_historical_rates("EUR", "USD", date(2010, 1, 1), date(2024, 1, 1))

    def test_provider_called_lazily(self, rate_service, fake_provider):
        fake_provider.set_history("EUR", "USD", daily_history(date(2024, 1, 1), ["1.1", "1.2"]))

        iterator = rate_service.get_historical_rates("EUR", "USD", date(2024, 1, 1), date(2024, 1, 2))
        assert fake_provider.history_calls == []

        assert len(list(iterator)) == 2
        assert fake_provider.history_calls == [("EUR", "USD")]


class TestSharedCache:
    """Two services over one cache see each other's rates."""

    def test_cache_shared_between_services(self):
        provider = FakeRateProvider({("EUR", "USD"): Decimal("1.10")})
        cache = InMemoryRateCache(clock=ManualClock())
        first = ExchangeRateService(provider, cache)
        second = ExchangeRateService(provider, cache)

        first.get_rate("EUR", "USD")

        assert second.get_rate("EUR", "USD").source == "cache"
        assert provider.call_count == 1
