# tests/services/market_data/test_yahoo_provider.py
"""
Tests for the Yahoo Finance rate provider.

yfinance is patched; the provider sees pandas DataFrames shaped like
Ticker.history output.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from finance_engine.services.circuit_breaker import CircuitBreaker, CircuitBreakerOpen
from finance_engine.services.exceptions import RateNotFoundError, RateProviderError
from finance_engine.services.market_data.yahoo import YahooFinanceRateProvider


def history_frame(closes: dict[str, float | None]) -> pd.DataFrame:
    index = pd.DatetimeIndex([pd.Timestamp(d) for d in closes])
    return pd.DataFrame({"Close": list(closes.values())}, index=index)


class FastYahooProvider(YahooFinanceRateProvider):
    """No backoff between retries."""

    RETRY_MIN_WAIT = 0
    RETRY_MAX_WAIT = 0
    RETRY_MULTIPLIER = 0


@pytest.fixture
def provider() -> FastYahooProvider:
    return FastYahooProvider(
        circuit_breaker=CircuitBreaker(
            name="yahoo-fx-test",
            failure_threshold=2,
            excluded_exceptions=(RateNotFoundError,),
        ),
    )


@pytest.fixture
def mock_ticker():
    with patch("finance_engine.services.market_data.yahoo.yf.Ticker") as ticker_cls:
        ticker = MagicMock()
        ticker_cls.return_value = ticker
        yield ticker_cls, ticker


class TestSymbol:
    def test_build_symbol(self):
        assert YahooFinanceRateProvider.build_symbol("eur", "usd") == "EURUSD=X"


class TestFetchRate:
    """Tests for the latest rate."""

    def test_uses_last_close(self, provider, mock_ticker):
        ticker_cls, ticker = mock_ticker
        ticker.history.return_value = history_frame({
            "2024-06-03": 1.0801,
            "2024-06-04": 1.0845,
        })

        quote = provider.fetch_rate("EUR", "USD")

        ticker_cls.assert_called_once_with("EURUSD=X")
        assert quote.rate == Decimal("1.08450000")
        assert quote.from_currency == "EUR"

    def test_skips_missing_closes(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.return_value = history_frame({
            "2024-06-03": 1.08,
            "2024-06-04": float("nan"),
        })

        assert provider.fetch_rate("EUR", "USD").rate == Decimal("1.08000000")

    def test_empty_frame_is_not_found(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.return_value = pd.DataFrame()

        with pytest.raises(RateNotFoundError):
            provider.fetch_rate("EUR", "XYZ")

    def test_not_found_does_not_trip_breaker(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.return_value = pd.DataFrame()

        for _ in range(3):
            with pytest.raises(RateNotFoundError):
                provider.fetch_rate("EUR", "XYZ")

        assert provider.is_available()

    def test_transient_error_is_retried(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.side_effect = [
            ConnectionError("connection reset"),
            history_frame({"2024-06-04": 1.25}),
        ]

        quote = provider.fetch_rate("GBP", "USD")

        assert quote.rate == Decimal("1.25000000")
        assert ticker.history.call_count == 2

    def test_persistent_error_opens_circuit(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.side_effect = ConnectionError("connection reset")

        for _ in range(2):
            with pytest.raises(RateProviderError):
                provider.fetch_rate("GBP", "USD")

        assert not provider.is_available()
        with pytest.raises(CircuitBreakerOpen):
            provider.fetch_rate("GBP", "USD")
        assert ticker.history.call_count == 2 * provider.MAX_RETRY_ATTEMPTS


class TestFetchHistory:
    """Tests for historical closes."""

    def test_range_is_inclusive(self, provider, mock_ticker):
        _, ticker = mock_ticker
        ticker.history.return_value = history_frame({
            "2024-01-01": 1.10,
            "2024-01-02": 1.11,
            "2024-01-03": 1.12,
        })

        history = provider.fetch_history("EUR", "USD", date(2024, 1, 1), date(2024, 1, 2))

        assert [o.date for o in history] == [date(2024, 1, 1), date(2024, 1, 2)]
        kwargs = ticker.history.call_args.kwargs
        assert kwargs["start"] == "2024-01-01"
        assert kwargs["end"] == "2024-01-03"
