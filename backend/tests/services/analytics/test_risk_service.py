# tests/services/analytics/test_risk_service.py
"""
Tests for CurrencyRiskService orchestration.
"""

from datetime import date
from decimal import Decimal

import pytest

from finance_engine.services.analytics.service import CurrencyRiskService
from finance_engine.services.exceptions import CurrencyNotSupportedError, RateProviderError
from tests.conftest import create_investment, daily_history

AS_OF = date(2024, 6, 30)


@pytest.fixture
def risk_service(conversion_service, rate_service):
    return CurrencyRiskService(conversion_service, rate_service, today=lambda: AS_OF)


@pytest.fixture
def portfolio():
    return [
        create_investment(quantity=10, price=100, currency="USD", id="inv-usd"),
        create_investment(quantity=10, price=100, currency="EUR", id="inv-eur"),
    ]


class TestCalculateExposure:
    def test_converts_into_base(self, risk_service, portfolio):
        exposures = risk_service.calculate_exposure(portfolio, "usd")

        assert [e.currency for e in exposures] == ["EUR", "USD"]
        assert exposures[0].total_value.converted_amount == Decimal("1100.00")

    def test_defaults_to_primary_currency(self, risk_service, portfolio):
        exposures = risk_service.calculate_exposure(portfolio)

        assert exposures[0].total_value.converted_amount is not None

    def test_unsupported_base(self, risk_service, portfolio):
        with pytest.raises(CurrencyNotSupportedError):
            risk_service.calculate_exposure(portfolio, "ZZZ")


class TestAnalyzeCurrencyRisk:
    """Tests for the full analysis."""

    def test_analysis_contents(self, risk_service, fake_provider, portfolio):
        fake_provider.set_history("EUR", "USD", daily_history(
            date(2024, 6, 20), ["1.08", "1.09", "1.10", "1.09", "1.11", "1.10", "1.12", "1.10", "1.09", "1.10", "1.10"],
        ))

        analysis = risk_service.analyze_currency_risk(portfolio, "USD")

        assert analysis.base_currency == "USD"
        assert analysis.total_value.amount == Decimal("2100.00")
        assert analysis.total_value.currency == "USD"
        assert len(analysis.exposures) == 2
        assert Decimal("0") <= analysis.risk_score <= Decimal("100")
        assert [v.currency for v in analysis.volatility] == ["EUR"]
        assert analysis.volatility[0].volatility_30d is not None
        assert {o.currency for o in analysis.hedging_options} == {"EUR"}
        assert analysis.recommendations

    def test_history_requested_for_foreign_currencies_only(self, risk_service, fake_provider, portfolio):
        risk_service.analyze_currency_risk(portfolio, "USD")

        assert fake_provider.history_calls == [("EUR", "USD")]

    def test_history_failure_drops_volatility_only(self, risk_service, fake_provider, portfolio):
        fake_provider.set_error("EUR", "USD", RateProviderError(provider="fake", reason="timeout"))

        analysis = risk_service.analyze_currency_risk(portfolio, "USD")

        assert analysis.volatility == []
        assert len(analysis.exposures) == 2

    def test_volatility_raises_score(self, conversion_service, rate_service, fake_provider, portfolio):
        service = CurrencyRiskService(conversion_service, rate_service, today=lambda: AS_OF)
        calm = service.analyze_currency_risk(portfolio, "USD").risk_score

        fake_provider.set_history("EUR", "USD", daily_history(
            date(2024, 6, 1), ["1.0", "1.3", "0.9", "1.4", "0.8", "1.2"],
        ))
        volatile = service.analyze_currency_risk(portfolio, "USD").risk_score

        assert volatile > calm

    def test_empty_portfolio(self, risk_service):
        analysis = risk_service.analyze_currency_risk([], "USD")

        assert analysis.exposures == []
        assert analysis.risk_score == Decimal("0")
        assert analysis.total_value.amount == Decimal("0")
        assert analysis.recommendations == []
