# backend/finance_engine/services/analytics/service.py
"""
Currency Risk Service orchestrator.

Entry point for currency risk analysis. It:
1. Resolves a rate from every held currency into the base currency
2. Computes exposures (pure, exposure.py)
3. Pulls one year of daily history per foreign currency
4. Computes volatility per currency (pure, volatility.py)
5. Scores the snapshot and builds recommendations and hedging options

Architecture:
    CurrencyRiskService
        ├── uses → CurrencyConversionService (rates_to)
        ├── uses → ExchangeRateService (get_historical_rates)
        ├── uses → exposure.py (exposure, score, recommendations, hedging)
        └── uses → volatility.py (30d / 90d / 1y, trend)

A history failure for one currency leaves its volatility out of the
result; it never fails the whole analysis.

Usage:
    service = CurrencyRiskService(conversion_service, rate_service)
    analysis = service.analyze_currency_risk(investments, "USD")
    print(analysis.risk_score, analysis.recommendations)
"""

import logging
from datetime import date, timedelta
from typing import Callable, Iterable

from finance_engine.config import settings
from finance_engine.models import Investment
from finance_engine.services.analytics.exposure import (
    calculate_currency_exposure,
    calculate_risk_score,
    generate_recommendations,
    suggest_hedging_options,
)
from finance_engine.services.analytics.volatility import calculate_currency_volatility
from finance_engine.services.circuit_breaker import CircuitBreakerOpen
from finance_engine.services.constants import VOLATILITY_WINDOW_1Y, ZERO
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.currency.types import (
    CurrencyAmount,
    CurrencyExposure,
    CurrencyRiskAnalysis,
    CurrencyVolatility,
)
from finance_engine.services.exceptions import RateError, ValidationError
from finance_engine.services.protocols import ConversionServiceProtocol, ExchangeRateServiceProtocol

logger = logging.getLogger(__name__)


class CurrencyRiskService:
    """
    Orchestrates currency exposure and risk analysis.

    Attributes:
        today: Callable returning the analysis date (injectable for tests)
    """

    def __init__(
            self,
            conversion_service: ConversionServiceProtocol,
            rate_service: ExchangeRateServiceProtocol,
            today: Callable[[], date] = date.today,
    ) -> None:
        self._conversion = conversion_service
        self._rates = rate_service
        self._today = today

    def calculate_exposure(
            self,
            investments: Iterable[Investment],
            base_currency: str | None = None,
    ) -> list[CurrencyExposure]:
        """Exposures with group values converted into the base currency."""
        investments = list(investments)
        base = require_supported(base_currency or settings.primary_currency, field="base_currency")
        rates = self._conversion.rates_to({i.currency for i in investments}, base)
        return calculate_currency_exposure(investments, base, rates)

    def analyze_currency_risk(
            self,
            investments: Iterable[Investment],
            base_currency: str | None = None,
    ) -> CurrencyRiskAnalysis:
        """Full risk analysis of a holdings snapshot."""
        investments = list(investments)
        base = require_supported(base_currency or settings.primary_currency, field="base_currency")
        logger.info(f"Analyzing currency risk: {len(investments)} holdings, base={base}")

        exposures = self.calculate_exposure(investments, base)
        volatility = self._volatility_for(
            [e.currency for e in exposures if e.currency != base],
            base,
        )

        risk_score = calculate_risk_score(exposures, base, volatility)
        total = sum((e.total_value.effective_amount for e in exposures), ZERO)

        return CurrencyRiskAnalysis(
            base_currency=base,
            total_value=CurrencyAmount(amount=total, currency=base),
            exposures=exposures,
            risk_score=risk_score,
            recommendations=generate_recommendations(exposures, base, risk_score),
            hedging_options=suggest_hedging_options(exposures, base),
            volatility=volatility,
        )

    def _volatility_for(self, currencies: list[str], base_currency: str) -> list[CurrencyVolatility]:
        as_of = self._today()
        start = as_of - timedelta(days=VOLATILITY_WINDOW_1Y)
        results = []

        for currency in currencies:
            try:
                history = list(self._rates.get_historical_rates(currency, base_currency, start, as_of))
            except (RateError, CircuitBreakerOpen, ValidationError) as e:
                logger.warning(f"No volatility for {currency}/{base_currency}: {e}")
                continue
            results.append(calculate_currency_volatility(currency, history, as_of))

        return results
