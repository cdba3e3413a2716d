# backend/finance_engine/services/analytics/__init__.py
"""
Currency Risk Analytics Package.

This package provides currency exposure and risk analysis:
- Exposure per currency with risk tiers
- Risk score (concentration, foreign share, volatility)
- Recommendations and hedging suggestions
- Exchange rate volatility (30d / 90d / 1y) and trend

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    ├── exposure.py              # Exposure, risk score, recommendations, hedging
    ├── volatility.py            # Volatility of daily rate returns
    └── service.py               # CurrencyRiskService (orchestrator)

Usage:
    from finance_engine.services.analytics import CurrencyRiskService

    analysis = service.analyze_currency_risk(investments, base_currency="USD")
    print(f"Risk score: {analysis.risk_score}")
"""

from finance_engine.services.analytics.exposure import (
    HEDGING_INSTRUMENTS,
    calculate_currency_exposure,
    calculate_risk_score,
    generate_recommendations,
    suggest_hedging_options,
)
from finance_engine.services.analytics.service import CurrencyRiskService
from finance_engine.services.analytics.volatility import (
    calculate_currency_volatility,
    calculate_daily_returns,
    calculate_volatility,
    classify_trend,
)

__all__ = [
    # Main service
    "CurrencyRiskService",

    # Exposure & scoring
    "HEDGING_INSTRUMENTS",
    "calculate_currency_exposure",
    "calculate_risk_score",
    "generate_recommendations",
    "suggest_hedging_options",

    # Volatility
    "calculate_currency_volatility",
    "calculate_daily_returns",
    "calculate_volatility",
    "classify_trend",
]
