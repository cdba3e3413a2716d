# backend/finance_engine/services/currency/__init__.py
"""
Currency package: value types, registry, rate cache, rates and conversion.

Architecture:
    RateProvider (market_data) -> InMemoryRateCache -> ExchangeRateService
        -> CurrencyConversionService -> aggregators (risk, dashboard, budget)
"""

from finance_engine.services.currency.conversion import (
    ConversionRequest,
    CurrencyConversionService,
)
from finance_engine.services.currency.rate_cache import (
    CachedRate,
    CacheStatus,
    InMemoryRateCache,
    RateCache,
)
from finance_engine.services.currency.rate_service import ExchangeRateService
from finance_engine.services.currency.types import (
    Currency,
    CurrencyAmount,
    CurrencyExposure,
    CurrencyRiskAnalysis,
    CurrencyVolatility,
    ExchangeRate,
    HedgingOption,
    HistoricalExchangeRate,
    RiskLevel,
    VolatilityTrend,
)

__all__ = [
    "CachedRate",
    "CacheStatus",
    "ConversionRequest",
    "Currency",
    "CurrencyAmount",
    "CurrencyConversionService",
    "CurrencyExposure",
    "CurrencyRiskAnalysis",
    "CurrencyVolatility",
    "ExchangeRate",
    "ExchangeRateService",
    "HedgingOption",
    "HistoricalExchangeRate",
    "InMemoryRateCache",
    "RateCache",
    "RiskLevel",
    "VolatilityTrend",
]
