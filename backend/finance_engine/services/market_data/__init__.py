# backend/finance_engine/services/market_data/__init__.py
"""
Exchange rate providers.

This package contains:
- Abstract interface for rate providers (base.py)
- Yahoo Finance implementation (yahoo.py)
- Static reference table implementation (static.py)

Architecture:
    RateProvider (ABC)
    ├── YahooFinanceRateProvider (live, circuit-breaker guarded)
    └── StaticRateProvider (offline reference table)
"""

from finance_engine.services.market_data.base import (
    RateObservation,
    RateProvider,
    RateQuote,
)
from finance_engine.services.market_data.static import StaticRateProvider
from finance_engine.services.market_data.yahoo import YahooFinanceRateProvider

__all__ = [
    "RateProvider",
    "RateQuote",
    "RateObservation",
    "StaticRateProvider",
    "YahooFinanceRateProvider",
]
