# backend/finance_engine/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates the finance
calculations separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive collaborators through their constructors (not via Depends)
- Are easily testable via dependency injection

Import from the subpackages directly; this package does not re-export them:
    from finance_engine.services.currency import ExchangeRateService
    from finance_engine.services.analytics import CurrencyRiskService
    from finance_engine.services.exceptions import RateUnavailableError

Architecture:
    services/
    ├── __init__.py                  # This file
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants and limits
    ├── protocols.py                 # Service interfaces (Protocol classes)
    ├── circuit_breaker.py           # Circuit breaker for the rate provider
    ├── market_data/                 # Exchange rate providers
    │   ├── base.py                  # Abstract provider interface
    │   ├── yahoo.py                 # Yahoo Finance implementation
    │   └── static.py                # Offline reference table
    ├── currency/                    # Currencies, rates and conversion
    │   ├── types.py                 # Value types
    │   ├── registry.py              # Supported currencies, detection, risk tiers
    │   ├── rate_cache.py            # TTL cache with fetch coalescing
    │   ├── rate_service.py          # Cached rates with stale fallback
    │   └── conversion.py            # Single and batch conversion
    ├── analytics/                   # Currency exposure and risk
    │   ├── exposure.py              # Exposure, score, recommendations, hedging
    │   ├── volatility.py            # Annualized volatility and trend
    │   └── service.py               # Risk orchestrator
    ├── loans/                       # Loan engine
    ├── dashboard/                   # Normalization and dashboard metrics
    └── budget/                      # Budget alerts
"""
