# backend/finance_engine/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. The rate cache in particular must be shared: one cache per
process is what makes concurrent lookups for a pair coalesce into a single
provider call.

Services are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from finance_engine.dependencies import get_conversion_service

    @router.post("/convert")
    def convert(
        service: CurrencyConversionService = Depends(get_conversion_service),
    ):
        ...

Tests replace singletons through app.dependency_overrides, or call
clear_service_caches() after changing settings.
"""

import logging
from functools import lru_cache

from finance_engine.config import settings
from finance_engine.services.analytics.service import CurrencyRiskService
from finance_engine.services.budget.alerts import BudgetAlertService
from finance_engine.services.circuit_breaker import CircuitBreaker
from finance_engine.services.currency.conversion import CurrencyConversionService
from finance_engine.services.currency.rate_cache import InMemoryRateCache
from finance_engine.services.currency.rate_service import ExchangeRateService
from finance_engine.services.dashboard.service import DashboardService
from finance_engine.services.exceptions import RateNotFoundError
from finance_engine.services.loans.projections import LoanProjectionService
from finance_engine.services.market_data import (
    RateProvider,
    StaticRateProvider,
    YahooFinanceRateProvider,
)

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_rate_provider, get_rate_cache (no deps)
# 2. get_exchange_rate_service (provider + cache)
# 3. get_conversion_service (rate service)
# 4. get_currency_risk_service, get_loan_projection_service,
#    get_dashboard_service, get_budget_alert_service


@lru_cache(maxsize=1)
def get_rate_provider() -> RateProvider:
    """
    Get the singleton exchange rate provider selected by RATE_PROVIDER.

    The live provider owns the circuit breaker, so sharing the instance
    shares breaker state across every request.
    """
    if settings.rate_provider == "static":
        logger.info("Using static reference exchange rates")
        return StaticRateProvider()

    logger.debug("Initializing singleton YahooFinanceRateProvider")
    return YahooFinanceRateProvider(
        timeout=settings.rate_provider_timeout,
        circuit_breaker=CircuitBreaker(
            name="yahoo-fx",
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
            excluded_exceptions=(RateNotFoundError,),
        ),
    )


@lru_cache(maxsize=1)
def get_rate_cache() -> InMemoryRateCache:
    logger.debug(f"Initializing rate cache (ttl={settings.rate_cache_ttl_seconds}s)")
    return InMemoryRateCache(ttl_seconds=settings.rate_cache_ttl_seconds)


@lru_cache(maxsize=1)
def get_exchange_rate_service() -> ExchangeRateService:
    """Get the singleton ExchangeRateService (shared provider and cache)."""
    return ExchangeRateService(provider=get_rate_provider(), cache=get_rate_cache())


@lru_cache(maxsize=1)
def get_conversion_service() -> CurrencyConversionService:
    return CurrencyConversionService(get_exchange_rate_service())


@lru_cache(maxsize=1)
def get_currency_risk_service() -> CurrencyRiskService:
    return CurrencyRiskService(
        conversion_service=get_conversion_service(),
        rate_service=get_exchange_rate_service(),
    )


@lru_cache(maxsize=1)
def get_loan_projection_service() -> LoanProjectionService:
    return LoanProjectionService(rate_service=get_exchange_rate_service())


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    return DashboardService(conversion_service=get_conversion_service())


@lru_cache(maxsize=1)
def get_budget_alert_service() -> BudgetAlertService:
    return BudgetAlertService(conversion_service=get_conversion_service())


# =============================================================================
# CACHE MANAGEMENT (for testing)
# =============================================================================

def clear_service_caches() -> None:
    """
    Drop every singleton so the next call rebuilds it.

    Useful in tests that change settings or need a fresh rate cache.
    """
    get_rate_provider.cache_clear()
    get_rate_cache.cache_clear()
    get_exchange_rate_service.cache_clear()
    get_conversion_service.cache_clear()
    get_currency_risk_service.cache_clear()
    get_loan_projection_service.cache_clear()
    get_dashboard_service.cache_clear()
    get_budget_alert_service.cache_clear()
    logger.debug("All service caches cleared")
