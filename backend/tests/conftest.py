# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- A fake rate provider with configurable rates, history and failures
- A manual clock for TTL and circuit breaker tests
- Record factories (investments, incomes, expenses, loans, goals)
- A TestClient whose services run on the fake provider
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_PROVIDER", "static")
os.environ.setdefault("APP_NAME", "Test App")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterator

import pytest

from finance_engine.models import (
    Expense,
    Frequency,
    Goal,
    Income,
    Investment,
    InvestmentType,
    Loan,
)
from finance_engine.services.currency.conversion import CurrencyConversionService
from finance_engine.services.currency.rate_cache import InMemoryRateCache
from finance_engine.services.currency.rate_service import ExchangeRateService
from finance_engine.services.currency.types import CurrencyAmount
from finance_engine.services.exceptions import RateNotFoundError
from finance_engine.services.market_data.base import RateObservation, RateProvider, RateQuote


# =============================================================================
# FAKE RATE PROVIDER
# =============================================================================

class FakeRateProvider(RateProvider):
    """
    In-memory RateProvider for tests.

    Rates are configured per pair; history per pair is a list of
    (date, rate). Errors configured for a pair (or for every pair with
    `fail_all`) are raised instead of a quote.
    """

    SOURCE = "api"

    def __init__(self, rates: dict[tuple[str, str], Decimal] | None = None):
        self._rates: dict[tuple[str, str], Decimal] = dict(rates or {})
        self._history: dict[tuple[str, str], list[RateObservation]] = {}
        self._errors: dict[tuple[str, str], Exception] = {}
        self._fail_all: Exception | None = None
        self.fetch_calls: list[tuple[str, str]] = []
        self.history_calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "fake"

    def set_rate(self, from_currency: str, to_currency: str, rate: str | Decimal) -> None:
        self._rates[(from_currency, to_currency)] = Decimal(str(rate))

    def set_history(self, from_currency: str, to_currency: str, points: list[tuple[date, str | Decimal]]) -> None:
        self._history[(from_currency, to_currency)] = [
            RateObservation(date=d, rate=Decimal(str(r))) for d, r in points
        ]

    def set_error(self, from_currency: str, to_currency: str, error: Exception) -> None:
        self._errors[(from_currency, to_currency)] = error

    def fail_all(self, error: Exception | None) -> None:
        """Raise `error` for every pair (None to stop failing)."""
        self._fail_all = error

    @property
    def call_count(self) -> int:
        return len(self.fetch_calls)

    def fetch_rate(self, from_currency: str, to_currency: str) -> RateQuote:
        key = (from_currency, to_currency)
        self.fetch_calls.append(key)
        if self._fail_all is not None:
            raise self._fail_all
        if key in self._errors:
            raise self._errors[key]
        if key not in self._rates:
            raise RateNotFoundError(from_currency, to_currency, provider=self.name)
        return RateQuote(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=self._rates[key],
            timestamp=datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc),
        )

    def fetch_history(
            self,
            from_currency: str,
            to_currency: str,
            start_date: date,
            end_date: date,
    ) -> list[RateObservation]:
        key = (from_currency, to_currency)
        self.history_calls.append(key)
        if self._fail_all is not None:
            raise self._fail_all
        if key in self._errors:
            raise self._errors[key]
        return [o for o in self._history.get(key, []) if start_date <= o.date <= end_date]


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

DEFAULT_RATES = {
    ("EUR", "USD"): Decimal("1.10"),
    ("USD", "EUR"): Decimal("0.90"),
    ("GBP", "USD"): Decimal("1.25"),
    ("USD", "GBP"): Decimal("0.80"),
    ("JPY", "USD"): Decimal("0.0070"),
    ("BRL", "USD"): Decimal("0.20"),
}


@pytest.fixture
def fake_provider() -> FakeRateProvider:
    """A provider that knows DEFAULT_RATES."""
    return FakeRateProvider(DEFAULT_RATES)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def rate_cache(clock: ManualClock) -> InMemoryRateCache:
    return InMemoryRateCache(ttl_seconds=900, clock=clock)


@pytest.fixture
def rate_service(fake_provider: FakeRateProvider, rate_cache: InMemoryRateCache) -> ExchangeRateService:
    return ExchangeRateService(fake_provider, rate_cache)


@pytest.fixture
def conversion_service(rate_service: ExchangeRateService) -> CurrencyConversionService:
    return CurrencyConversionService(rate_service)


@pytest.fixture
def client(fake_provider: FakeRateProvider) -> Iterator:
    """TestClient whose services all share one fake provider and cache."""
    from fastapi.testclient import TestClient

    from finance_engine import dependencies
    from finance_engine.main import app
    from finance_engine.services.analytics.service import CurrencyRiskService
    from finance_engine.services.budget.alerts import BudgetAlertService
    from finance_engine.services.dashboard.service import DashboardService
    from finance_engine.services.loans.projections import LoanProjectionService

    dependencies.clear_service_caches()
    rates = ExchangeRateService(fake_provider, InMemoryRateCache(ttl_seconds=900))
    conversion = CurrencyConversionService(rates)

    app.dependency_overrides[dependencies.get_exchange_rate_service] = lambda: rates
    app.dependency_overrides[dependencies.get_conversion_service] = lambda: conversion
    app.dependency_overrides[dependencies.get_currency_risk_service] = (
        lambda: CurrencyRiskService(conversion, rates)
    )
    app.dependency_overrides[dependencies.get_loan_projection_service] = (
        lambda: LoanProjectionService(rates)
    )
    app.dependency_overrides[dependencies.get_dashboard_service] = lambda: DashboardService(conversion)
    app.dependency_overrides[dependencies.get_budget_alert_service] = lambda: BudgetAlertService(conversion)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
    dependencies.clear_service_caches()


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def money(amount: str | int, currency: str = "USD") -> CurrencyAmount:
    return CurrencyAmount(Decimal(str(amount)), currency)


def create_investment(
        quantity: str | int = 10,
        price: str | int = 100,
        currency: str = "USD",
        current_price: str | int | None = None,
        id: str = "inv-1",
        name: str = "Test Holding",
) -> Investment:
    """Factory function for creating Investment test data."""
    return Investment(
        id=id,
        user_id="user-1",
        type=InvestmentType.STOCKS,
        name=name,
        quantity=Decimal(str(quantity)),
        purchase_price=money(price, currency),
        current_price=money(current_price, currency) if current_price is not None else None,
        currency=currency,
    )


def create_income(
        amount: str | int = 5000,
        currency: str = "USD",
        frequency: Frequency = Frequency.MONTHLY,
        is_active: bool = True,
        start_date: date = date(2024, 1, 1),
        end_date: date | None = None,
        id: str = "inc-1",
) -> Income:
    """Factory function for creating Income test data."""
    return Income(
        id=id,
        user_id="user-1",
        source="Employer",
        amount=money(amount, currency),
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
    )


def create_expense(
        amount: str | int = 1000,
        currency: str = "USD",
        category: str = "Housing",
        frequency: Frequency = Frequency.MONTHLY,
        start_date: date | None = None,
        end_date: date | None = None,
        id: str = "exp-1",
) -> Expense:
    """Factory function for creating Expense test data."""
    return Expense(
        id=id,
        user_id="user-1",
        category=category,
        name=category,
        amount=money(amount, currency),
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
    )


def create_loan(
        balance: str | int = 10000,
        rate: str | int = 5,
        payment: str | int = 500,
        currency: str = "USD",
        term_months: int = 60,
        next_payment_date: date = date(2024, 7, 1),
        id: str = "loan-1",
        principal: str | int | None = None,
) -> Loan:
    """Factory function for creating Loan test data."""
    return Loan(
        id=id,
        user_id="user-1",
        name=f"Loan {id}",
        principal=money(principal if principal is not None else balance, currency),
        current_balance=money(balance, currency),
        interest_rate=Decimal(str(rate)),
        term_months=term_months,
        monthly_payment=money(payment, currency),
        start_date=date(2024, 1, 1),
        next_payment_date=next_payment_date,
    )


def create_goal(
        target: str | int = 10000,
        current: str | int = 2500,
        currency: str = "USD",
        is_active: bool = True,
        id: str = "goal-1",
) -> Goal:
    """Factory function for creating Goal test data."""
    return Goal(
        id=id,
        user_id="user-1",
        name="Emergency fund",
        target_amount=money(target, currency),
        current_amount=money(current, currency),
        is_active=is_active,
    )


def daily_history(start: date, rates: list[str]) -> list[tuple[date, str]]:
    """Consecutive daily (date, rate) points starting at `start`."""
    return [(start + timedelta(days=i), r) for i, r in enumerate(rates)]
