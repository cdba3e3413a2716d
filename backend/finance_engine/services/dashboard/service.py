# backend/finance_engine/services/dashboard/service.py
"""
Dashboard Service: resolves rates, then aggregates.

Collects every currency the records use, asks the conversion service for
a rate into the base currency for each, and hands the map to the pure
aggregator. A currency without a rate never fails the dashboard; it is
summed natively and reported in `unconverted`.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from finance_engine.config import settings
from finance_engine.models import Expense, Goal, Income, Investment, Loan
from finance_engine.services.constants import ZERO
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.dashboard.metrics import DashboardMetrics, calculate_dashboard_metrics
from finance_engine.services.dashboard.normalizer import CashFlowMonth, project_cash_flows
from finance_engine.services.protocols import ConversionServiceProtocol

logger = logging.getLogger(__name__)


class DashboardService:
    """Multi-currency front end for the dashboard and cash flow functions."""

    def __init__(self, conversion_service: ConversionServiceProtocol) -> None:
        self._conversion = conversion_service

    def get_metrics(
            self,
            investments: Iterable[Investment],
            incomes: Iterable[Income],
            expenses: Iterable[Expense],
            loans: Iterable[Loan],
            goals: Iterable[Goal],
            cash_savings: Decimal = ZERO,
            base_currency: str | None = None,
    ) -> DashboardMetrics:
        investments, incomes, expenses = list(investments), list(incomes), list(expenses)
        loans, goals = list(loans), list(goals)
        base = require_supported(base_currency or settings.primary_currency, field="base_currency")

        currencies = {i.currency for i in investments}
        currencies |= {i.currency for i in incomes}
        currencies |= {e.currency for e in expenses}
        currencies |= {loan.currency for loan in loans}
        for goal in goals:
            currencies |= {goal.target_amount.currency, goal.current_amount.currency}

        rates = self._conversion.rates_to(currencies, base)
        return calculate_dashboard_metrics(
            investments, incomes, expenses, loans, goals,
            cash_savings=cash_savings,
            base_currency=base,
            rates_to_base=rates,
        )

    def project_cash_flows(
            self,
            incomes: Iterable[Income],
            expenses: Iterable[Expense],
            start_month: date,
            months: int | None = None,
            base_currency: str | None = None,
    ) -> list[CashFlowMonth]:
        incomes, expenses = list(incomes), list(expenses)
        base = require_supported(base_currency or settings.primary_currency, field="base_currency")
        rates = self._conversion.rates_to(
            {i.currency for i in incomes} | {e.currency for e in expenses},
            base,
        )
        return project_cash_flows(incomes, expenses, start_month, months, rates)
