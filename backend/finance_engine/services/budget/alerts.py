# backend/finance_engine/services/budget/alerts.py
"""
Budget alert generation.

Compares spending per category against its limit:

    percentage_used = spent / limit × 100
    < 80        -> info
    80 to < 100 -> warning
    >= 100      -> danger

Spend and limit may be in different currencies. BudgetAlertService
converts both into a target currency first; the pure generator then
compares `effective_amount`s and flags categories whose spend and limit
currencies differ as exposed to exchange rate movement.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable

from finance_engine.config import settings
from finance_engine.models import Expense
from finance_engine.services.constants import (
    BUDGET_DANGER_PERCENT,
    BUDGET_HIGHLIGHT_PERCENT,
    BUDGET_WARNING_PERCENT,
    HUNDRED,
    PERCENTAGE_PRECISION,
    ZERO,
)
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.currency.types import CurrencyAmount
from finance_engine.services.dashboard.normalizer import convert_to_monthly
from finance_engine.services.protocols import ConversionServiceProtocol

logger = logging.getLogger(__name__)

CURRENCY_VOLATILITY_NOTE = (
    "Consider the impact of exchange rate fluctuations on your multi-currency budget categories."
)


class AlertLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class CategoryBudget:
    """
    Spend and limit for one category.

    Each amount keeps its native currency and, once converted, carries the
    converted value, so `effective_amount` is comparable across categories.
    """

    category: str
    spent: CurrencyAmount
    limit: CurrencyAmount


@dataclass(frozen=True)
class BudgetAlert:
    category: str
    spent: CurrencyAmount
    limit: CurrencyAmount
    percentage_used: Decimal
    alert_level: AlertLevel
    currency_mismatch: bool = False


@dataclass(frozen=True)
class BudgetAlertSummary:
    total: int
    danger: int
    warning: int
    info: int
    over_budget_categories: list[str]
    near_limit_categories: list[str]


@dataclass
class BudgetAlertReport:
    alerts: list[BudgetAlert]
    summary: BudgetAlertSummary
    recommendations: list[str] = field(default_factory=list)
    currency: str | None = None


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def classify_usage(percentage: Decimal) -> AlertLevel:
    if percentage >= BUDGET_DANGER_PERCENT:
        return AlertLevel.DANGER
    if percentage >= BUDGET_WARNING_PERCENT:
        return AlertLevel.WARNING
    return AlertLevel.INFO


def calculate_percentage_used(spent: Decimal, limit: Decimal) -> Decimal:
    """
    Spend as a percentage of the limit.

    A zero (or negative) limit is fully used as soon as anything is spent.
    """
    if limit <= ZERO:
        return HUNDRED if spent > ZERO else ZERO
    return (spent / limit * HUNDRED).quantize(PERCENTAGE_PRECISION)


def _recommendations(alerts: list[BudgetAlert]) -> list[str]:
    recommendations: list[str] = []

    danger = [a.category for a in alerts if a.alert_level == AlertLevel.DANGER]
    warning = [a.category for a in alerts if a.alert_level == AlertLevel.WARNING]

    if danger:
        recommendations.append(
            f"You have {len(danger)} categories over budget. "
            f"Consider reducing spending in: {', '.join(danger)}"
        )
    if warning:
        recommendations.append(
            f"Monitor spending in {len(warning)} categories approaching budget limits: "
            f"{', '.join(warning)}"
        )

    if alerts:
        highest = max(alerts, key=lambda a: a.spent.effective_amount)
        if highest.percentage_used > BUDGET_HIGHLIGHT_PERCENT:
            recommendations.append(
                f"{highest.category} is your highest expense category. "
                f"Look for optimization opportunities."
            )

    if any(a.currency_mismatch for a in alerts):
        recommendations.append(CURRENCY_VOLATILITY_NOTE)

    return recommendations


def generate_budget_alerts(budgets: Iterable[CategoryBudget]) -> BudgetAlertReport:
    """
    One alert per category, sorted by descending percentage used, plus a
    severity summary and recommendations.
    """
    alerts = []
    for budget in budgets:
        percentage = calculate_percentage_used(budget.spent.effective_amount, budget.limit.effective_amount)
        alerts.append(BudgetAlert(
            category=budget.category,
            spent=budget.spent,
            limit=budget.limit,
            percentage_used=percentage,
            alert_level=classify_usage(percentage),
            currency_mismatch=budget.spent.currency != budget.limit.currency,
        ))
    alerts.sort(key=lambda a: (-a.percentage_used, a.category))

    summary = BudgetAlertSummary(
        total=len(alerts),
        danger=sum(1 for a in alerts if a.alert_level == AlertLevel.DANGER),
        warning=sum(1 for a in alerts if a.alert_level == AlertLevel.WARNING),
        info=sum(1 for a in alerts if a.alert_level == AlertLevel.INFO),
        over_budget_categories=[a.category for a in alerts if a.percentage_used >= BUDGET_DANGER_PERCENT],
        near_limit_categories=[
            a.category for a in alerts
            if BUDGET_WARNING_PERCENT <= a.percentage_used < BUDGET_DANGER_PERCENT
        ],
    )
    return BudgetAlertReport(alerts=alerts, summary=summary, recommendations=_recommendations(alerts))


def summarize_category_spend(expenses: Iterable[Expense]) -> dict[str, CurrencyAmount]:
    """
    Monthly spend per category, keyed by category.

    Amounts are summed per category in the currency of the category's first
    expense; expenses in another currency are skipped with a warning.
    """
    totals: dict[str, CurrencyAmount] = {}
    for expense in expenses:
        monthly = convert_to_monthly(expense.amount.amount, expense.frequency)
        current = totals.get(expense.category)
        if current is None:
            totals[expense.category] = CurrencyAmount(monthly, expense.currency)
        elif current.currency != expense.currency:
            logger.warning(
                f"Skipping {expense.currency} expense '{expense.name}' in "
                f"{current.currency} category '{expense.category}'"
            )
        else:
            totals[expense.category] = CurrencyAmount(current.amount + monthly, current.currency)
    return totals


# =============================================================================
# SERVICE
# =============================================================================

class BudgetAlertService:
    """Converts spend and limits into one currency, then generates alerts."""

    def __init__(self, conversion_service: ConversionServiceProtocol) -> None:
        self._conversion = conversion_service

    def _in_target(self, amount: CurrencyAmount, target: str) -> CurrencyAmount:
        """Native amount carrying its conversion into target (if any)."""
        if amount.currency == target:
            return CurrencyAmount(amount.amount, amount.currency)
        converted = self._conversion.convert_amount(amount.amount, amount.currency, target)
        if not converted.is_converted:
            logger.warning(f"Budget amount in {amount.currency} left unconverted")
            return CurrencyAmount(amount.amount, amount.currency)
        return CurrencyAmount(
            amount=amount.amount,
            currency=amount.currency,
            converted_amount=converted.converted_amount,
            exchange_rate=converted.exchange_rate,
            last_updated=converted.last_updated,
        )

    def generate(
            self,
            budget_inputs: Iterable[CategoryBudget],
            target_currency: str | None = None,
    ) -> BudgetAlertReport:
        target = require_supported(target_currency or settings.primary_currency, field="target_currency")
        budgets = [
            CategoryBudget(
                category=b.category,
                spent=self._in_target(b.spent, target),
                limit=self._in_target(b.limit, target),
            )
            for b in budget_inputs
        ]
        report = generate_budget_alerts(budgets)
        report.currency = target
        return report
