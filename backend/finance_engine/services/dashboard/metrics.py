# backend/finance_engine/services/dashboard/metrics.py
"""
Dashboard metric aggregation.

Pure functions composing normalized records into the dashboard summary.

Formulas:
    net_worth = portfolio_value + cash_savings − total_debt
    savings_rate = max(0, (income − expenses) / income × 100)       (0 without income)
    debt_to_income = total_debt / (monthly_income × 12) × 100       (0 without income)
    emergency_months = portfolio_value / monthly_expenses           (0 without expenses)
    goal_progress = min(100, current / target × 100)                (0 for a zero target)

Financial health score (0-100), four independently capped buckets:
    savings rate      >=20 / >=10 / >=5     -> 30 / 20 / 10
    debt-to-income    <=20 / <=36 / <=50    -> 25 / 15 / 5
    emergency months  >=6 / >=3 / >=1       -> 25 / 15 / 5
    portfolio value   > 0                   -> 20
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from finance_engine.models import Expense, Goal, Income, Investment, Loan
from finance_engine.services.constants import (
    CURRENCY_PRECISION,
    DEBT_TO_INCOME_POINTS,
    EMERGENCY_FUND_POINTS,
    HEALTH_STATUS_THRESHOLDS,
    HUNDRED,
    MAX_HEALTH_SCORE,
    MONTHS_PER_YEAR,
    PERCENTAGE_PRECISION,
    PORTFOLIO_BONUS_POINTS,
    SAVINGS_RATE_POINTS,
    ZERO,
)
from finance_engine.services.dashboard.normalizer import (
    calculate_monthly_expenses,
    calculate_monthly_income,
    to_base,
)

logger = logging.getLogger(__name__)


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    name: str
    progress: Decimal
    target_amount: Decimal
    current_amount: Decimal


@dataclass(frozen=True)
class HealthStatus:
    status: str
    description: str


@dataclass
class DashboardMetrics:
    """
    Dashboard summary for one request (never stored).

    Attributes:
        currency: Currency every amount is expressed in (None when records
            were summed without conversion)
        unconverted: Currencies that had no rate and were summed at their
            native amounts
    """

    net_worth: Decimal
    portfolio_value: Decimal
    total_debt: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    savings_rate: Decimal
    debt_to_income_ratio: Decimal
    emergency_fund_months: Decimal
    goal_progress: list[GoalProgress]
    financial_health_score: int
    health_status: HealthStatus
    currency: str | None = None
    unconverted: list[str] = field(default_factory=list)


# =============================================================================
# COMPONENT METRICS
# =============================================================================

def calculate_portfolio_value(
        investments: Iterable[Investment],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> Decimal:
    return sum(
        (to_base(i.market_value, i.currency, rates_to_base) for i in investments),
        ZERO,
    )


def calculate_total_debt(
        loans: Iterable[Loan],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> Decimal:
    return sum(
        (to_base(loan.current_balance.amount, loan.currency, rates_to_base) for loan in loans),
        ZERO,
    )


def calculate_net_worth(portfolio_value: Decimal, total_debt: Decimal, cash_savings: Decimal = ZERO) -> Decimal:
    return portfolio_value + cash_savings - total_debt


def calculate_savings_rate(monthly_income: Decimal, monthly_expenses: Decimal) -> Decimal:
    """Share of income not spent, as a percentage; never negative."""
    if monthly_income == ZERO:
        return ZERO
    return max(ZERO, (monthly_income - monthly_expenses) / monthly_income * HUNDRED)


def calculate_debt_to_income_ratio(total_debt: Decimal, monthly_income: Decimal) -> Decimal:
    """Outstanding debt as a percentage of annual income."""
    annual_income = monthly_income * MONTHS_PER_YEAR
    if annual_income == ZERO:
        return ZERO
    return total_debt / annual_income * HUNDRED


def calculate_emergency_fund_months(portfolio_value: Decimal, monthly_expenses: Decimal) -> Decimal:
    if monthly_expenses == ZERO:
        return ZERO
    return portfolio_value / monthly_expenses


def calculate_goal_progress(
        goals: Iterable[Goal],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> list[GoalProgress]:
    """Progress of active goals only."""
    results = []
    for goal in goals:
        if not goal.is_active:
            continue
        target = to_base(goal.target_amount.amount, goal.target_amount.currency, rates_to_base)
        current = to_base(goal.current_amount.amount, goal.current_amount.currency, rates_to_base)
        progress = ZERO if target == ZERO else min(HUNDRED, current / target * HUNDRED)
        results.append(GoalProgress(
            goal_id=goal.id,
            name=goal.name,
            progress=progress.quantize(PERCENTAGE_PRECISION),
            target_amount=target,
            current_amount=current,
        ))
    return results


# =============================================================================
# HEALTH SCORE
# =============================================================================

def _points_at_least(value: Decimal, buckets: list[tuple[Decimal, int]]) -> int:
    for breakpoint, points in buckets:
        if value >= breakpoint:
            return points
    return 0


def _points_at_most(value: Decimal, buckets: list[tuple[Decimal, int]]) -> int:
    for breakpoint, points in buckets:
        if value <= breakpoint:
            return points
    return 0


def calculate_financial_health_score(
        savings_rate: Decimal,
        debt_to_income_ratio: Decimal,
        emergency_fund_months: Decimal,
        portfolio_value: Decimal,
) -> int:
    """Additive 0-100 score from four independently capped buckets."""
    score = (
        _points_at_least(savings_rate, SAVINGS_RATE_POINTS)
        + _points_at_most(debt_to_income_ratio, DEBT_TO_INCOME_POINTS)
        + _points_at_least(emergency_fund_months, EMERGENCY_FUND_POINTS)
        + (PORTFOLIO_BONUS_POINTS if portfolio_value > ZERO else 0)
    )
    return max(0, min(MAX_HEALTH_SCORE, score))


def get_health_status(score: int) -> HealthStatus:
    for minimum, status, description in HEALTH_STATUS_THRESHOLDS:
        if score >= minimum:
            return HealthStatus(status=status, description=description)
    _, status, description = HEALTH_STATUS_THRESHOLDS[-1]
    return HealthStatus(status=status, description=description)


# =============================================================================
# AGGREGATE
# =============================================================================

def _record_currencies(
        investments: list[Investment],
        incomes: list[Income],
        expenses: list[Expense],
        loans: list[Loan],
        goals: list[Goal],
) -> set[str]:
    codes = {i.currency for i in investments}
    codes |= {i.currency for i in incomes if i.is_active}
    codes |= {e.currency for e in expenses}
    codes |= {loan.currency for loan in loans}
    for goal in goals:
        if goal.is_active:
            codes |= {goal.target_amount.currency, goal.current_amount.currency}
    return codes


def calculate_dashboard_metrics(
        investments: Iterable[Investment],
        incomes: Iterable[Income],
        expenses: Iterable[Expense],
        loans: Iterable[Loan],
        goals: Iterable[Goal],
        cash_savings: Decimal = ZERO,
        base_currency: str | None = None,
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> DashboardMetrics:
    """
    Compose every dashboard metric.

    Without `rates_to_base` amounts are summed as-is (single-currency data).
    With it, every amount is converted into base_currency; currencies missing
    from the map are summed natively and listed in `unconverted`.
    """
    investments, incomes, expenses = list(investments), list(incomes), list(expenses)
    loans, goals = list(loans), list(goals)

    unconverted: list[str] = []
    if rates_to_base is not None:
        unconverted = sorted(
            _record_currencies(investments, incomes, expenses, loans, goals) - set(rates_to_base)
        )
        if unconverted:
            logger.warning(f"Dashboard metrics include unconverted currencies: {', '.join(unconverted)}")

    portfolio_value = calculate_portfolio_value(investments, rates_to_base)
    monthly_income = calculate_monthly_income(incomes, rates_to_base)
    monthly_expenses = calculate_monthly_expenses(expenses, rates_to_base)
    total_debt = calculate_total_debt(loans, rates_to_base)

    savings_rate = calculate_savings_rate(monthly_income, monthly_expenses)
    debt_to_income = calculate_debt_to_income_ratio(total_debt, monthly_income)
    emergency_months = calculate_emergency_fund_months(portfolio_value, monthly_expenses)
    score = calculate_financial_health_score(savings_rate, debt_to_income, emergency_months, portfolio_value)

    return DashboardMetrics(
        net_worth=calculate_net_worth(portfolio_value, total_debt, cash_savings).quantize(CURRENCY_PRECISION),
        portfolio_value=portfolio_value.quantize(CURRENCY_PRECISION),
        total_debt=total_debt.quantize(CURRENCY_PRECISION),
        monthly_income=monthly_income.quantize(CURRENCY_PRECISION),
        monthly_expenses=monthly_expenses.quantize(CURRENCY_PRECISION),
        savings_rate=savings_rate.quantize(PERCENTAGE_PRECISION),
        debt_to_income_ratio=debt_to_income.quantize(PERCENTAGE_PRECISION),
        emergency_fund_months=emergency_months.quantize(PERCENTAGE_PRECISION),
        goal_progress=calculate_goal_progress(goals, rates_to_base),
        financial_health_score=score,
        health_status=get_health_status(score),
        currency=base_currency,
        unconverted=unconverted,
    )
