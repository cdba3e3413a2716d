# backend/finance_engine/services/dashboard/normalizer.py
"""
Income and expense normalization.

Every recurring amount is reduced to a monthly equivalent with fixed
calendar-average factors:

    daily × 30.44    weekly × 4.33    bi-weekly × 2.17    monthly × 1
    quarterly ÷ 3    annually ÷ 12

Incomes count only when `is_active`; expenses carry no such flag and
always count.

Currency handling:
    With `rates_to_base`, each monthly amount is converted into the base
    currency. A record whose currency has no rate contributes its native
    amount; the dashboard aggregator reports such currencies.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from finance_engine.config import settings
from finance_engine.models import Expense, Frequency, Income
from finance_engine.services.constants import (
    CURRENCY_PRECISION,
    FREQUENCY_DIVISORS,
    FREQUENCY_MULTIPLIERS,
    ZERO,
)
from finance_engine.utils.date_utils import add_months, month_end, month_start

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlowMonth:
    month: date
    income: Decimal
    expenses: Decimal
    net: Decimal


# =============================================================================
# NORMALIZATION
# =============================================================================

def convert_to_monthly(amount: Decimal, frequency: Frequency | str) -> Decimal:
    """
    Monthly equivalent of a per-period amount.

    Unknown frequencies return the amount unchanged.
    """
    key = frequency.value if isinstance(frequency, Frequency) else str(frequency).lower()
    if key in FREQUENCY_MULTIPLIERS:
        return amount * FREQUENCY_MULTIPLIERS[key]
    if key in FREQUENCY_DIVISORS:
        return amount / FREQUENCY_DIVISORS[key]
    logger.debug(f"Unknown frequency '{frequency}', treating amount as monthly")
    return amount


def to_base(
        value: Decimal,
        currency: str,
        rates_to_base: Mapping[str, Decimal] | None,
) -> Decimal:
    """Value in the base currency, or unchanged when no rate is known."""
    if rates_to_base is None:
        return value
    rate = rates_to_base.get(currency)
    if rate is None:
        return value
    return value * rate


def calculate_monthly_income(
        incomes: Iterable[Income],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> Decimal:
    """Monthly income from active income records."""
    total = ZERO
    for income in incomes:
        if not income.is_active:
            continue
        monthly = convert_to_monthly(income.amount.amount, income.frequency)
        total += to_base(monthly, income.currency, rates_to_base)
    return total


def calculate_monthly_expenses(
        expenses: Iterable[Expense],
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> Decimal:
    """Monthly spending from every expense record."""
    total = ZERO
    for expense in expenses:
        monthly = convert_to_monthly(expense.amount.amount, expense.frequency)
        total += to_base(monthly, expense.currency, rates_to_base)
    return total


# =============================================================================
# PROJECTION
# =============================================================================

def _in_month(start: date | None, end: date | None, first: date, last: date) -> bool:
    return (start is None or start <= last) and (end is None or end >= first)


def project_cash_flows(
        incomes: Iterable[Income],
        expenses: Iterable[Expense],
        start_month: date,
        months: int | None = None,
        rates_to_base: Mapping[str, Decimal] | None = None,
) -> list[CashFlowMonth]:
    """
    Monthly income, expenses and net cash flow for the coming months.

    An income counts in a month when it is active, started by the month's
    end and has not ended before the month's start. Expenses use the same
    date window without the active flag.
    """
    months = settings.projection_horizon_months if months is None else months
    incomes = list(incomes)
    expenses = list(expenses)
    first_month = month_start(start_month)
    projection = []

    for offset in range(months):
        first = add_months(first_month, offset)
        last = month_end(first)

        income_total = calculate_monthly_income(
            [i for i in incomes if _in_month(i.start_date, i.end_date, first, last)],
            rates_to_base,
        )
        expense_total = calculate_monthly_expenses(
            [e for e in expenses if _in_month(e.start_date, e.end_date, first, last)],
            rates_to_base,
        )

        income_total = income_total.quantize(CURRENCY_PRECISION)
        expense_total = expense_total.quantize(CURRENCY_PRECISION)
        projection.append(CashFlowMonth(
            month=first,
            income=income_total,
            expenses=expense_total,
            net=income_total - expense_total,
        ))

    return projection
