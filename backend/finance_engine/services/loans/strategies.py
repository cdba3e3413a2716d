# backend/finance_engine/services/loans/strategies.py
"""
Debt payoff strategies and payment-based ratios.

Snowball pays the smallest balance first (quick wins); avalanche pays the
highest interest rate first (least total interest). Both use the combined
monthly payment of every active loan, so their payoff estimate is the same;
they differ in order and in which loan is cleared first.

Amounts are summed as-is: callers pass loans already expressed in one
currency (or accept a mixed-currency total).
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from finance_engine.models import Loan
from finance_engine.services.constants import (
    DEBT_TO_INCOME_HIGH_RECOMMENDATION,
    DEBT_TO_INCOME_NO_INCOME_RECOMMENDATION,
    DEBT_TO_INCOME_RISK_BANDS,
    HUNDRED,
    UPCOMING_PAYMENT_DAYS,
    ZERO,
)
from finance_engine.services.loans.amortization import amortize_loan
from finance_engine.services.loans.types import DebtToIncomeAssessment, PayoffStrategies, PayoffStrategy

logger = logging.getLogger(__name__)

SNOWBALL_DESCRIPTION = (
    "Pay minimums on all loans, then put extra money toward the smallest balance first. "
    "Builds momentum through quick wins."
)
AVALANCHE_DESCRIPTION = (
    "Pay minimums on all loans, then put extra money toward the highest interest rate first. "
    "Minimizes the total interest paid."
)


def _active(loans: Iterable[Loan]) -> list[Loan]:
    return [loan for loan in loans if loan.current_balance.amount > 0]


def calculate_total_monthly_payment(loans: Iterable[Loan]) -> Decimal:
    return sum((loan.monthly_payment.amount for loan in _active(loans)), ZERO)


def calculate_payoff_strategies(loans: Iterable[Loan], as_of: date | None = None) -> PayoffStrategies:
    """
    Snowball and avalanche orderings of the active loans.

    Total interest per strategy is the remaining interest of each loan's own
    schedule; estimated payoff months is ceil(total_debt / total_monthly).
    """
    active = _active(loans)
    total_debt = sum((loan.current_balance.amount for loan in active), ZERO)
    total_monthly = calculate_total_monthly_payment(active)
    total_interest = sum((amortize_loan(loan, as_of).total_interest for loan in active), ZERO)

    if total_debt > ZERO and total_monthly > ZERO:
        payoff_months = math.ceil(total_debt / total_monthly)
    else:
        payoff_months = 0

    def strategy(name: str, order: list[Loan], description: str) -> PayoffStrategy:
        return PayoffStrategy(
            name=name,
            order=order,
            total_debt=total_debt,
            total_monthly_payment=total_monthly,
            total_interest=total_interest,
            estimated_payoff_months=payoff_months,
            description=description,
        )

    return PayoffStrategies(
        snowball=strategy(
            "snowball",
            sorted(active, key=lambda loan: (loan.current_balance.amount, loan.id)),
            SNOWBALL_DESCRIPTION,
        ),
        avalanche=strategy(
            "avalanche",
            sorted(active, key=lambda loan: (-loan.interest_rate, loan.id)),
            AVALANCHE_DESCRIPTION,
        ),
    )


def calculate_debt_to_income_from_payments(loans: Iterable[Loan], monthly_income: Decimal) -> Decimal:
    """Monthly loan payments as a percentage of monthly income (0 without income)."""
    if monthly_income <= ZERO:
        return ZERO
    return calculate_total_monthly_payment(loans) / monthly_income * HUNDRED


def assess_debt_to_income(ratio: Decimal, monthly_income: Decimal) -> DebtToIncomeAssessment:
    """
    Classify a debt-to-income ratio.

    Without income the ratio is meaningless, so the level is medium and the
    advice asks for income data. Otherwise: <= 20 low, <= 36 medium, else high.
    """
    if monthly_income <= ZERO:
        return DebtToIncomeAssessment(ratio, "medium", DEBT_TO_INCOME_NO_INCOME_RECOMMENDATION)
    for ceiling, level, recommendation in DEBT_TO_INCOME_RISK_BANDS:
        if ratio <= ceiling:
            return DebtToIncomeAssessment(ratio, level, recommendation)
    return DebtToIncomeAssessment(ratio, "high", DEBT_TO_INCOME_HIGH_RECOMMENDATION)


def get_upcoming_payments(
        loans: Iterable[Loan],
        as_of: date,
        days: int = UPCOMING_PAYMENT_DAYS,
) -> list[Loan]:
    """Active loans whose next payment is due within `days` of as_of (overdue included)."""
    horizon = as_of + timedelta(days=days)
    upcoming = [loan for loan in _active(loans) if loan.next_payment_date <= horizon]
    return sorted(upcoming, key=lambda loan: loan.next_payment_date)
