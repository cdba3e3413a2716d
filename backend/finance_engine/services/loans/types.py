# backend/finance_engine/services/loans/types.py
"""
Internal data types for the loan engine.

These dataclasses are NOT Pydantic schemas - those are defined in
finance_engine/schemas/loans.py for API serialization.

Design Principles:
- Use Decimal for ALL financial values (never float)
- Amounts in a schedule are rounded to cents
- Results are derived per request and never stored

Type Hierarchy:
    AmortizationScheduleEntry - One monthly payment
    AmortizationResult        - Schedule plus totals for one loan
    PayoffStrategy            - One ordering of loans (snowball / avalanche)
    PayoffStrategies          - Both orderings
    DebtToIncomeAssessment    - Risk band and advice for a payment ratio
    LoanProjectionMonth       - One month of a multi-currency projection
    LoanCurrencyExposure      - Debt held in one currency
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from finance_engine.models import Loan
from finance_engine.services.currency.types import CurrencyAmount


# =============================================================================
# AMORTIZATION
# =============================================================================

@dataclass(frozen=True)
class AmortizationScheduleEntry:
    """
    One row of an amortization schedule.

    Attributes:
        payment_number: 1-based month index
        payment_date: Due date when the schedule is anchored to a date
        payment: principal_payment + interest_payment
        remaining_balance: Balance after this payment (never negative)
    """

    payment_number: int
    payment_date: date | None
    payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal


@dataclass
class AmortizationResult:
    """
    Amortization of one loan.

    A paid-off loan has an empty schedule, is_paid_off=True and a message.
    A failed calculation also has an empty schedule and zero totals, but
    is_paid_off=False.
    """

    schedule: list[AmortizationScheduleEntry]
    total_interest: Decimal
    payoff_date: date
    total_payments: int
    currency: str
    is_paid_off: bool = False
    message: str | None = None


# =============================================================================
# STRATEGIES
# =============================================================================

@dataclass
class PayoffStrategy:
    """
    An order in which to pay off loans.

    Attributes:
        name: "snowball" (smallest balance first) or "avalanche"
            (highest interest rate first)
        estimated_payoff_months: ceil(total_debt / total_monthly_payment)
    """

    name: str
    order: list[Loan]
    total_debt: Decimal
    total_monthly_payment: Decimal
    total_interest: Decimal
    estimated_payoff_months: int
    description: str


@dataclass
class PayoffStrategies:
    snowball: PayoffStrategy
    avalanche: PayoffStrategy


@dataclass(frozen=True)
class DebtToIncomeAssessment:
    """Risk band of a debt-to-income ratio (low / medium / high) with advice."""

    ratio: Decimal
    risk_level: str
    recommendation: str


# =============================================================================
# MULTI-CURRENCY PROJECTIONS
# =============================================================================

@dataclass
class LoanProjectionMonth:
    """
    One month of a multi-currency debt projection.

    Attributes:
        month: First day of the projected month
        total_debt: Σ balance × rate for this month, in the target currency
        total_payments: Σ payment × rate for this month
        currency_breakdown: Converted balance per loan currency
        exchange_rate_impact: Σ balance × rate_m − Σ balance × rate_0; the
            part of this month's debt caused by rate movement rather than
            amortization
    """

    month: date
    total_debt: Decimal
    total_payments: Decimal
    currency_breakdown: dict[str, Decimal] = field(default_factory=dict)
    exchange_rate_impact: Decimal = Decimal("0")


@dataclass(frozen=True)
class LoanCurrencyExposure:
    currency: str
    total_balance: CurrencyAmount
    percentage: Decimal
    loan_count: int
