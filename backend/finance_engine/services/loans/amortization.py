# backend/finance_engine/services/loans/amortization.py
"""
Fixed-payment loan amortization.

All functions are pure and use Decimal arithmetic.

Formulas:
    r = annual_rate_percent / 100 / 12
    payment = P × r × (1 + r)^n / ((1 + r)^n − 1)      (r > 0)
    payment = P / n                                    (r = 0)

    Each month:
        interest = balance × r
        principal_part = min(payment − interest, balance)
        balance -= principal_part

Schedule rules:
- Amounts are kept in cents, so the balance reaches exactly zero
- Stops as soon as the balance is below PAYOFF_TOLERANCE
- At most min(term, MAX_AMORTIZATION_MONTHS) rows
- If the payment does not cover the interest the loan never amortizes:
  a warning is logged and the schedule stops there
- A rounding residual left after the final scheduled month (smaller than
  one payment) is folded into the last principal payment
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, DecimalException

from finance_engine.models import Loan
from finance_engine.services.constants import (
    CURRENCY_PRECISION,
    DEFAULT_TERM_MONTHS,
    HUNDRED,
    MAX_AMORTIZATION_MONTHS,
    MONTHS_PER_YEAR,
    ONE,
    PAYOFF_TOLERANCE,
    ZERO,
)
from finance_engine.services.exceptions import CalculationError, ValidationError
from finance_engine.services.loans.types import AmortizationResult, AmortizationScheduleEntry
from finance_engine.utils.date_utils import add_months

logger = logging.getLogger(__name__)

PAID_OFF_MESSAGE = "This loan has been paid off"


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return Decimal(annual_rate_percent) / HUNDRED / MONTHS_PER_YEAR


def _validate_terms(annual_rate_percent: Decimal, term_months: int) -> None:
    if term_months < 1:
        raise ValidationError(f"term_months must be at least 1, got {term_months}", field="term_months")
    if annual_rate_percent < 0:
        raise ValidationError(
            f"interest rate must not be negative, got {annual_rate_percent}",
            field="interest_rate",
        )


# =============================================================================
# PAYMENT
# =============================================================================

def calculate_monthly_payment(
        principal: Decimal,
        annual_rate_percent: Decimal,
        term_months: int,
) -> Decimal:
    """
    Fixed monthly payment that repays `principal` over `term_months`.

    Example:
        >>> calculate_monthly_payment(Decimal("25000"), Decimal("5.5"), 60)
        Decimal('477.53')

    Raises:
        ValidationError: principal <= 0, term < 1 or negative rate
        CalculationError: The formula overflowed
    """
    if principal <= 0:
        raise ValidationError(f"principal must be positive, got {principal}", field="principal")
    _validate_terms(annual_rate_percent, term_months)

    r = monthly_rate(annual_rate_percent)
    if r == ZERO:
        return _cents(principal / term_months)

    try:
        growth = (ONE + r) ** term_months
        payment = principal * r * growth / (growth - ONE)
    except DecimalException as e:
        raise CalculationError(f"Monthly payment formula failed: {e}", operation="monthly_payment")
    return _cents(payment)


# =============================================================================
# SCHEDULE
# =============================================================================

def generate_amortization_schedule(
        principal: Decimal,
        annual_rate_percent: Decimal,
        term_months: int,
        payment: Decimal,
        first_payment_date: date | None = None,
) -> list[AmortizationScheduleEntry]:
    """
    Month-by-month amortization schedule.

    Args:
        principal: Balance to amortize (nothing to do when <= 0)
        annual_rate_percent: Nominal annual rate, e.g. 5.5
        term_months: Maximum number of payments
        payment: Fixed monthly payment
        first_payment_date: Due date of payment 1; later payments follow
            monthly (day clamped to the month length)

    Raises:
        ValidationError: term < 1, negative rate or payment <= 0
    """
    _validate_terms(annual_rate_percent, term_months)
    if payment <= 0:
        raise ValidationError(f"payment must be positive, got {payment}", field="monthly_payment")
    if principal <= 0:
        return []

    r = monthly_rate(annual_rate_percent)
    balance = _cents(principal)
    payment = _cents(payment)
    max_payments = min(term_months, MAX_AMORTIZATION_MONTHS)
    schedule: list[AmortizationScheduleEntry] = []

    for number in range(1, max_payments + 1):
        if balance < PAYOFF_TOLERANCE:
            break

        interest = _cents(balance * r)
        principal_part = min(payment - interest, balance)
        if principal_part <= ZERO:
            logger.warning(
                f"Payment {payment} does not cover interest {interest} on balance {balance}; "
                f"loan will not amortize (stopped after {len(schedule)} payments)"
            )
            break

        balance -= principal_part
        if number == max_payments and ZERO < balance < payment:
            logger.debug(f"Folding residual {balance} into final payment")
            principal_part += balance
            balance = ZERO

        schedule.append(AmortizationScheduleEntry(
            payment_number=number,
            payment_date=add_months(first_payment_date, number - 1) if first_payment_date else None,
            payment=principal_part + interest,
            principal_payment=principal_part,
            interest_payment=interest,
            remaining_balance=balance,
        ))

    return schedule


def calculate_total_interest(schedule: list[AmortizationScheduleEntry]) -> Decimal:
    return sum((entry.interest_payment for entry in schedule), ZERO)


def calculate_payoff_date(schedule: list[AmortizationScheduleEntry], start: date) -> date:
    """`start` plus one month per scheduled payment."""
    return add_months(start, len(schedule))


# =============================================================================
# LOAN-LEVEL
# =============================================================================

def _empty_result(as_of: date, currency: str) -> AmortizationResult:
    return AmortizationResult(
        schedule=[],
        total_interest=ZERO,
        payoff_date=as_of,
        total_payments=0,
        currency=currency,
    )


def amortize_loan(loan: Loan, as_of: date | None = None) -> AmortizationResult:
    """
    Amortize a loan's current balance.

    Never raises for calculation failures: a paid-off loan short-circuits
    to an empty "paid off" result. A loan without a monthly payment, or a
    failed calculation, is logged and returned as an empty zeroed result.
    """
    as_of = as_of or date.today()
    currency = loan.current_balance.currency

    if loan.current_balance.amount <= 0:
        return AmortizationResult(
            schedule=[],
            total_interest=ZERO,
            payoff_date=as_of,
            total_payments=0,
            currency=currency,
            is_paid_off=True,
            message=PAID_OFF_MESSAGE,
        )

    if loan.monthly_payment.amount <= 0:
        logger.warning(f"Loan {loan.id} has no monthly payment; cannot amortize")
        return _empty_result(as_of, currency)

    try:
        schedule = generate_amortization_schedule(
            principal=loan.current_balance.amount,
            annual_rate_percent=loan.interest_rate,
            term_months=loan.term_months or DEFAULT_TERM_MONTHS,
            payment=loan.monthly_payment.amount,
            first_payment_date=loan.next_payment_date,
        )
    except (CalculationError, ArithmeticError) as e:
        logger.error(f"Amortization failed for loan {loan.id}: {e}")
        return _empty_result(as_of, currency)

    return AmortizationResult(
        schedule=schedule,
        total_interest=calculate_total_interest(schedule),
        payoff_date=calculate_payoff_date(schedule, as_of),
        total_payments=len(schedule),
        currency=currency,
    )
