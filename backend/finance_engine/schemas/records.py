# backend/finance_engine/schemas/records.py
"""
Pydantic schemas for the financial records a request carries.

The engine has no storage: callers send the records to compute over in the
request body. Each input converts to the frozen domain dataclass with
`to_domain()`; every amount on a record is in the record's `currency`.
"""

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import Field, model_validator

from finance_engine.models import (
    Expense,
    Frequency,
    Goal,
    Income,
    IncomeType,
    Investment,
    InvestmentType,
    Loan,
    LoanType,
)
from finance_engine.schemas.base import ApiModel, CurrencyCode, NonNegativeAmount
from finance_engine.services.currency.types import CurrencyAmount


def _new_id() -> str:
    return uuid.uuid4().hex


class RecordInput(ApiModel):
    """Fields shared by every record."""

    id: str = Field(default_factory=_new_id, max_length=64)
    user_id: str = Field(default="", max_length=64)
    currency: CurrencyCode


# =============================================================================
# INVESTMENTS
# =============================================================================

class InvestmentInput(RecordInput):
    type: InvestmentType = InvestmentType.OTHER
    name: str = Field(..., min_length=1, max_length=200)
    symbol: str | None = Field(default=None, max_length=20)
    exchange: str | None = Field(default=None, max_length=20)
    quantity: NonNegativeAmount
    purchase_price: NonNegativeAmount
    current_price: NonNegativeAmount | None = None
    purchase_date: dt.date | None = None

    def to_domain(self) -> Investment:
        return Investment(
            id=self.id,
            user_id=self.user_id,
            type=self.type,
            name=self.name,
            symbol=self.symbol,
            exchange=self.exchange,
            quantity=self.quantity,
            purchase_price=CurrencyAmount(self.purchase_price, self.currency),
            current_price=(
                CurrencyAmount(self.current_price, self.currency)
                if self.current_price is not None else None
            ),
            purchase_date=self.purchase_date,
            currency=self.currency,
        )


# =============================================================================
# INCOME & EXPENSES
# =============================================================================

class _DatedInput(RecordInput):
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class IncomeInput(_DatedInput):
    source: str = Field(..., min_length=1, max_length=200)
    type: IncomeType = IncomeType.OTHER
    amount: NonNegativeAmount
    frequency: Frequency = Frequency.MONTHLY
    start_date: dt.date
    is_active: bool = True

    def to_domain(self) -> Income:
        return Income(
            id=self.id,
            user_id=self.user_id,
            source=self.source,
            type=self.type,
            amount=CurrencyAmount(self.amount, self.currency),
            frequency=self.frequency,
            start_date=self.start_date,
            end_date=self.end_date,
            is_active=self.is_active,
        )


class ExpenseInput(_DatedInput):
    category: str = Field(..., min_length=1, max_length=100)
    name: str = Field(default="", max_length=200)
    amount: NonNegativeAmount
    frequency: Frequency = Frequency.MONTHLY
    is_fixed: bool = False

    def to_domain(self) -> Expense:
        return Expense(
            id=self.id,
            user_id=self.user_id,
            category=self.category,
            name=self.name or self.category,
            amount=CurrencyAmount(self.amount, self.currency),
            frequency=self.frequency,
            start_date=self.start_date,
            end_date=self.end_date,
            is_fixed=self.is_fixed,
        )


# =============================================================================
# LOANS
# =============================================================================

class LoanInput(RecordInput):
    name: str = Field(..., min_length=1, max_length=200)
    type: LoanType = LoanType.OTHER
    lender: str | None = Field(default=None, max_length=200)
    principal: NonNegativeAmount
    current_balance: NonNegativeAmount
    interest_rate: Decimal = Field(..., ge=0, le=100, description="Annual rate in percent")
    term_months: int = Field(..., ge=1, le=720)
    monthly_payment: NonNegativeAmount
    start_date: dt.date
    next_payment_date: dt.date

    def to_domain(self) -> Loan:
        return Loan(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            type=self.type,
            lender=self.lender,
            principal=CurrencyAmount(self.principal, self.currency),
            current_balance=CurrencyAmount(self.current_balance, self.currency),
            interest_rate=self.interest_rate,
            term_months=self.term_months,
            monthly_payment=CurrencyAmount(self.monthly_payment, self.currency),
            start_date=self.start_date,
            next_payment_date=self.next_payment_date,
        )


# =============================================================================
# GOALS
# =============================================================================

class GoalInput(RecordInput):
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: NonNegativeAmount
    current_amount: NonNegativeAmount = Decimal("0")
    target_date: dt.date | None = None
    is_active: bool = True

    def to_domain(self) -> Goal:
        return Goal(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            target_amount=CurrencyAmount(self.target_amount, self.currency),
            current_amount=CurrencyAmount(self.current_amount, self.currency),
            target_date=self.target_date,
            is_active=self.is_active,
        )
