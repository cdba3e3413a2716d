# backend/finance_engine/schemas/loans.py
"""
Pydantic schemas for the loan engine.

These schemas handle:
- Amortization of a loan's current balance
- Payment calculation from principal, rate and term
- Payoff strategies and payment-based debt-to-income
- Debt currency exposure and multi-currency projections
"""

import datetime as dt
from decimal import Decimal

from pydantic import Field

from finance_engine.schemas.base import ApiModel, CurrencyCode, MoneySchema, NonNegativeAmount
from finance_engine.schemas.records import LoanInput
from finance_engine.services.constants import MAX_AMORTIZATION_MONTHS, MAX_RECORDS_PER_REQUEST
from finance_engine.services.loans.types import (
    AmortizationResult,
    AmortizationScheduleEntry,
    LoanCurrencyExposure,
    LoanProjectionMonth,
    PayoffStrategy,
)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class AmortizationRequest(ApiModel):
    loan: LoanInput
    as_of: dt.date | None = Field(default=None, description="Valuation date (defaults to today)")


class PaymentRequest(ApiModel):
    principal: NonNegativeAmount
    annual_rate: Decimal = Field(..., ge=0, le=100, description="Annual rate in percent")
    term_months: int = Field(..., ge=1, le=MAX_AMORTIZATION_MONTHS)
    currency: CurrencyCode = "USD"


class LoansRequest(ApiModel):
    loans: list[LoanInput] = Field(..., max_length=MAX_RECORDS_PER_REQUEST)
    as_of: dt.date | None = None


class DebtToIncomeRequest(LoansRequest):
    monthly_income: NonNegativeAmount


class LoanExposureRequest(ApiModel):
    loans: list[LoanInput] = Field(..., max_length=MAX_RECORDS_PER_REQUEST)
    base_currency: CurrencyCode | None = None


class LoanProjectionRequest(ApiModel):
    loans: list[LoanInput] = Field(..., max_length=MAX_RECORDS_PER_REQUEST)
    target_currency: CurrencyCode | None = None
    months: int | None = Field(default=None, ge=1, le=120)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ScheduleEntryResponse(ApiModel):
    payment_number: int
    payment_date: dt.date | None
    payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal

    @classmethod
    def from_domain(cls, entry: AmortizationScheduleEntry) -> "ScheduleEntryResponse":
        return cls(
            payment_number=entry.payment_number,
            payment_date=entry.payment_date,
            payment=entry.payment,
            principal_payment=entry.principal_payment,
            interest_payment=entry.interest_payment,
            remaining_balance=entry.remaining_balance,
        )


class AmortizationResponse(ApiModel):
    loan_id: str
    schedule: list[ScheduleEntryResponse]
    total_interest: Decimal
    payoff_date: dt.date
    total_payments: int
    currency: str
    is_paid_off: bool
    message: str | None = None

    @classmethod
    def from_domain(cls, loan_id: str, result: AmortizationResult) -> "AmortizationResponse":
        return cls(
            loan_id=loan_id,
            schedule=[ScheduleEntryResponse.from_domain(e) for e in result.schedule],
            total_interest=result.total_interest,
            payoff_date=result.payoff_date,
            total_payments=result.total_payments,
            currency=result.currency,
            is_paid_off=result.is_paid_off,
            message=result.message,
        )


class PaymentResponse(ApiModel):
    monthly_payment: MoneySchema
    total_paid: Decimal
    total_interest: Decimal


class PayoffStrategyResponse(ApiModel):
    name: str
    order: list[str] = Field(..., description="Loan ids in payoff order")
    total_debt: Decimal
    total_monthly_payment: Decimal
    total_interest: Decimal
    estimated_payoff_months: int
    description: str

    @classmethod
    def from_domain(cls, strategy: PayoffStrategy) -> "PayoffStrategyResponse":
        return cls(
            name=strategy.name,
            order=[loan.id for loan in strategy.order],
            total_debt=strategy.total_debt,
            total_monthly_payment=strategy.total_monthly_payment,
            total_interest=strategy.total_interest,
            estimated_payoff_months=strategy.estimated_payoff_months,
            description=strategy.description,
        )


class PayoffStrategiesResponse(ApiModel):
    snowball: PayoffStrategyResponse
    avalanche: PayoffStrategyResponse
    upcoming_payments: list[str] = Field(
        default_factory=list,
        description="Ids of loans with a payment due within 7 days"
    )


class DebtToIncomeResponse(ApiModel):
    ratio: Decimal
    total_monthly_payment: Decimal
    monthly_income: Decimal
    risk_level: str
    recommendation: str


class LoanCurrencyExposureResponse(ApiModel):
    currency: str
    total_balance: MoneySchema
    percentage: Decimal
    loan_count: int

    @classmethod
    def from_domain(cls, exposure: LoanCurrencyExposure) -> "LoanCurrencyExposureResponse":
        return cls(
            currency=exposure.currency,
            total_balance=MoneySchema.from_domain(exposure.total_balance),
            percentage=exposure.percentage,
            loan_count=exposure.loan_count,
        )


class LoanExposureListResponse(ApiModel):
    base_currency: str
    exposures: list[LoanCurrencyExposureResponse]


class LoanProjectionMonthResponse(ApiModel):
    month: dt.date
    total_debt: Decimal
    total_payments: Decimal
    currency_breakdown: dict[str, Decimal]
    exchange_rate_impact: Decimal

    @classmethod
    def from_domain(cls, month: LoanProjectionMonth) -> "LoanProjectionMonthResponse":
        return cls(
            month=month.month,
            total_debt=month.total_debt,
            total_payments=month.total_payments,
            currency_breakdown=month.currency_breakdown,
            exchange_rate_impact=month.exchange_rate_impact,
        )


class LoanProjectionResponse(ApiModel):
    target_currency: str
    projections: list[LoanProjectionMonthResponse]
