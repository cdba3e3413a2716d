# backend/finance_engine/routers/loans.py
"""
Loan endpoints.

- POST /loans/amortization              - Schedule for a loan's current balance
- POST /loans/payment                   - Monthly payment for principal, rate, term
- POST /loans/strategies                - Snowball and avalanche payoff orders
- POST /loans/debt-to-income            - Loan payments as a share of income
- POST /loans/currency-exposure         - Debt per currency
- POST /loans/multi-currency-projections - Debt projected into one currency
"""

from datetime import date

from fastapi import APIRouter, Depends, Request

from finance_engine.config import settings
from finance_engine.dependencies import get_conversion_service, get_loan_projection_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, limiter
from finance_engine.schemas.base import MoneySchema
from finance_engine.schemas.loans import (
    AmortizationRequest,
    AmortizationResponse,
    DebtToIncomeRequest,
    DebtToIncomeResponse,
    LoanCurrencyExposureResponse,
    LoanExposureListResponse,
    LoanExposureRequest,
    LoanProjectionMonthResponse,
    LoanProjectionRequest,
    LoanProjectionResponse,
    LoansRequest,
    PayoffStrategiesResponse,
    PayoffStrategyResponse,
    PaymentRequest,
    PaymentResponse,
)
from finance_engine.services.constants import CURRENCY_PRECISION, PERCENTAGE_PRECISION, ZERO
from finance_engine.services.currency.conversion import CurrencyConversionService
from finance_engine.services.currency.registry import require_supported
from finance_engine.services.currency.types import CurrencyAmount
from finance_engine.services.loans import (
    LoanProjectionService,
    amortize_loan,
    assess_debt_to_income,
    calculate_debt_to_income_from_payments,
    calculate_loan_currency_exposure,
    calculate_monthly_payment,
    calculate_payoff_strategies,
    calculate_total_monthly_payment,
    get_upcoming_payments,
)

router = APIRouter(
    prefix="/loans",
    tags=["Loans"],
)


@router.post(
    "/amortization",
    response_model=AmortizationResponse,
    summary="Amortization schedule for a loan",
)
def get_amortization(body: AmortizationRequest) -> AmortizationResponse:
    """
    Schedule from the loan's current balance, starting at its next payment
    date. A paid-off loan returns an empty schedule with `isPaidOff: true`.
    """
    loan = body.loan.to_domain()
    return AmortizationResponse.from_domain(loan.id, amortize_loan(loan, body.as_of))


@router.post(
    "/payment",
    response_model=PaymentResponse,
    summary="Monthly payment for a fully amortizing loan",
)
def get_payment(body: PaymentRequest) -> PaymentResponse:
    """Standard annuity payment; a 0% loan pays principal / term."""
    payment = calculate_monthly_payment(body.principal, body.annual_rate, body.term_months)
    total_paid = (payment * body.term_months).quantize(CURRENCY_PRECISION)
    return PaymentResponse(
        monthly_payment=MoneySchema.from_domain(CurrencyAmount(payment, body.currency)),
        total_paid=total_paid,
        total_interest=max(total_paid - body.principal, ZERO).quantize(CURRENCY_PRECISION),
    )


@router.post(
    "/strategies",
    response_model=PayoffStrategiesResponse,
    summary="Snowball and avalanche payoff strategies",
)
def get_strategies(body: LoansRequest) -> PayoffStrategiesResponse:
    loans = [loan.to_domain() for loan in body.loans]
    as_of = body.as_of or date.today()
    strategies = calculate_payoff_strategies(loans, as_of)
    return PayoffStrategiesResponse(
        snowball=PayoffStrategyResponse.from_domain(strategies.snowball),
        avalanche=PayoffStrategyResponse.from_domain(strategies.avalanche),
        upcoming_payments=[loan.id for loan in get_upcoming_payments(loans, as_of)],
    )


@router.post(
    "/debt-to-income",
    response_model=DebtToIncomeResponse,
    summary="Monthly loan payments as a percentage of monthly income",
)
def get_debt_to_income(body: DebtToIncomeRequest) -> DebtToIncomeResponse:
    """Amounts are summed as sent; all loans are expected in one currency."""
    loans = [loan.to_domain() for loan in body.loans]
    ratio = calculate_debt_to_income_from_payments(loans, body.monthly_income).quantize(PERCENTAGE_PRECISION)
    assessment = assess_debt_to_income(ratio, body.monthly_income)
    return DebtToIncomeResponse(
        ratio=ratio,
        total_monthly_payment=calculate_total_monthly_payment(loans).quantize(CURRENCY_PRECISION),
        monthly_income=body.monthly_income,
        risk_level=assessment.risk_level,
        recommendation=assessment.recommendation,
    )


@router.post(
    "/currency-exposure",
    response_model=LoanExposureListResponse,
    summary="Outstanding debt per currency",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_loan_currency_exposure(
        request: Request,  # Required for rate limiting
        body: LoanExposureRequest,
        service: CurrencyConversionService = Depends(get_conversion_service),
) -> LoanExposureListResponse:
    loans = [loan.to_domain() for loan in body.loans]
    base = require_supported(body.base_currency or settings.primary_currency, field="base_currency")
    rates = service.rates_to({loan.currency for loan in loans}, base)
    exposures = calculate_loan_currency_exposure(loans, rates)
    return LoanExposureListResponse(
        base_currency=base,
        exposures=[LoanCurrencyExposureResponse.from_domain(e) for e in exposures],
    )


@router.post(
    "/multi-currency-projections",
    response_model=LoanProjectionResponse,
    summary="Debt projected month by month into one currency",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_multi_currency_projections(
        request: Request,  # Required for rate limiting
        body: LoanProjectionRequest,
        service: LoanProjectionService = Depends(get_loan_projection_service),
) -> LoanProjectionResponse:
    """
    Each month reports total debt and payments in the target currency and
    `exchangeRateImpact`: how much of the debt comes from rate movement
    since the first month rather than from amortization.
    """
    target = body.target_currency or settings.primary_currency
    projections = service.project([loan.to_domain() for loan in body.loans], target, body.months)
    return LoanProjectionResponse(
        target_currency=target,
        projections=[LoanProjectionMonthResponse.from_domain(m) for m in projections],
    )
