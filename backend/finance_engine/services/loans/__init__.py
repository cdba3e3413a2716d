# backend/finance_engine/services/loans/__init__.py
"""
Loan engine package.

Architecture:
    loans/
    ├── types.py                 # Schedule, result and projection dataclasses
    ├── amortization.py          # Payment formula, schedules, amortize_loan
    ├── strategies.py            # Snowball / avalanche, payment ratios
    └── projections.py           # Multi-currency projections, debt exposure
"""

from finance_engine.services.loans.amortization import (
    PAID_OFF_MESSAGE,
    amortize_loan,
    calculate_monthly_payment,
    calculate_payoff_date,
    calculate_total_interest,
    generate_amortization_schedule,
)
from finance_engine.services.loans.projections import (
    LoanProjectionService,
    build_rate_path,
    calculate_loan_currency_exposure,
    project_multi_currency_loans,
)
from finance_engine.services.loans.strategies import (
    assess_debt_to_income,
    calculate_debt_to_income_from_payments,
    calculate_payoff_strategies,
    calculate_total_monthly_payment,
    get_upcoming_payments,
)
from finance_engine.services.loans.types import (
    AmortizationResult,
    AmortizationScheduleEntry,
    DebtToIncomeAssessment,
    LoanCurrencyExposure,
    LoanProjectionMonth,
    PayoffStrategies,
    PayoffStrategy,
)

__all__ = [
    "PAID_OFF_MESSAGE",
    "AmortizationResult",
    "AmortizationScheduleEntry",
    "DebtToIncomeAssessment",
    "LoanCurrencyExposure",
    "LoanProjectionMonth",
    "LoanProjectionService",
    "PayoffStrategies",
    "PayoffStrategy",
    "amortize_loan",
    "assess_debt_to_income",
    "build_rate_path",
    "calculate_debt_to_income_from_payments",
    "calculate_loan_currency_exposure",
    "calculate_monthly_payment",
    "calculate_payoff_date",
    "calculate_payoff_strategies",
    "calculate_total_interest",
    "calculate_total_monthly_payment",
    "generate_amortization_schedule",
    "get_upcoming_payments",
    "project_multi_currency_loans",
]
