# backend/finance_engine/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic schemas organized by domain:
- base: camelCase base model, money and currency code types
- errors: Error response formats
- validators: Reusable validation functions (currency, amounts, dates)
- records: Investment, income, expense, loan and goal inputs
- currency: Currencies, conversion, exchange rates, cache status
- exposure: Currency exposure and risk analysis
- loans: Amortization, payments, strategies, projections
- dashboard: Dashboard metrics and cash flow projections
- budget: Budget alerts

Usage:
    from finance_engine.schemas import ConversionRequestSchema, ConversionResponse
    from finance_engine.schemas import CurrencyRiskResponse
    from finance_engine.schemas import ErrorDetail
"""

from finance_engine.schemas.base import ApiModel, MoneyInput, MoneySchema
from finance_engine.schemas.budget import BudgetAlertReportResponse, BudgetAlertRequest
from finance_engine.schemas.currency import (
    BatchConversionRequest,
    BatchConversionResponse,
    CacheStatusResponse,
    ConversionRequestSchema,
    ConversionResponse,
    CurrencyDetectResponse,
    CurrencyListResponse,
    CurrencyResponse,
    ExchangeRateResponse,
    ExchangeRatesResponse,
    HistoricalRatesResponse,
    RefreshResponse,
)
from finance_engine.schemas.dashboard import (
    CashFlowRequest,
    CashFlowResponse,
    DashboardMetricsResponse,
    DashboardRequest,
)
from finance_engine.schemas.errors import ErrorDetail, ValidationErrorDetail
from finance_engine.schemas.exposure import (
    CurrencyRiskResponse,
    ExposureListResponse,
    PortfolioSnapshotRequest,
)
from finance_engine.schemas.loans import (
    AmortizationRequest,
    AmortizationResponse,
    DebtToIncomeRequest,
    DebtToIncomeResponse,
    LoanExposureListResponse,
    LoanExposureRequest,
    LoanProjectionRequest,
    LoanProjectionResponse,
    LoansRequest,
    PayoffStrategiesResponse,
    PaymentRequest,
    PaymentResponse,
)
from finance_engine.schemas.records import (
    ExpenseInput,
    GoalInput,
    IncomeInput,
    InvestmentInput,
    LoanInput,
)

__all__ = [
    # Base
    "ApiModel",
    "MoneyInput",
    "MoneySchema",
    # Errors
    "ErrorDetail",
    "ValidationErrorDetail",
    # Records
    "InvestmentInput",
    "IncomeInput",
    "ExpenseInput",
    "LoanInput",
    "GoalInput",
    # Currency
    "CurrencyResponse",
    "CurrencyListResponse",
    "CurrencyDetectResponse",
    "ConversionRequestSchema",
    "ConversionResponse",
    "BatchConversionRequest",
    "BatchConversionResponse",
    "ExchangeRateResponse",
    "ExchangeRatesResponse",
    "HistoricalRatesResponse",
    "CacheStatusResponse",
    "RefreshResponse",
    # Exposure
    "PortfolioSnapshotRequest",
    "ExposureListResponse",
    "CurrencyRiskResponse",
    # Loans
    "AmortizationRequest",
    "AmortizationResponse",
    "PaymentRequest",
    "PaymentResponse",
    "LoansRequest",
    "PayoffStrategiesResponse",
    "DebtToIncomeRequest",
    "DebtToIncomeResponse",
    "LoanExposureRequest",
    "LoanExposureListResponse",
    "LoanProjectionRequest",
    "LoanProjectionResponse",
    # Dashboard
    "DashboardRequest",
    "DashboardMetricsResponse",
    "CashFlowRequest",
    "CashFlowResponse",
    # Budget
    "BudgetAlertRequest",
    "BudgetAlertReportResponse",
]
