# backend/finance_engine/schemas/dashboard.py
"""Pydantic schemas for dashboard metrics and cash flow projections."""

import datetime as dt
from decimal import Decimal

from pydantic import Field

from finance_engine.schemas.base import ApiModel, CurrencyCode, NonNegativeAmount
from finance_engine.schemas.records import (
    ExpenseInput,
    GoalInput,
    IncomeInput,
    InvestmentInput,
    LoanInput,
)
from finance_engine.services.constants import MAX_RECORDS_PER_REQUEST
from finance_engine.services.dashboard.metrics import DashboardMetrics
from finance_engine.services.dashboard.normalizer import CashFlowMonth


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class DashboardRequest(ApiModel):
    investments: list[InvestmentInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    incomes: list[IncomeInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    expenses: list[ExpenseInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    loans: list[LoanInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    goals: list[GoalInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    cash_savings: NonNegativeAmount = Decimal("0")
    base_currency: CurrencyCode | None = None


class CashFlowRequest(ApiModel):
    incomes: list[IncomeInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    expenses: list[ExpenseInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    start_month: dt.date | None = Field(default=None, description="Any day in the first month (defaults to today)")
    months: int | None = Field(default=None, ge=1, le=120)
    base_currency: CurrencyCode | None = None


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class GoalProgressResponse(ApiModel):
    goal_id: str
    name: str
    progress: Decimal
    target_amount: Decimal
    current_amount: Decimal


class HealthStatusResponse(ApiModel):
    status: str
    description: str


class DashboardMetricsResponse(ApiModel):
    net_worth: Decimal
    portfolio_value: Decimal
    total_debt: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    savings_rate: Decimal
    debt_to_income_ratio: Decimal
    emergency_fund_months: Decimal
    goal_progress: list[GoalProgressResponse]
    financial_health_score: int = Field(..., ge=0, le=100)
    health_status: HealthStatusResponse
    currency: str | None
    unconverted_currencies: list[str]

    @classmethod
    def from_domain(cls, metrics: DashboardMetrics) -> "DashboardMetricsResponse":
        return cls(
            net_worth=metrics.net_worth,
            portfolio_value=metrics.portfolio_value,
            total_debt=metrics.total_debt,
            monthly_income=metrics.monthly_income,
            monthly_expenses=metrics.monthly_expenses,
            savings_rate=metrics.savings_rate,
            debt_to_income_ratio=metrics.debt_to_income_ratio,
            emergency_fund_months=metrics.emergency_fund_months,
            goal_progress=[
                GoalProgressResponse(
                    goal_id=g.goal_id,
                    name=g.name,
                    progress=g.progress,
                    target_amount=g.target_amount,
                    current_amount=g.current_amount,
                )
                for g in metrics.goal_progress
            ],
            financial_health_score=metrics.financial_health_score,
            health_status=HealthStatusResponse(
                status=metrics.health_status.status,
                description=metrics.health_status.description,
            ),
            currency=metrics.currency,
            unconverted_currencies=metrics.unconverted,
        )


class CashFlowMonthResponse(ApiModel):
    month: dt.date
    income: Decimal
    expenses: Decimal
    net: Decimal

    @classmethod
    def from_domain(cls, month: CashFlowMonth) -> "CashFlowMonthResponse":
        return cls(month=month.month, income=month.income, expenses=month.expenses, net=month.net)


class CashFlowResponse(ApiModel):
    base_currency: str
    projections: list[CashFlowMonthResponse]
