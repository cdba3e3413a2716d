# backend/finance_engine/schemas/budget.py
"""Pydantic schemas for budget alerts."""

from decimal import Decimal

from pydantic import Field, model_validator

from finance_engine.schemas.base import ApiModel, CurrencyCode, MoneyInput, MoneySchema
from finance_engine.schemas.records import ExpenseInput
from finance_engine.services.budget.alerts import BudgetAlert, BudgetAlertReport, CategoryBudget
from finance_engine.services.constants import MAX_RECORDS_PER_REQUEST
from finance_engine.services.currency.types import CurrencyAmount


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class CategoryBudgetInput(ApiModel):
    """
    Limit for one category.

    `spent` may be omitted when the request carries expenses; the category's
    monthly spend is then summed from them.
    """

    category: str = Field(..., min_length=1, max_length=100)
    limit: MoneyInput
    spent: MoneyInput | None = None


class BudgetAlertRequest(ApiModel):
    budgets: list[CategoryBudgetInput] = Field(..., min_length=1, max_length=MAX_RECORDS_PER_REQUEST)
    expenses: list[ExpenseInput] = Field(default_factory=list, max_length=MAX_RECORDS_PER_REQUEST)
    target_currency: CurrencyCode | None = None

    @model_validator(mode="after")
    def unique_categories(self) -> "BudgetAlertRequest":
        seen: set[str] = set()
        for budget in self.budgets:
            if budget.category in seen:
                raise ValueError(f"Duplicate budget category: '{budget.category}'")
            seen.add(budget.category)
        return self

    def to_domain(self, spend_by_category: dict[str, CurrencyAmount]) -> list[CategoryBudget]:
        """
        CategoryBudgets for the service. A category without explicit spend
        and without expenses has spent nothing, in the limit's currency.
        """
        budgets = []
        for b in self.budgets:
            limit = b.limit.to_domain()
            if b.spent is not None:
                spent = b.spent.to_domain()
            else:
                spent = spend_by_category.get(b.category) or CurrencyAmount(Decimal("0"), limit.currency)
            budgets.append(CategoryBudget(category=b.category, spent=spent, limit=limit))
        return budgets


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class BudgetAlertResponse(ApiModel):
    category: str
    spent: MoneySchema
    limit: MoneySchema
    percentage_used: Decimal
    alert_level: str
    currency_mismatch: bool

    @classmethod
    def from_domain(cls, alert: BudgetAlert) -> "BudgetAlertResponse":
        return cls(
            category=alert.category,
            spent=MoneySchema.from_domain(alert.spent),
            limit=MoneySchema.from_domain(alert.limit),
            percentage_used=alert.percentage_used,
            alert_level=alert.alert_level.value,
            currency_mismatch=alert.currency_mismatch,
        )


class BudgetSummaryResponse(ApiModel):
    total: int
    danger: int
    warning: int
    info: int
    over_budget_categories: list[str]
    near_limit_categories: list[str]


class BudgetAlertReportResponse(ApiModel):
    alerts: list[BudgetAlertResponse]
    summary: BudgetSummaryResponse
    recommendations: list[str]
    currency: str | None

    @classmethod
    def from_domain(cls, report: BudgetAlertReport) -> "BudgetAlertReportResponse":
        s = report.summary
        return cls(
            alerts=[BudgetAlertResponse.from_domain(a) for a in report.alerts],
            summary=BudgetSummaryResponse(
                total=s.total,
                danger=s.danger,
                warning=s.warning,
                info=s.info,
                over_budget_categories=s.over_budget_categories,
                near_limit_categories=s.near_limit_categories,
            ),
            recommendations=report.recommendations,
            currency=report.currency,
        )
