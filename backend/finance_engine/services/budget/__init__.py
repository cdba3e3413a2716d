# backend/finance_engine/services/budget/__init__.py
"""Budget alerts: per-category usage against limits, with recommendations."""

from finance_engine.services.budget.alerts import (
    AlertLevel,
    BudgetAlert,
    BudgetAlertReport,
    BudgetAlertService,
    BudgetAlertSummary,
    CategoryBudget,
    calculate_percentage_used,
    classify_usage,
    generate_budget_alerts,
    summarize_category_spend,
)

__all__ = [
    "AlertLevel",
    "BudgetAlert",
    "BudgetAlertReport",
    "BudgetAlertService",
    "BudgetAlertSummary",
    "CategoryBudget",
    "calculate_percentage_used",
    "classify_usage",
    "generate_budget_alerts",
    "summarize_category_spend",
]
