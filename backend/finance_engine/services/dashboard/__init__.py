# backend/finance_engine/services/dashboard/__init__.py
"""
Dashboard package: income/expense normalization and metric aggregation.

Architecture:
    dashboard/
    ├── normalizer.py            # Frequency -> monthly, cash flow projection
    ├── metrics.py               # Net worth, ratios, health score (pure)
    └── service.py               # DashboardService (rate resolution)
"""

from finance_engine.services.dashboard.metrics import (
    DashboardMetrics,
    GoalProgress,
    HealthStatus,
    calculate_dashboard_metrics,
    calculate_debt_to_income_ratio,
    calculate_emergency_fund_months,
    calculate_financial_health_score,
    calculate_goal_progress,
    calculate_net_worth,
    calculate_portfolio_value,
    calculate_savings_rate,
    calculate_total_debt,
    get_health_status,
)
from finance_engine.services.dashboard.normalizer import (
    CashFlowMonth,
    calculate_monthly_expenses,
    calculate_monthly_income,
    convert_to_monthly,
    project_cash_flows,
)
from finance_engine.services.dashboard.service import DashboardService

__all__ = [
    "CashFlowMonth",
    "DashboardMetrics",
    "DashboardService",
    "GoalProgress",
    "HealthStatus",
    "calculate_dashboard_metrics",
    "calculate_debt_to_income_ratio",
    "calculate_emergency_fund_months",
    "calculate_financial_health_score",
    "calculate_goal_progress",
    "calculate_monthly_expenses",
    "calculate_monthly_income",
    "calculate_net_worth",
    "calculate_portfolio_value",
    "calculate_savings_rate",
    "calculate_total_debt",
    "convert_to_monthly",
    "get_health_status",
    "project_cash_flows",
]
