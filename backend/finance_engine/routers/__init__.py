# backend/finance_engine/routers/__init__.py
"""
API routers for the Personal Finance Engine.

Each router handles a specific domain:
- currencies: Registry, detection, conversion, exchange rates, rate cache
- investments: Currency exposure and currency risk of holdings
- loans: Amortization, payoff strategies, debt ratios, debt projections
- incomes: Cash flow projections
- dashboard: Net worth, ratios, goal progress, financial health
- budget: Budget alerts per category
"""

from finance_engine.routers.budget import router as budget_router
from finance_engine.routers.currencies import router as currencies_router
from finance_engine.routers.dashboard import router as dashboard_router
from finance_engine.routers.incomes import router as incomes_router
from finance_engine.routers.investments import router as investments_router
from finance_engine.routers.loans import router as loans_router

__all__ = [
    "currencies_router",
    "investments_router",
    "loans_router",
    "incomes_router",
    "dashboard_router",
    "budget_router",
]
