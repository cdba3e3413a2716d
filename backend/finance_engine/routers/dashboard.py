# backend/finance_engine/routers/dashboard.py
"""
Dashboard endpoint.

- POST /dashboard/metrics - Net worth, cash flow ratios, goal progress
                            and financial health for a set of records
"""

from fastapi import APIRouter, Depends, Request

from finance_engine.dependencies import get_dashboard_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, limiter
from finance_engine.schemas.dashboard import DashboardMetricsResponse, DashboardRequest
from finance_engine.services.dashboard.service import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.post(
    "/metrics",
    response_model=DashboardMetricsResponse,
    summary="Dashboard metrics in the base currency",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_dashboard_metrics(
        request: Request,  # Required for rate limiting
        body: DashboardRequest,
        service: DashboardService = Depends(get_dashboard_service),
) -> DashboardMetricsResponse:
    """
    Aggregates the submitted records into the base currency.

    Returns:
    - **netWorth**: portfolio value + cash savings - total debt
    - **savingsRate**, **debtToIncomeRatio**, **emergencyFundMonths**
    - **goalProgress**: per active goal, capped at 100
    - **financialHealthScore** (0-100) and **healthStatus**
    - **unconvertedCurrencies**: currencies summed at native amounts
      because no rate was available
    """
    metrics = service.get_metrics(
        investments=[i.to_domain() for i in body.investments],
        incomes=[i.to_domain() for i in body.incomes],
        expenses=[e.to_domain() for e in body.expenses],
        loans=[loan.to_domain() for loan in body.loans],
        goals=[g.to_domain() for g in body.goals],
        cash_savings=body.cash_savings,
        base_currency=body.base_currency,
    )
    return DashboardMetricsResponse.from_domain(metrics)
