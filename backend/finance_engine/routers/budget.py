# backend/finance_engine/routers/budget.py
"""
Budget endpoint.

- POST /budget/alerts - Per-category alerts, summary and recommendations
"""

from fastapi import APIRouter, Depends, Request

from finance_engine.dependencies import get_budget_alert_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, limiter
from finance_engine.schemas.budget import BudgetAlertReportResponse, BudgetAlertRequest
from finance_engine.services.budget import BudgetAlertService, summarize_category_spend

router = APIRouter(
    prefix="/budget",
    tags=["Budget"],
)


@router.post(
    "/alerts",
    response_model=BudgetAlertReportResponse,
    summary="Budget alerts per category",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_budget_alerts(
        request: Request,  # Required for rate limiting
        body: BudgetAlertRequest,
        service: BudgetAlertService = Depends(get_budget_alert_service),
) -> BudgetAlertReportResponse:
    """
    Spend per category comes from the budget's `spent` when given,
    otherwise from the monthly sum of the submitted expenses.

    Levels: below 80% **info**, 80% to below 100% **warning**, 100% and
    above **danger**.
    """
    spend = summarize_category_spend(e.to_domain() for e in body.expenses)
    report = service.generate(body.to_domain(spend), body.target_currency)
    return BudgetAlertReportResponse.from_domain(report)
