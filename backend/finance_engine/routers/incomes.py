# backend/finance_engine/routers/incomes.py
"""
Income endpoint.

- POST /incomes/projections - Month-by-month income, expenses and net
"""

from datetime import date

from fastapi import APIRouter, Depends, Request

from finance_engine.config import settings
from finance_engine.dependencies import get_dashboard_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, limiter
from finance_engine.schemas.dashboard import CashFlowMonthResponse, CashFlowRequest, CashFlowResponse
from finance_engine.services.dashboard.service import DashboardService

router = APIRouter(
    prefix="/incomes",
    tags=["Incomes"],
)


@router.post(
    "/projections",
    response_model=CashFlowResponse,
    summary="Cash flow projection",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_cash_flow_projections(
        request: Request,  # Required for rate limiting
        body: CashFlowRequest,
        service: DashboardService = Depends(get_dashboard_service),
) -> CashFlowResponse:
    """
    Projects monthly-normalized income and expenses from `startMonth`.

    A record counts in a month when its date range overlaps that month;
    open-ended records count in every month.
    """
    base = body.base_currency or settings.primary_currency
    projections = service.project_cash_flows(
        incomes=[i.to_domain() for i in body.incomes],
        expenses=[e.to_domain() for e in body.expenses],
        start_month=body.start_month or date.today(),
        months=body.months,
        base_currency=base,
    )
    return CashFlowResponse(
        base_currency=base,
        projections=[CashFlowMonthResponse.from_domain(m) for m in projections],
    )
