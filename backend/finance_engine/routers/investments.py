# backend/finance_engine/routers/investments.py
"""
Investment currency endpoints.

- POST /investments/currency-exposure - Holdings grouped by currency
- POST /investments/currency-risk     - Exposure, risk score, volatility,
                                        recommendations and hedging options

The body carries the holdings snapshot; nothing is stored.
"""

from fastapi import APIRouter, Depends, Request

from finance_engine.config import settings
from finance_engine.dependencies import get_currency_risk_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, limiter
from finance_engine.schemas.exposure import (
    CurrencyExposureResponse,
    CurrencyRiskResponse,
    ExposureListResponse,
    PortfolioSnapshotRequest,
)
from finance_engine.services.analytics.service import CurrencyRiskService

router = APIRouter(
    prefix="/investments",
    tags=["Investments"],
)


@router.post(
    "/currency-exposure",
    response_model=ExposureListResponse,
    summary="Currency exposure of a holdings snapshot",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_currency_exposure(
        request: Request,  # Required for rate limiting
        body: PortfolioSnapshotRequest,
        service: CurrencyRiskService = Depends(get_currency_risk_service),
) -> ExposureListResponse:
    """
    Market value per currency with its share of the portfolio and risk tier.

    Shares are computed on values converted into the base currency; a
    currency without a rate is counted at its native amount.
    """
    base = body.base_currency or settings.primary_currency
    exposures = service.calculate_exposure([i.to_domain() for i in body.investments], base)
    return ExposureListResponse(
        base_currency=base,
        exposures=[CurrencyExposureResponse.from_domain(e) for e in exposures],
    )


@router.post(
    "/currency-risk",
    response_model=CurrencyRiskResponse,
    summary="Currency risk analysis of a holdings snapshot",
)
@limiter.limit(RATE_LIMIT_RATES)
def analyze_currency_risk(
        request: Request,  # Required for rate limiting
        body: PortfolioSnapshotRequest,
        service: CurrencyRiskService = Depends(get_currency_risk_service),
) -> CurrencyRiskResponse:
    """
    Returns:
    - **exposures**: per-currency share and risk tier
    - **riskScore**: 0-100 (concentration, foreign share, volatility)
    - **volatility**: annualized 30d / 90d / 1y per foreign currency
    - **recommendations** and **hedgingOptions**

    A currency whose rate history cannot be fetched is left out of
    `volatility` rather than failing the analysis.
    """
    analysis = service.analyze_currency_risk([i.to_domain() for i in body.investments], body.base_currency)
    return CurrencyRiskResponse.from_domain(analysis)
