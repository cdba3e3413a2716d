# backend/finance_engine/schemas/exposure.py
"""
Pydantic schemas for currency exposure and risk analysis.

Requests carry a holdings snapshot; responses mirror the CurrencyRiskAnalysis
dataclass with camelCase keys.
"""

import datetime as dt
from decimal import Decimal

from pydantic import Field

from finance_engine.schemas.base import ApiModel, CurrencyCode, MoneySchema
from finance_engine.schemas.records import InvestmentInput
from finance_engine.services.constants import MAX_RECORDS_PER_REQUEST
from finance_engine.services.currency.types import (
    CurrencyExposure,
    CurrencyRiskAnalysis,
    CurrencyVolatility,
    HedgingOption,
)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PortfolioSnapshotRequest(ApiModel):
    investments: list[InvestmentInput] = Field(..., max_length=MAX_RECORDS_PER_REQUEST)
    base_currency: CurrencyCode | None = Field(
        default=None,
        description="Currency to aggregate in (defaults to PRIMARY_CURRENCY)"
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class CurrencyExposureResponse(ApiModel):
    currency: str
    total_value: MoneySchema
    percentage: Decimal
    risk_level: str

    @classmethod
    def from_domain(cls, exposure: CurrencyExposure) -> "CurrencyExposureResponse":
        return cls(
            currency=exposure.currency,
            total_value=MoneySchema.from_domain(exposure.total_value),
            percentage=exposure.percentage,
            risk_level=exposure.risk_level.value,
        )


class ExposureListResponse(ApiModel):
    base_currency: str
    exposures: list[CurrencyExposureResponse]


class CurrencyVolatilityResponse(ApiModel):
    currency: str
    # to_camel would emit volatility30D; keep the lower-case suffix
    volatility_30d: Decimal | None = Field(alias="volatility30d")
    volatility_90d: Decimal | None = Field(alias="volatility90d")
    volatility_1y: Decimal | None = Field(alias="volatility1y")
    trend: str


    @classmethod
    def from_domain(cls, v: CurrencyVolatility) -> "CurrencyVolatilityResponse":
        return cls(
            currency=v.currency,
            volatility_30d=v.volatility_30d,
            volatility_90d=v.volatility_90d,
            volatility_1y=v.volatility_1y,
            trend=v.trend.value,
        )


class HedgingOptionResponse(ApiModel):
    instrument: str
    currency: str
    hedge_amount: MoneySchema
    hedge_ratio: Decimal
    description: str

    @classmethod
    def from_domain(cls, option: HedgingOption) -> "HedgingOptionResponse":
        return cls(
            instrument=option.instrument,
            currency=option.currency,
            hedge_amount=MoneySchema.from_domain(option.hedge_amount),
            hedge_ratio=option.hedge_ratio,
            description=option.description,
        )


class CurrencyRiskResponse(ApiModel):
    base_currency: str
    total_value: MoneySchema
    exposures: list[CurrencyExposureResponse]
    risk_score: Decimal = Field(..., ge=0, le=100)
    recommendations: list[str]
    hedging_options: list[HedgingOptionResponse]
    volatility: list[CurrencyVolatilityResponse]
    analyzed_at: dt.datetime

    @classmethod
    def from_domain(cls, analysis: CurrencyRiskAnalysis) -> "CurrencyRiskResponse":
        return cls(
            base_currency=analysis.base_currency,
            total_value=MoneySchema.from_domain(analysis.total_value),
            exposures=[CurrencyExposureResponse.from_domain(e) for e in analysis.exposures],
            risk_score=analysis.risk_score,
            recommendations=analysis.recommendations,
            hedging_options=[HedgingOptionResponse.from_domain(h) for h in analysis.hedging_options],
            volatility=[CurrencyVolatilityResponse.from_domain(v) for v in analysis.volatility],
            analyzed_at=analysis.analyzed_at,
        )
