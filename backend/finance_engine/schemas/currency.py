# backend/finance_engine/schemas/currency.py
"""
Pydantic schemas for currencies, exchange rates and conversion.

These schemas handle:
- Supported currency listing and detection
- Single and batch conversion requests/responses
- Current and historical exchange rates
- Rate cache status
"""

import datetime as dt
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from finance_engine.schemas.base import Amount, ApiModel, CurrencyCode, MoneySchema
from finance_engine.schemas.validators import validate_country, validate_symbol
from finance_engine.services.constants import MAX_BATCH_SIZE
from finance_engine.services.currency.rate_cache import CacheStatus
from finance_engine.services.currency.types import Currency, ExchangeRate


# =============================================================================
# CURRENCIES
# =============================================================================

class CurrencyResponse(ApiModel):
    code: str
    name: str
    symbol: str
    decimal_places: int
    countries: list[str]

    @classmethod
    def from_domain(cls, currency: Currency) -> "CurrencyResponse":
        return cls(
            code=currency.code,
            name=currency.name,
            symbol=currency.symbol,
            decimal_places=currency.decimal_places,
            countries=list(currency.countries),
        )


class CurrencyListResponse(ApiModel):
    currencies: list[CurrencyResponse]
    count: int


class CurrencyDetectQuery(ApiModel):
    """Exactly one of symbol or country."""

    symbol: str | None = None
    country: str | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str | None) -> str | None:
        return validate_symbol(v) if v is not None else None

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: str | None) -> str | None:
        return validate_country(v) if v is not None else None

    @model_validator(mode="after")
    def require_one(self) -> "CurrencyDetectQuery":
        if (self.symbol is None) == (self.country is None):
            raise ValueError("Provide exactly one of 'symbol' or 'country'")
        return self


class CurrencyDetectResponse(ApiModel):
    currency: str
    symbol: str | None = None
    country: str | None = None


# =============================================================================
# CONVERSION
# =============================================================================

class ConversionRequestSchema(ApiModel):
    amount: Amount = Field(..., description="Amount in from_currency")
    from_currency: CurrencyCode
    to_currency: CurrencyCode


class BatchConversionRequest(ApiModel):
    conversions: list[ConversionRequestSchema] = Field(
        ...,
        min_length=1,
        max_length=MAX_BATCH_SIZE,
        description=f"Up to {MAX_BATCH_SIZE} conversions, answered in order"
    )


class ConversionResponse(ApiModel):
    conversion: MoneySchema


class BatchConversionResponse(ApiModel):
    conversions: list[MoneySchema]
    count: int


# =============================================================================
# EXCHANGE RATES
# =============================================================================

class ExchangeRateResponse(ApiModel):
    """1 from_currency = rate to_currency."""

    from_currency: str
    to_currency: str
    rate: Decimal
    timestamp: dt.datetime
    source: str = Field(..., description="api, cache, stale-cache, static or internal")

    @classmethod
    def from_domain(cls, rate: ExchangeRate) -> "ExchangeRateResponse":
        return cls(
            from_currency=rate.from_currency,
            to_currency=rate.to_currency,
            rate=rate.rate,
            timestamp=rate.timestamp,
            source=rate.source,
        )


class ExchangeRatesResponse(ApiModel):
    base: str
    rates: list[ExchangeRateResponse]
    count: int
    unavailable: list[str] = Field(
        default_factory=list,
        description="Targets with no rate (provider down, nothing cached)"
    )


class HistoricalRateResponse(ApiModel):
    date: dt.date
    rate: Decimal
    source: str


class HistoricalRatesResponse(ApiModel):
    from_currency: str
    to_currency: str
    start_date: dt.date
    end_date: dt.date
    rates: list[HistoricalRateResponse]
    count: int


# =============================================================================
# CACHE
# =============================================================================

class CacheStatusResponse(ApiModel):
    last_updated: dt.datetime | None
    next_update: dt.datetime | None
    cached_pairs: int
    ttl_seconds: int

    @classmethod
    def from_domain(cls, status: CacheStatus, ttl_seconds: int) -> "CacheStatusResponse":
        return cls(
            last_updated=status.last_updated,
            next_update=status.next_update,
            cached_pairs=status.cached_pairs,
            ttl_seconds=ttl_seconds,
        )


class RefreshResponse(ApiModel):
    message: str
    cleared_pairs: int
