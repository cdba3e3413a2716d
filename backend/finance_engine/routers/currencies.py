# backend/finance_engine/routers/currencies.py
"""
Currency endpoints.

Reference data, conversion and exchange rates:
- GET  /currencies                          - Supported currencies
- GET  /currencies/detect                   - Currency from a listing symbol or country
- POST /currencies/convert                  - Convert one amount
- POST /currencies/convert/batch            - Convert many amounts, in order
- GET  /currencies/exchange-rates           - Current rates from a base currency
- GET  /currencies/exchange-rates/historical - Daily rates for a pair
- GET  /currencies/cache-status             - Rate cache state
- POST /currencies/refresh                  - Drop every cached rate
- GET  /currencies/{code}                   - One currency

Conversion never fails because a rate is missing: the amount comes back
unconverted in its original currency. Only the exchange-rate endpoints
surface RateUnavailableError (503).
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from finance_engine.config import settings
from finance_engine.dependencies import get_conversion_service, get_exchange_rate_service
from finance_engine.middleware.rate_limit import RATE_LIMIT_RATES, RATE_LIMIT_REFRESH, limiter
from finance_engine.schemas.base import MoneySchema
from finance_engine.schemas.currency import (
    BatchConversionRequest,
    BatchConversionResponse,
    CacheStatusResponse,
    ConversionRequestSchema,
    ConversionResponse,
    CurrencyDetectQuery,
    CurrencyDetectResponse,
    CurrencyListResponse,
    CurrencyResponse,
    ExchangeRateResponse,
    ExchangeRatesResponse,
    HistoricalRateResponse,
    HistoricalRatesResponse,
    RefreshResponse,
)
from finance_engine.schemas.validators import validate_currency_code, validate_currency_list
from finance_engine.services.currency.conversion import ConversionRequest, CurrencyConversionService
from finance_engine.services.currency.rate_service import ExchangeRateService
from finance_engine.services.currency.registry import (
    detect_currency_from_country,
    detect_currency_from_symbol,
    get_currency,
    get_supported_currencies,
    require_supported,
)
from finance_engine.services.exceptions import CurrencyNotSupportedError, ValidationError

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/currencies",
    tags=["Currencies"],
)


def _parse_code(value: str, field: str) -> str:
    try:
        return validate_currency_code(value)
    except ValueError as e:
        raise ValidationError(str(e), field=field)


# =============================================================================
# REFERENCE DATA
# =============================================================================

@router.get(
    "",
    response_model=CurrencyListResponse,
    summary="List supported currencies",
)
def list_currencies() -> CurrencyListResponse:
    currencies = [CurrencyResponse.from_domain(c) for c in get_supported_currencies()]
    return CurrencyListResponse(currencies=currencies, count=len(currencies))


@router.get(
    "/detect",
    response_model=CurrencyDetectResponse,
    summary="Detect a currency from a listing symbol or country",
)
def detect_currency(query: Annotated[CurrencyDetectQuery, Query()]) -> CurrencyDetectResponse:
    """
    Exactly one of:
    - **symbol**: listing symbol, e.g. `VOD.L` -> GBP, `7203.T` -> JPY
    - **country**: ISO 3166 alpha-2 code, e.g. `DE` -> EUR

    Unknown suffixes and countries resolve to USD.
    """
    if query.symbol is not None:
        currency = detect_currency_from_symbol(query.symbol)
    else:
        currency = detect_currency_from_country(query.country)
    return CurrencyDetectResponse(currency=currency, symbol=query.symbol, country=query.country)


# =============================================================================
# CONVERSION
# =============================================================================

@router.post(
    "/convert",
    response_model=ConversionResponse,
    summary="Convert an amount between currencies",
)
@limiter.limit(RATE_LIMIT_RATES)
def convert_amount(
        request: Request,  # Required for rate limiting
        body: ConversionRequestSchema,
        service: CurrencyConversionService = Depends(get_conversion_service),
) -> ConversionResponse:
    """
    Returns the converted amount with the rate used.

    When no rate is available the response carries the original amount and
    currency with no `convertedAmount`.
    """
    result = service.convert_amount(body.amount, body.from_currency, body.to_currency)
    return ConversionResponse(conversion=MoneySchema.from_domain(result))


@router.post(
    "/convert/batch",
    response_model=BatchConversionResponse,
    summary="Convert many amounts",
)
@limiter.limit(RATE_LIMIT_RATES)
def convert_batch(
        request: Request,  # Required for rate limiting
        body: BatchConversionRequest,
        service: CurrencyConversionService = Depends(get_conversion_service),
) -> BatchConversionResponse:
    """Results are in request order; each item degrades independently."""
    results = service.convert_multiple_amounts(
        ConversionRequest(c.amount, c.from_currency, c.to_currency) for c in body.conversions
    )
    return BatchConversionResponse(
        conversions=[MoneySchema.from_domain(r) for r in results],
        count=len(results),
    )


# =============================================================================
# EXCHANGE RATES
# =============================================================================

@router.get(
    "/exchange-rates",
    response_model=ExchangeRatesResponse,
    summary="Current exchange rates from a base currency",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_exchange_rates(
        request: Request,  # Required for rate limiting
        base: str | None = Query(default=None, description="Base currency (default: PRIMARY_CURRENCY)"),
        targets: str | None = Query(
            default=None,
            description="Comma-separated target currencies (default: every supported currency)",
        ),
        service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ExchangeRatesResponse:
    """
    1 base = rate target, for each target.

    With a single target a missing rate is a **503**; with several, targets
    without a rate are listed under `unavailable`.
    """
    base_code = require_supported(_parse_code(base or settings.primary_currency, "base"), field="base")
    if targets:
        try:
            target_codes = validate_currency_list(targets)
        except ValueError as e:
            raise ValidationError(str(e), field="targets")
    else:
        target_codes = [c.code for c in get_supported_currencies()]
    target_codes = [t for t in target_codes if t != base_code]

    if len(target_codes) == 1:
        rate = service.get_rate(base_code, target_codes[0])
        return ExchangeRatesResponse(base=base_code, rates=[ExchangeRateResponse.from_domain(rate)], count=1)

    found = service.get_multiple_rates((base_code, t) for t in target_codes)
    rates = [ExchangeRateResponse.from_domain(r) for r in found.values()]
    unavailable = [t for t in target_codes if f"{base_code}-{t}" not in found]
    if unavailable:
        logger.warning(f"No rate from {base_code} to: {', '.join(unavailable)}")

    return ExchangeRatesResponse(base=base_code, rates=rates, count=len(rates), unavailable=unavailable)


@router.get(
    "/exchange-rates/historical",
    response_model=HistoricalRatesResponse,
    summary="Daily exchange rates for a currency pair",
)
@limiter.limit(RATE_LIMIT_RATES)
def get_historical_rates(
        request: Request,  # Required for rate limiting
        from_currency: str = Query(..., alias="from"),
        to_currency: str = Query(..., alias="to"),
        start: date = Query(..., description="First day (inclusive)"),
        end: date = Query(..., description="Last day (inclusive)"),
        service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> HistoricalRatesResponse:
    """
    Days without data (weekends, market holidays) are absent. A pair with
    itself returns no rates.

    Raises **400** if start is after end or the range is too long.
    """
    history = list(service.get_historical_rates(
        _parse_code(from_currency, "from"),
        _parse_code(to_currency, "to"),
        start,
        end,
    ))
    return HistoricalRatesResponse(
        from_currency=from_currency.strip().upper(),
        to_currency=to_currency.strip().upper(),
        start_date=start,
        end_date=end,
        rates=[HistoricalRateResponse(date=h.date, rate=h.rate, source=h.source) for h in history],
        count=len(history),
    )


# =============================================================================
# CACHE
# =============================================================================

@router.get(
    "/cache-status",
    response_model=CacheStatusResponse,
    summary="Rate cache status",
)
def get_cache_status(
        service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> CacheStatusResponse:
    return CacheStatusResponse.from_domain(service.cache_status(), settings.rate_cache_ttl_seconds)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Drop every cached exchange rate",
)
@limiter.limit(RATE_LIMIT_REFRESH)
def refresh_rates(
        request: Request,  # Required for rate limiting
        service: ExchangeRateService = Depends(get_exchange_rate_service),
) -> RefreshResponse:
    """The next lookup for each pair goes to the provider."""
    cleared = service.refresh_rates()
    logger.info(f"Exchange rate cache refreshed on request ({cleared} pairs dropped)")
    return RefreshResponse(message="Exchange rate cache cleared", cleared_pairs=cleared)


# =============================================================================
# SINGLE CURRENCY (after the fixed paths above)
# =============================================================================

@router.get(
    "/{code}",
    response_model=CurrencyResponse,
    summary="Get one supported currency",
)
def get_currency_detail(code: str) -> CurrencyResponse:
    """Raises **404** for a well-formed code that is not supported."""
    try:
        currency = get_currency(_parse_code(code, "code"))
    except CurrencyNotSupportedError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return CurrencyResponse.from_domain(currency)
