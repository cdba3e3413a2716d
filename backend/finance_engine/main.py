# backend/finance_engine/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from finance_engine.config import settings
from finance_engine.middleware import (
    RATE_LIMIT_HEALTH,
    CorrelationIdMiddleware,
    SlowAPIMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)
from finance_engine.routers import (
    budget_router,
    currencies_router,
    dashboard_router,
    incomes_router,
    investments_router,
    loans_router,
)
from finance_engine.schemas.errors import ErrorDetail, ValidationErrorDetail
from finance_engine.services.exceptions import (
    CalculationError,
    CircuitBreakerOpen,
    CurrencyNotSupportedError,
    RateNotFoundError,
    RateProviderError,
    RateUnavailableError,
    ServiceError,
    ValidationError,
)
from finance_engine.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Multi-currency personal finance calculation API",
    version="0.1.0",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================
# Origins are configured via CORS_ORIGINS environment variable

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)

# Outermost, so every log line of a request carries its correlation ID
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions carry no HTTP knowledge; these handlers map them
# to consistent responses. Routers may still catch locally when an endpoint
# needs a different status (e.g. unknown currency on GET /currencies/{code}).
# Starlette resolves handlers by MRO, so subclasses win over ServiceError.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors, including unsupported currencies (400)."""
    logger.warning(f"Validation error: {exc}")
    details = {"field": exc.field} if exc.field else {}
    if isinstance(exc, CurrencyNotSupportedError):
        details["code"] = exc.code
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=details or None,
        ).model_dump(),
    )


def _pair_details(exc: RateUnavailableError | RateProviderError | RateNotFoundError) -> dict | None:
    if not exc.from_currency:
        return None
    return {"from_currency": exc.from_currency, "to_currency": exc.to_currency}


@app.exception_handler(RateUnavailableError)
async def rate_unavailable_handler(request: Request, exc: RateUnavailableError) -> JSONResponse:
    """Handle a pair with no fresh, cached or static rate (503)."""
    logger.error(f"Rate unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="RateUnavailableError",
            message=str(exc),
            details=_pair_details(exc),
        ).model_dump(),
    )


@app.exception_handler(RateProviderError)
async def rate_provider_error_handler(request: Request, exc: RateProviderError) -> JSONResponse:
    """Handle rate provider failures that escaped the fallback chain (503)."""
    logger.error(f"Rate provider error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="RateProviderError",
            message=str(exc),
            details=_pair_details(exc),
        ).model_dump(),
    )


@app.exception_handler(RateNotFoundError)
async def rate_not_found_handler(request: Request, exc: RateNotFoundError) -> JSONResponse:
    """Handle a pair the provider has no data for (404)."""
    logger.warning(f"Rate not found: {exc}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="RateNotFoundError",
            message=str(exc),
            details=_pair_details(exc),
        ).model_dump(),
    )


@app.exception_handler(CircuitBreakerOpen)
async def circuit_breaker_handler(request: Request, exc: CircuitBreakerOpen) -> JSONResponse:
    """Handle circuit breaker open (503 with Retry-After)."""
    logger.warning(f"Circuit breaker open: {exc.breaker_name}")
    retry_after = int(exc.time_remaining) + 1  # Round up
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="CircuitBreakerOpen",
            message=f"Service temporarily unavailable. The {exc.breaker_name} circuit breaker is open.",
            details={
                "breaker_name": exc.breaker_name,
                "retry_after": retry_after,
            },
        ).model_dump(),
        headers={"Retry-After": str(retry_after)},
    )


@app.exception_handler(CalculationError)
async def calculation_error_handler(request: Request, exc: CalculationError) -> JSONResponse:
    """Handle numeric failures input validation did not catch (422)."""
    logger.error(f"Calculation error in {exc.operation}: {exc}")
    return JSONResponse(
        status_code=422,
        content=ErrorDetail(
            error="CalculationError",
            message=str(exc),
            details={"operation": exc.operation} if exc.operation else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to our standard
    ErrorDetail format for API consistency.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    error_type = error_types.get(exc.status_code, "HTTPError")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_type,
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors with consistent format.

    Converts the default 422 validation error to our ValidationErrorDetail format.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(currencies_router)  # /currencies/*
app.include_router(investments_router)  # /investments/*
app.include_router(loans_router)  # /loans/*
app.include_router(incomes_router)  # /incomes/*
app.include_router(dashboard_router)  # /dashboard/*
app.include_router(budget_router)  # /budget/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """
    API root - returns basic application info.
    """
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Health check endpoint.

    Nothing here is critical: when the rate provider is down, cached and
    static rates keep conversions working, so the status is at worst
    "degraded" and the response is always HTTP 200.

    **Checks:**
    - rate_provider: provider name and circuit breaker state
    - rate_cache: cached pair count and last update
    """
    from finance_engine.dependencies import get_exchange_rate_service, get_rate_provider

    checks = {}
    overall_status = "healthy"

    try:
        provider = get_rate_provider()
        circuit_breaker = getattr(provider, "circuit_breaker", None)
        if circuit_breaker is None:
            checks["rate_provider"] = {
                "status": "healthy",
                "critical": False,
                "provider": provider.name,
            }
        else:
            cb_stats = circuit_breaker.stats
            checks["rate_provider"] = {
                "status": "unhealthy" if circuit_breaker.is_open else "healthy",
                "critical": False,
                "provider": provider.name,
                "circuit_breaker_state": circuit_breaker.state.value,
                "total_calls": cb_stats.total_calls,
                "failed_calls": cb_stats.failed_calls,
                "rejected_calls": cb_stats.rejected_calls,
            }
            if circuit_breaker.is_open:
                overall_status = "degraded"
    except Exception as e:
        logger.warning(f"Rate provider health check failed: {e}")
        checks["rate_provider"] = {
            "status": "unknown",
            "critical": False,
            "error": str(e),
        }

    cache_status = get_exchange_rate_service().cache_status()
    checks["rate_cache"] = {
        "status": "healthy",
        "critical": False,
        "cached_pairs": cache_status.cached_pairs,
        "last_updated": cache_status.last_updated.isoformat() if cache_status.last_updated else None,
    }

    return {
        "status": overall_status,
        "checks": checks,
    }


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """
    Liveness probe endpoint.

    Returns HTTP 200 if the application is running. Does not check
    dependencies.
    """
    return {"status": "alive"}
