# backend/finance_engine/schemas/errors.py
"""
Pydantic schemas for error responses.

Every error leaving the API has the same shape so clients can handle them
uniformly. Used by the global exception handlers in main.py.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """
    Standard error response format.

    Example:
        {"error": "RateUnavailableError",
         "message": "Exchange rate EUR/USD is unavailable: timeout",
         "details": {"from_currency": "EUR", "to_currency": "USD"}}
    """

    error: str = Field(
        ...,
        description="Error type (e.g., 'CurrencyNotSupportedError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context (optional)"
    )


class ValidationErrorDetail(BaseModel):
    """Request validation failure (422), one entry per offending field."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[dict] = Field(
        ...,
        description="List of validation errors"
    )
