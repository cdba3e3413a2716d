# backend/finance_engine/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas.

This module provides:
- Currency code validation and normalization
- Money amount checks (finite, non-negative)

Validators raise ValueError so Pydantic reports them as 422 field errors.
"""

import re
from decimal import Decimal

# =============================================================================
# CONSTANTS
# =============================================================================

# Currency: ISO 4217 format (3 uppercase letters)
CURRENCY_PATTERN = re.compile(r'^[A-Z]{3}$')

# Listing symbol: "AAPL", "VOD.L", "BRK.B", "^FTSE"
SYMBOL_PATTERN = re.compile(r'^[\^]?[A-Z0-9][A-Z0-9.\-=]{0,19}$')

# Country: ISO 3166 alpha-2
COUNTRY_PATTERN = re.compile(r'^[A-Z]{2}$')


# =============================================================================
# CURRENCY VALIDATION
# =============================================================================

def validate_currency_code(value: str) -> str:
    """
    Validate and normalize a currency code.

    Only the format is checked here; whether the registry supports the code
    is a service-level question (CurrencyNotSupportedError).

    Raises:
        ValueError: If the code is not three letters
    """
    if not value:
        raise ValueError("Currency code cannot be empty")

    normalized = value.strip().upper()
    if not CURRENCY_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid currency code: '{value}'. Must be 3 letters (ISO 4217)"
        )
    return normalized


def validate_currency_list(value: str | list[str]) -> list[str]:
    """Accepts "EUR,GBP" or ["EUR", "GBP"]; drops blanks and duplicates."""
    items = value.split(",") if isinstance(value, str) else value
    codes: list[str] = []
    for item in items:
        if not item or not item.strip():
            continue
        code = validate_currency_code(item)
        if code not in codes:
            codes.append(code)
    return codes


def validate_symbol(value: str) -> str:
    normalized = value.strip().upper()
    if not SYMBOL_PATTERN.match(normalized):
        raise ValueError(f"Invalid symbol format: '{value}'")
    return normalized


def validate_country(value: str) -> str:
    normalized = value.strip().upper()
    if not COUNTRY_PATTERN.match(normalized):
        raise ValueError(f"Invalid country code: '{value}'. Must be 2 letters (ISO 3166)")
    return normalized


# =============================================================================
# AMOUNT VALIDATION
# =============================================================================

def validate_amount(value: Decimal) -> Decimal:
    """
    Reject NaN and infinity.

    Pydantic accepts "NaN" and "Infinity" strings as Decimals, so the
    check happens here rather than through Field constraints.
    """
    if not value.is_finite():
        raise ValueError("Amount must be a finite number")
    return value


def validate_non_negative_amount(value: Decimal) -> Decimal:
    validate_amount(value)
    if value < 0:
        raise ValueError("Amount must be non-negative")
    return value

