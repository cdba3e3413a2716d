# backend/finance_engine/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── CurrencyNotSupportedError
    ├── RateError
    │   ├── RateUnavailableError
    │   ├── RateProviderError
    │   └── RateNotFoundError
    └── CalculationError

    CircuitBreakerOpen (from circuit_breaker module)
        - Raised when the rate provider's circuit is open
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails before any computation.

    Covers malformed amounts (NaN, infinity), malformed currency codes and
    impossible loan terms. Request-shape validation is handled by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class CurrencyNotSupportedError(ValidationError):
    """
    Raised when a well-formed currency code is not in the registry.

    Attributes:
        code: The unsupported currency code
    """

    def __init__(self, code: str, field: str | None = "currency") -> None:
        self.code = code
        super().__init__(f"Currency '{code}' is not supported", field=field)


# =============================================================================
# EXCHANGE RATE ERRORS
# =============================================================================


class RateError(ServiceError):
    """
    Base exception for exchange rate errors.

    Attributes:
        from_currency: Source currency code
        to_currency: Target currency code
    """

    def __init__(
            self,
            message: str,
            from_currency: str | None = None,
            to_currency: str | None = None,
    ) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        super().__init__(message)


class RateUnavailableError(RateError):
    """
    Raised when no rate can be produced: the provider failed and nothing
    was ever cached for the pair.

    Conversion callers degrade to the original amount on this error
    instead of failing the surrounding request.
    """

    def __init__(
            self,
            from_currency: str,
            to_currency: str,
            reason: str | None = None,
    ) -> None:
        self.reason = reason
        message = f"Exchange rate {from_currency}/{to_currency} is unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message, from_currency=from_currency, to_currency=to_currency)


class RateProviderError(RateError):
    """
    Raised when the rate provider fails transiently.

    Examples:
    - Network timeout
    - Server errors
    - Rate limiting by the upstream API

    This is a retryable error.

    Attributes:
        provider: Name of the rate provider
        reason: Specific reason for failure
    """

    def __init__(
            self,
            provider: str,
            reason: str,
            from_currency: str | None = None,
            to_currency: str | None = None,
    ) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(
            f"Rate provider '{provider}' error: {reason}",
            from_currency=from_currency,
            to_currency=to_currency,
        )


class RateNotFoundError(RateError):
    """
    Raised when the provider has no data at all for a currency pair.

    This is NOT a retryable error.
    """

    def __init__(self, from_currency: str, to_currency: str, provider: str) -> None:
        self.provider = provider
        super().__init__(
            f"No {from_currency}/{to_currency} rate available from {provider}",
            from_currency=from_currency,
            to_currency=to_currency,
        )


# =============================================================================
# CALCULATION ERRORS
# =============================================================================


class CalculationError(ServiceError):
    """
    Raised when a numeric calculation fails in a way input validation
    did not guard against (e.g. overflow in the amortization formula).

    Attributes:
        operation: Name of the calculation that failed
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


# =============================================================================
# CIRCUIT BREAKER (re-exported for convenience)
# =============================================================================

from finance_engine.services.circuit_breaker import CircuitBreakerOpen

__all__ = [
    "ServiceError",
    "ValidationError",
    "CurrencyNotSupportedError",
    "RateError",
    "RateUnavailableError",
    "RateProviderError",
    "RateNotFoundError",
    "CalculationError",
    "CircuitBreakerOpen",
]
