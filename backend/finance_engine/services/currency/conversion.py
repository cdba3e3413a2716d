# backend/finance_engine/services/currency/conversion.py
"""
Currency Conversion Service.

Turns amounts into CurrencyAmount results using ExchangeRateService.

Degradation:
    A missing rate never fails a conversion. When the rate service raises
    RateUnavailableError the result carries the original amount in the
    original currency with no rate fields, and a warning is logged. Callers
    detect this with `result.is_converted`.

Validation:
    Malformed input (NaN/infinite amounts, bad codes) raises ValidationError
    before any rate lookup. Batch conversion isolates each element instead.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from finance_engine.services.currency.registry import normalize_currency_code, require_supported
from finance_engine.services.currency.types import CurrencyAmount
from finance_engine.services.exceptions import RateUnavailableError, ValidationError
from finance_engine.services.protocols import ExchangeRateServiceProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionRequest:
    """One element of a batch conversion."""

    amount: Any
    from_currency: str
    to_currency: str


def to_decimal_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce a numeric value to a finite Decimal.

    Raises:
        ValidationError: Not a number, NaN or infinite
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}", field=field)
    return result


class CurrencyConversionService:
    """
    Converts amounts between currencies.

    Example:
        service = CurrencyConversionService(rate_service)
        result = service.convert_amount(Decimal("100"), "USD", "EUR")
        print(result.converted_amount, result.exchange_rate)
    """

    def __init__(self, rate_service: ExchangeRateServiceProtocol) -> None:
        self._rates = rate_service

    @property
    def rate_service(self) -> ExchangeRateServiceProtocol:
        return self._rates

    def convert_amount(self, amount: Any, from_currency: str, to_currency: str) -> CurrencyAmount:
        """
        Convert an amount into another currency.

        Returns:
            Identity pair: {amount, currency: to} without rate fields
            Success: {amount, currency: to, converted_amount, exchange_rate,
                      last_updated}
            No rate: {amount, currency: from} without rate fields

        Raises:
            ValidationError: Non-finite amount or bad currency code
        """
        value = to_decimal_amount(amount)
        from_currency = require_supported(from_currency, field="from_currency")
        to_currency = require_supported(to_currency, field="to_currency")

        if from_currency == to_currency:
            return CurrencyAmount(amount=value, currency=to_currency)

        try:
            rate = self._rates.get_rate(from_currency, to_currency)
        except RateUnavailableError as e:
            logger.warning(f"Conversion {from_currency}->{to_currency} degraded to original amount: {e}")
            return CurrencyAmount(amount=value, currency=from_currency)

        return CurrencyAmount(
            amount=value,
            currency=to_currency,
            converted_amount=value * rate.rate,
            exchange_rate=rate.rate,
            last_updated=rate.timestamp,
        )

    def convert_multiple_amounts(self, requests: Iterable[ConversionRequest]) -> list[CurrencyAmount]:
        """
        Convert each request independently, preserving order.

        A failing element (even one that fails validation) yields its
        degraded result; the batch is never aborted.
        """
        results = []
        for index, request in enumerate(requests):
            try:
                result = self.convert_amount(request.amount, request.from_currency, request.to_currency)
            except ValidationError as e:
                logger.warning(f"Batch conversion item {index} invalid: {e}")
                result = self._degraded(request)
            results.append(result)
        return results

    def convert_to(self, amount: CurrencyAmount, target_currency: str) -> CurrencyAmount:
        """Convert an existing CurrencyAmount (its native amount) into target_currency."""
        return self.convert_amount(amount.amount, amount.currency, target_currency)

    def rates_to(self, currencies: Iterable[str], target_currency: str) -> dict[str, Decimal]:
        """
        Rate from each currency into target_currency.

        Currencies whose rate is unavailable are left out. The target itself
        maps to 1.
        """
        target = require_supported(target_currency, field="target_currency")
        rates: dict[str, Decimal] = {target: Decimal("1")}
        for code in sorted(set(currencies)):
            if code in rates:
                continue
            try:
                rates[code] = self._rates.get_rate(code, target).rate
            except (ValidationError, RateUnavailableError) as e:
                logger.warning(f"No {code}->{target} rate for aggregation: {e}")
        return rates

    @staticmethod
    def _degraded(request: ConversionRequest) -> CurrencyAmount:
        """Original amount in original currency, or zero when unusable."""
        try:
            amount = to_decimal_amount(request.amount)
        except ValidationError:
            amount = Decimal("0")
        try:
            code = normalize_currency_code(request.from_currency, field="from_currency")
        except ValidationError:
            code = "XXX"
        return CurrencyAmount(amount=amount, currency=code)
