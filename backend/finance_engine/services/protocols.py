# backend/finance_engine/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- ExchangeRateService and CurrencyConversionService satisfy these without
  inheriting from them
- Test fakes only need the methods a consumer actually calls
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Iterator, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from finance_engine.services.currency.types import (
        CurrencyAmount,
        ExchangeRate,
        HistoricalExchangeRate,
    )


class ExchangeRateServiceProtocol(Protocol):
    """Interface required by CurrencyConversionService, CurrencyRiskService and LoanProjectionService."""

    def get_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        ...

    def get_historical_rates(
        self,
        from_currency: str,
        to_currency: str,
        start_date: date,
        end_date: date,
    ) -> Iterator[HistoricalExchangeRate]:
        ...


class ConversionServiceProtocol(Protocol):
    """Interface required by the risk, dashboard and budget services."""

    def convert_amount(self, amount: Any, from_currency: str, to_currency: str) -> CurrencyAmount:
        ...

    def rates_to(self, currencies: Iterable[str], target_currency: str) -> dict[str, Decimal]:
        ...
