# backend/finance_engine/services/currency/types.py
"""
Value types shared by every currency-aware component.

All monetary values are Decimal. Types are frozen dataclasses: the engine
reads immutable snapshots and never mutates a caller's amounts.

Architecture:
    - CurrencyAmount: amount + code, optionally carrying a conversion
    - Currency: immutable reference data for a supported currency
    - ExchangeRate / HistoricalExchangeRate: provider or cache output
    - CurrencyExposure: one currency's share of a portfolio
    - CurrencyVolatility, HedgingOption, CurrencyRiskAnalysis: risk output
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def _check_code(code: str, label: str) -> None:
    if not isinstance(code, str) or not _CODE_PATTERN.match(code):
        raise ValueError(f"{label} must be a 3-letter upper-case ISO 4217 code, got {code!r}")


class RiskLevel(str, Enum):
    """Currency risk tier."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VolatilityTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


# =============================================================================
# MONEY
# =============================================================================

@dataclass(frozen=True)
class CurrencyAmount:
    """
    An amount of money, optionally with its conversion into another currency.

    Attributes:
        amount: The amount (finite Decimal)
        currency: ISO 4217 code the result is expressed in
        converted_amount: Amount after conversion, when a rate was applied
        exchange_rate: Rate used for the conversion
        last_updated: When the rate was observed

    Invariant:
        converted_amount requires exchange_rate. The reverse is allowed, so an
        amount can carry a known rate without having been converted yet.
    """

    amount: Decimal
    currency: str
    converted_amount: Decimal | None = None
    exchange_rate: Decimal | None = None
    last_updated: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if not self.amount.is_finite():
            raise ValueError(f"amount must be finite, got {self.amount}")
        _check_code(self.currency, "currency")
        if self.converted_amount is not None and self.exchange_rate is None:
            raise ValueError("converted_amount requires exchange_rate")
        if self.converted_amount is not None and not self.converted_amount.is_finite():
            raise ValueError(f"converted_amount must be finite, got {self.converted_amount}")

    @property
    def is_converted(self) -> bool:
        return self.converted_amount is not None

    @property
    def effective_amount(self) -> Decimal:
        """The converted amount when a conversion happened, else the amount."""
        if self.converted_amount is not None:
            return self.converted_amount
        return self.amount


# =============================================================================
# REFERENCE DATA
# =============================================================================

@dataclass(frozen=True)
class Currency:
    """
    Supported currency reference data.

    Attributes:
        code: ISO 4217 code (e.g. "JPY")
        name: Display name
        symbol: Display symbol (e.g. "¥")
        decimal_places: Minor units, 0 to 4
        countries: Names of the countries using the currency (non-empty)
    """

    code: str
    name: str
    symbol: str
    decimal_places: int
    countries: tuple[str, ...]

    def __post_init__(self) -> None:
        _check_code(self.code, "code")
        if not 0 <= self.decimal_places <= 4:
            raise ValueError(f"decimal_places must be 0-4, got {self.decimal_places}")
        if not self.countries:
            raise ValueError(f"Currency {self.code} must list at least one country")


# =============================================================================
# EXCHANGE RATES
# =============================================================================

@dataclass(frozen=True)
class ExchangeRate:
    """
    Rate for one currency pair: 1 from_currency = rate to_currency.

    Attributes:
        source: Where the rate came from: "api", "cache", "stale-cache",
            "static" or "internal" (identity short-circuit)
    """

    from_currency: str
    to_currency: str
    rate: Decimal
    timestamp: datetime
    source: str

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        if self.from_currency == self.to_currency and self.source != "internal":
            raise ValueError("Identity pairs never produce a rate record")

    @classmethod
    def identity(cls, currency: str) -> "ExchangeRate":
        """Rate 1 for converting a currency into itself."""
        return cls(
            from_currency=currency,
            to_currency=currency,
            rate=Decimal("1"),
            timestamp=datetime.now(timezone.utc),
            source="internal",
        )

    @property
    def pair(self) -> tuple[str, str]:
        return self.from_currency, self.to_currency


@dataclass(frozen=True)
class HistoricalExchangeRate(ExchangeRate):
    """ExchangeRate for a specific calendar day."""

    date: date = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.date is None:
            raise ValueError("date is required")


# =============================================================================
# EXPOSURE & RISK
# =============================================================================

@dataclass(frozen=True)
class CurrencyExposure:
    """
    One currency's share of a portfolio snapshot.

    Attributes:
        total_value: Native value of the holdings; carries the conversion
            into the base currency when rates were available
        percentage: Share of the portfolio, 0 to 100
    """

    currency: str
    total_value: CurrencyAmount
    percentage: Decimal
    risk_level: RiskLevel


@dataclass(frozen=True)
class CurrencyVolatility:
    """
    Annualized exchange rate volatility (%) against the base currency.

    A window is None when there were too few observations in it.
    """

    currency: str
    volatility_30d: Decimal | None
    volatility_90d: Decimal | None
    volatility_1y: Decimal | None
    trend: VolatilityTrend = VolatilityTrend.STABLE

    @property
    def representative(self) -> Decimal | None:
        """Longest window with data: 1y, then 90d, then 30d."""
        for value in (self.volatility_1y, self.volatility_90d, self.volatility_30d):
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class HedgingOption:
    instrument: str
    currency: str
    hedge_amount: CurrencyAmount
    hedge_ratio: Decimal
    description: str


@dataclass
class CurrencyRiskAnalysis:
    """Result of one currency risk analysis run (not persisted)."""

    base_currency: str
    total_value: CurrencyAmount
    exposures: list[CurrencyExposure]
    risk_score: Decimal
    recommendations: list[str] = field(default_factory=list)
    hedging_options: list[HedgingOption] = field(default_factory=list)
    volatility: list[CurrencyVolatility] = field(default_factory=list)
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
