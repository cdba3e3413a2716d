# backend/finance_engine/models.py
"""
Domain records handed to the calculation engine.

The persistence layer owns these records' lifecycle. The engine only reads
immutable snapshots per invocation, so every record is a frozen dataclass.
Dates are plain calendar values; converting store-native timestamps is the
caller's job.
"""
import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from finance_engine.services.currency.types import CurrencyAmount


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class InvestmentType(str, enum.Enum):
    STOCKS = "stocks"
    BONDS = "bonds"
    MUTUAL_FUNDS = "mutual_funds"
    ETF = "etf"
    OPTIONS = "options"
    REAL_ESTATE = "real_estate"
    CRYPTO = "crypto"
    OTHER = "other"


class IncomeType(str, enum.Enum):
    SALARY = "salary"
    BONUS = "bonus"
    OTHER = "other"


class LoanType(str, enum.Enum):
    HOME = "home"
    CAR = "car"
    PERSONAL = "personal"
    OTHER = "other"


@dataclass(frozen=True)
class Investment:
    id: str
    user_id: str
    type: InvestmentType
    name: str
    quantity: Decimal
    purchase_price: CurrencyAmount
    currency: str
    purchase_date: date | None = None
    current_price: CurrencyAmount | None = None
    symbol: str | None = None
    exchange: str | None = None

    @property
    def unit_price(self) -> Decimal:
        """Current price when known, purchase price otherwise."""
        if self.current_price is not None:
            return self.current_price.amount
        return self.purchase_price.amount

    @property
    def market_value(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class Income:
    id: str
    user_id: str
    source: str
    amount: CurrencyAmount
    frequency: Frequency
    start_date: date
    end_date: date | None = None
    is_active: bool = True
    type: IncomeType = IncomeType.OTHER

    @property
    def currency(self) -> str:
        return self.amount.currency


@dataclass(frozen=True)
class Expense:
    id: str
    user_id: str
    category: str
    name: str
    amount: CurrencyAmount
    frequency: Frequency
    start_date: date | None = None
    end_date: date | None = None
    is_fixed: bool = False

    @property
    def currency(self) -> str:
        return self.amount.currency


@dataclass(frozen=True)
class Loan:
    id: str
    user_id: str
    name: str
    principal: CurrencyAmount
    current_balance: CurrencyAmount
    interest_rate: Decimal
    term_months: int
    monthly_payment: CurrencyAmount
    start_date: date
    next_payment_date: date
    type: LoanType = LoanType.OTHER
    lender: str | None = None

    @property
    def currency(self) -> str:
        return self.current_balance.currency


@dataclass(frozen=True)
class Goal:
    id: str
    user_id: str
    name: str
    target_amount: CurrencyAmount
    current_amount: CurrencyAmount
    target_date: date | None = None
    is_active: bool = True
