# backend/finance_engine/schemas/base.py
"""
Shared schema building blocks.

All API models serialize with camelCase aliases ("convertedAmount",
"riskLevel") and accept either camelCase or snake_case input. Decimals
serialize as JSON strings so no precision is lost in transit.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finance_engine.schemas.validators import (
    validate_amount,
    validate_currency_code,
    validate_non_negative_amount,
)
from finance_engine.services.currency.types import CurrencyAmount

CurrencyCode = Annotated[
    str,
    AfterValidator(validate_currency_code),
    Field(description="ISO 4217 currency code", examples=["USD"]),
]

Amount = Annotated[Decimal, AfterValidator(validate_amount)]
NonNegativeAmount = Annotated[Decimal, AfterValidator(validate_non_negative_amount)]


class ApiModel(BaseModel):
    """Base model for every request and response body."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MoneySchema(ApiModel):
    """An amount, with its conversion when one was applied."""

    amount: Decimal
    currency: str
    converted_amount: Decimal | None = None
    exchange_rate: Decimal | None = None
    last_updated: datetime | None = None

    @classmethod
    def from_domain(cls, value: CurrencyAmount) -> "MoneySchema":
        return cls(
            amount=value.amount,
            currency=value.currency,
            converted_amount=value.converted_amount,
            exchange_rate=value.exchange_rate,
            last_updated=value.last_updated,
        )


class MoneyInput(ApiModel):
    """Amount in a currency, as supplied by the client."""

    amount: NonNegativeAmount
    currency: CurrencyCode

    def to_domain(self) -> CurrencyAmount:
        return CurrencyAmount(self.amount, self.currency)
