"""Pydantic models for normalized ledger records (trades, dividends, interest)."""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class Trade(BaseModel):
    """Single normalized buy or sell of one instrument.

    Produced by the ledger normalizer (or any other collaborator) and only read by
    the accounting engine. Magnitudes are non-negative; direction lives in `is_buy`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str = Field(min_length=1)
    """Ticker for stocks/ETFs; the full contract description for options."""

    date: date_type = Field(validation_alias=AliasChoices("date", "trans_date", "transDate"))
    """Activity date of the fill."""

    quantity: Decimal = Field(ge=0)
    """Shares or contracts traded (magnitude)."""

    price: Decimal = Field(ge=0)
    """Per-unit execution price (magnitude)."""

    amount: Decimal = Decimal(0)
    """Total traded value (magnitude). Defaults to quantity * price."""

    is_buy: bool = Field(validation_alias=AliasChoices("is_buy", "isBuy"))
    """True for buys (including buy-to-open/close), False for sells."""

    is_option: bool = Field(default=False, validation_alias=AliasChoices("is_option", "isOption"))
    """True when the instrument is an options contract."""

    description: str = ""
    """Broker description; used to resolve an option's underlying ticker."""

    instrument: str = ""
    """Display label for the instrument (defaults to the symbol)."""

    trans_code: str = Field(default="", validation_alias=AliasChoices("trans_code", "transCode"))
    """Raw broker transaction code (Buy, Sell, BTO, STC, ...)."""

    @field_validator("date", mode="before")
    @classmethod
    def coerce_datetime(cls, value: object) -> object:
        """Accept datetimes by dropping the time component."""
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, value: object) -> object:
        """Amounts are stored as magnitudes regardless of the broker's sign convention."""
        if isinstance(value, int | float | Decimal):
            return abs(Decimal(str(value)))
        if isinstance(value, str) and value.strip().startswith("-"):
            return value.strip()[1:]
        return value

    @model_validator(mode="before")
    @classmethod
    def fill_derived_fields(cls, data: Any) -> Any:
        """Default `amount` to quantity * price and `instrument` to the symbol."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("instrument"):
            data["instrument"] = data.get("symbol", "")
        try:
            if Decimal(str(data.get("amount") or 0).strip() or 0) == 0:
                data["amount"] = Decimal(str(data["quantity"])) * Decimal(str(data["price"]))
        except (KeyError, InvalidOperation):
            # Field validation reports the malformed input.
            pass
        return data


class DividendOrInterest(BaseModel):
    """Cash dividend or interest record attributed to a symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    date: date_type
    amount: Decimal = Field(ge=0)
    kind: Literal["dividend", "interest"]
    description: str = ""

    @property
    def signed_amount(self) -> Decimal:
        """Contribution to realized P&L: dividends add, interest subtracts."""
        return self.amount if self.kind == "dividend" else -self.amount
