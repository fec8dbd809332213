"""
Shared test fixtures.

PHILOSOPHY: Use REAL objects wherever possible.
- Real Pydantic models (not dicts pretending to be models)
- Real CSV text through the real normalizer
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest

from brokerage_pnl.ledger.models import Trade

if TYPE_CHECKING:
    from collections.abc import Callable

ROBINHOOD_HEADER = (
    '"Activity Date","Process Date","Settle Date","Instrument","Description",'
    '"Trans Code","Quantity","Price","Amount"'
)


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Factory for Trade models with sensible defaults (a 10 @ $100 AAPL buy)."""

    def _make(
        symbol: str = "AAPL",
        *,
        day: date = date(2024, 1, 2),
        quantity: Any = "10",
        price: Any = "100",
        is_buy: bool = True,
        **extra: Any,
    ) -> Trade:
        return Trade(
            symbol=symbol,
            date=day,
            quantity=Decimal(str(quantity)),
            price=Decimal(str(price)),
            is_buy=is_buy,
            **extra,
        )

    return _make


@pytest.fixture
def make_option_trade(make_trade: Callable[..., Trade]) -> Callable[..., Trade]:
    """Factory for option trades (one unit priced at the premium amount)."""

    def _make(symbol: str, *, premium: Any, is_buy: bool = True, **extra: Any) -> Trade:
        return make_trade(
            symbol,
            quantity=1,
            price=premium,
            is_buy=is_buy,
            is_option=True,
            description=symbol,
            **extra,
        )

    return _make


@pytest.fixture
def robinhood_csv() -> str:
    """A small Robinhood activity export: stock round trip, an option, cash events."""
    rows = [
        ROBINHOOD_HEADER,
        '"1/2/2024","1/2/2024","1/4/2024","AAPL","Apple","Buy","10","$100.00","($1,000.00)"',
        '"1/10/2024","1/10/2024","1/12/2024","AAPL","Apple","Sell","5","$120.00","$600.00"',
        '"1/5/2024","1/5/2024","1/8/2024","AAPL","AAPL 1/19/2024 Call $150.00","BTO","1",'
        '"$2.50","($250.00)"',
        '"1/15/2024","1/15/2024","1/15/2024","AAPL","Cash Div: R/D 2024-01-12","CDIV","","",'
        '"$2.40"',
        '"1/20/2024","1/20/2024","1/20/2024","","Interest Payment","INT","","","$0.12"',
        '"1/21/2024","1/21/2024","1/21/2024","","ACH Deposit","ACH","","","$500.00"',
    ]
    return "\n".join(rows) + "\n"
