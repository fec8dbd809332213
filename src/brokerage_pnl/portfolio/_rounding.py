"""Decimal helpers shared by the lot matchers."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from brokerage_pnl.constants import CURRENCY_QUANTUM

ZERO = Decimal(0)
HUNDRED = Decimal(100)


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, half away from zero (`ROUND_HALF_UP` in decimal terms)."""
    return value.quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero instead of raising when the denominator is zero."""
    if denominator == 0:
        return ZERO
    return numerator / denominator


def percentage_return(total_pnl: Decimal, invested: Decimal) -> Decimal:
    """`total / invested * 100`, rounded to two places; zero when nothing was invested."""
    return round_currency(safe_divide(total_pnl, invested) * HUNDRED)


def to_decimal(value: object) -> Decimal:
    """
    Coerce a price-like value to Decimal.

    Floats go through `str()` so 0.1 stays 0.1 rather than its binary expansion.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int | float | str):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    else:
        raise ValueError(f"Not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return number
