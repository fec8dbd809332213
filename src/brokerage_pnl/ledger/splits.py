"""Stock-split adjustment of pre-split trades.

A split ratio of 4 means one pre-split share became four: each adjusted trade has
`price / 4` and `quantity * 4`, so total traded value is unchanged. Options are never
adjusted (their symbol embeds the strike, which a plain ratio cannot rewrite).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

import structlog

from brokerage_pnl.exceptions import SplitRatioError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from brokerage_pnl.ledger.models import Trade

logger = structlog.get_logger()


def adjust_trade_for_split(trade: Trade, ratio: Decimal) -> Trade:
    """Return a copy of `trade` restated in post-split units."""
    return trade.model_copy(
        update={
            "price": trade.price / ratio,
            "quantity": trade.quantity * ratio,
        }
    )


def apply_splits(
    trades: Iterable[Trade], split_ratios: Mapping[str, Decimal | float | int]
) -> list[Trade]:
    """
    Apply per-symbol split ratios to a trade tape.

    Trades for symbols without a ratio (and all option trades) pass through unchanged.
    Non-positive ratios are ignored with a warning rather than corrupting the tape.

    Args:
        trades: Normalized trades, in any order.
        split_ratios: Mapping of symbol to split ratio (new shares per old share).

    Returns:
        A new list in the same order as `trades`.
    """
    ratios: dict[str, Decimal] = {}
    for symbol, raw_ratio in split_ratios.items():
        try:
            ratio = Decimal(str(raw_ratio))
        except InvalidOperation:
            ratio = Decimal(0)
        if not ratio.is_finite() or ratio <= 0:
            logger.warning("Ignoring non-positive split ratio", symbol=symbol, ratio=str(raw_ratio))
            continue
        ratios[symbol] = ratio

    adjusted: list[Trade] = []
    for trade in trades:
        ratio = ratios.get(trade.symbol)
        if ratio is None or trade.is_option or ratio == 1:
            adjusted.append(trade)
            continue
        adjusted.append(adjust_trade_for_split(trade, ratio))
    return adjusted


def parse_split_spec(spec: str) -> tuple[str, Decimal]:
    """
    Parse a `SYMBOL=RATIO` CLI specification (e.g. `AAPL=4` or `GE=1/8`).

    Raises:
        SplitRatioError: If the spec is malformed or the ratio is not positive.
    """
    symbol, sep, raw_ratio = spec.partition("=")
    symbol = symbol.strip().upper()
    if not sep or not symbol:
        raise SplitRatioError(spec)

    numerator, slash, denominator = raw_ratio.strip().partition("/")
    try:
        ratio = Decimal(numerator)
        if slash:
            ratio = ratio / Decimal(denominator)
    except (InvalidOperation, ZeroDivisionError):
        raise SplitRatioError(spec) from None

    if not ratio.is_finite() or ratio <= 0:
        raise SplitRatioError(spec)
    return symbol, ratio
