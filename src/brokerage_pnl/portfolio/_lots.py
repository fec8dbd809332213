"""FIFO and LIFO lot matching.

Both conventions share one walk over the trade tape; they differ only in which end
of the open-lot deque a sell consumes from:
- FIFO consumes the oldest lot (left end).
- LIFO consumes the newest lot (right end).

Realized P&L here genuinely is the lot-walk total: the sum of
`(sell price - lot price) * consumed quantity` over every consumption.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from brokerage_pnl.constants import POSITION_EPSILON
from brokerage_pnl.portfolio._pnl_models import Lot, PositionResult
from brokerage_pnl.portfolio._rounding import ZERO, safe_divide

if TYPE_CHECKING:
    from collections.abc import Sequence

    from brokerage_pnl.ledger.models import Trade

logger = structlog.get_logger()


@dataclass
class LotWalk:
    """Raw (unrounded) outcome of matching one instrument's tape."""

    realized: Decimal
    open_lots: list[Lot]
    invested: Decimal
    orphan_sell_qty: Decimal

    @property
    def position(self) -> Decimal:
        return sum((lot.quantity for lot in self.open_lots), ZERO)

    @property
    def open_cost(self) -> Decimal:
        return sum((lot.quantity * lot.price for lot in self.open_lots), ZERO)


def walk_lots(trades: Sequence[Trade], *, newest_first: bool) -> LotWalk:
    """
    Match sells against open lots in tape order.

    Args:
        trades: One instrument's trades, already in date order.
        newest_first: Consume the most recent lot first (LIFO) instead of the oldest.

    Returns:
        LotWalk with realized P&L, the remaining open lots (oldest first), total buy
        cost, and any sell quantity that had no open lot to match.
    """
    lots: deque[Lot] = deque()
    realized = ZERO
    invested = ZERO
    orphan_sell_qty = ZERO

    for sequence, trade in enumerate(trades):
        if trade.is_buy:
            lots.append(
                Lot(
                    quantity=trade.quantity,
                    price=trade.price,
                    acquired_date=trade.date,
                    sequence=sequence,
                )
            )
            invested += trade.quantity * trade.price
            continue

        remaining_to_sell = trade.quantity
        while remaining_to_sell > 0:
            if not lots:
                orphan_sell_qty += remaining_to_sell
                break

            lot = lots[-1] if newest_first else lots[0]
            consume_qty = min(lot.quantity, remaining_to_sell)
            realized += (trade.price - lot.price) * consume_qty
            lot.quantity -= consume_qty
            remaining_to_sell -= consume_qty

            if lot.quantity == 0:
                if newest_first:
                    lots.pop()
                else:
                    lots.popleft()

    if orphan_sell_qty:
        logger.warning(
            "Sell quantity exceeded open lots; excess left unmatched",
            symbol=trades[0].symbol,
            method="lifo" if newest_first else "fifo",
            orphan_sell_qty=str(orphan_sell_qty),
        )

    return LotWalk(
        realized=realized,
        open_lots=list(lots),
        invested=invested,
        orphan_sell_qty=orphan_sell_qty,
    )


def _result_from_walk(walk: LotWalk, current_price: Decimal) -> PositionResult:
    position = walk.position
    if position <= POSITION_EPSILON:
        return PositionResult.build(
            realized=walk.realized,
            unrealized=ZERO,
            position=ZERO,
            avg_cost_basis=ZERO,
            invested=walk.invested,
        )

    avg_cost_basis = safe_divide(walk.open_cost, position)
    return PositionResult.build(
        realized=walk.realized,
        unrealized=(current_price - avg_cost_basis) * position,
        position=position,
        avg_cost_basis=avg_cost_basis,
        invested=walk.invested,
    )


def calculate_fifo(trades: Sequence[Trade], current_price: Decimal) -> PositionResult:
    """First-in-first-out: each sell consumes the oldest open lot first."""
    return _result_from_walk(walk_lots(trades, newest_first=False), current_price)


def calculate_lifo(trades: Sequence[Trade], current_price: Decimal) -> PositionResult:
    """Last-in-first-out: each sell consumes the newest open lot first."""
    return _result_from_walk(walk_lots(trades, newest_first=True), current_price)
