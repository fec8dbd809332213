"""Average-cost P&L method.

Cost basis is the weighted average over every buy ever made, with sells ignored when
forming the blend:

    avg_cost_basis = total_cost / (current_shares + total_shares_sold)

No realized figure is computed for this method; it answers "what would my basis look
like if sales had never touched the blend", so total P&L equals unrealized P&L.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from brokerage_pnl.portfolio._pnl_models import PositionResult
from brokerage_pnl.portfolio._rounding import ZERO

if TYPE_CHECKING:
    from collections.abc import Sequence

    from brokerage_pnl.ledger.models import Trade


def calculate_average_cost(trades: Sequence[Trade], current_price: Decimal) -> PositionResult:
    """Calculate average-cost P&L for one instrument's trades."""
    current_shares = ZERO
    total_shares_sold = ZERO
    total_cost = ZERO

    for trade in trades:
        if trade.is_buy:
            current_shares += trade.quantity
            total_cost += trade.quantity * trade.price
        else:
            current_shares -= trade.quantity
            total_shares_sold += trade.quantity

    avg_cost_basis = ZERO
    unrealized = ZERO
    if current_shares > 0 and total_cost > 0:
        avg_cost_basis = total_cost / (current_shares + total_shares_sold)
        unrealized = (current_price - avg_cost_basis) * current_shares

    return PositionResult.build(
        realized=ZERO,
        unrealized=unrealized,
        position=current_shares,
        avg_cost_basis=avg_cost_basis,
        invested=total_cost,
    )
