"""Comparison of current results against an earlier stored snapshot.

"Made up ground" separates P&L earned by trading from P&L earned by simply holding:

    (realized_now - realized_then) - position_then * (price_now - price_then)

A positive value means trading since the snapshot did better than holding the
snapshot's position would have.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from brokerage_pnl.portfolio._pnl_models import base_instrument
from brokerage_pnl.portfolio._rounding import round_currency

if TYPE_CHECKING:
    from collections.abc import Iterable

    from brokerage_pnl.portfolio._pnl_models import InstrumentRecord


class SnapshotRow(BaseModel):
    """One instrument's stored figures from an earlier calculation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    realized_pnl: Decimal = Decimal(0)
    position: Decimal = Decimal(0)
    current_price: Decimal = Decimal(0)
    date: date_type | None = Field(default=None, alias="snapshot_date")


@dataclass(frozen=True)
class SnapshotComparison:
    """Made-up-ground figures for one instrument."""

    symbol: str
    available: bool
    made_up_ground: Decimal | None = None
    prior_realized_pnl: Decimal | None = None
    prior_position: Decimal | None = None
    prior_price: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "available": self.available,
            "made_up_ground": self.made_up_ground,
            "prior_realized_pnl": self.prior_realized_pnl,
            "prior_position": self.prior_position,
            "prior_price": self.prior_price,
        }


def compare_with_snapshot(
    records: Iterable[InstrumentRecord], snapshot: Iterable[SnapshotRow]
) -> list[SnapshotComparison]:
    """
    Compute made-up ground for each current record against a prior snapshot.

    Uses the real method's realized figure, matching what snapshots store. Records
    with no prior row are reported as unavailable (typically new positions).
    """
    prior_by_symbol = {row.symbol: row for row in snapshot}
    comparisons: list[SnapshotComparison] = []

    for record in records:
        current = base_instrument(record)
        prior = prior_by_symbol.get(current.symbol)
        if prior is None:
            comparisons.append(SnapshotComparison(symbol=current.symbol, available=False))
            continue

        pnl_change = current.real.realized_pnl - prior.realized_pnl
        price_effect = prior.position * (current.current_price - prior.current_price)
        comparisons.append(
            SnapshotComparison(
                symbol=current.symbol,
                available=True,
                made_up_ground=round_currency(pnl_change - price_effect),
                prior_realized_pnl=prior.realized_pnl,
                prior_position=prior.position,
                prior_price=prior.current_price,
            )
        )

    return comparisons
