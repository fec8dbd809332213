"""P&L data models for the accounting engine.

These dataclasses are used internally by the lot matchers and returned by the
aggregator:
- Lot tracking (Lot) for a single matching run
- Per-method outputs (PositionResult, RealPositionResult)
- Per-instrument outputs (InstrumentResult, InstrumentRollup)
- The full calculation output (PnLReport)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Self

from brokerage_pnl.portfolio._rounding import (
    ZERO,
    percentage_return,
    round_currency,
)

if TYPE_CHECKING:
    from datetime import date


class AccountingMethod(str, Enum):
    """Cost-basis conventions computed for every instrument."""

    REAL = "real"
    AVERAGE_COST = "avg-cost"
    FIFO = "fifo"
    LIFO = "lifo"


@dataclass
class Lot:
    """Open quantity acquired at one price.

    Owned by exactly one method's matching run; `sequence` is the buy's position in
    the tape and breaks ties between lots with the same date or price.
    """

    quantity: Decimal
    price: Decimal
    acquired_date: date
    sequence: int


@dataclass(frozen=True)
class TradeEvent:
    """A buy or sell as shown in the real method's recent-activity lists."""

    price: Decimal
    date: date
    days_ago: int

    def to_dict(self) -> dict[str, Any]:
        return {"price": self.price, "date": self.date.isoformat(), "days_ago": self.days_ago}


@dataclass(frozen=True)
class PositionResult:
    """P&L of one instrument under one accounting method.

    `total_pnl` is always the sum of the (already rounded) realized and unrealized
    figures, so the identity holds exactly. `position` is never rounded: fractional
    shares are reported at full precision.
    """

    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    position: Decimal
    avg_cost_basis: Decimal
    percentage_return: Decimal
    total_invested: Decimal

    @classmethod
    def build(
        cls,
        *,
        realized: Decimal,
        unrealized: Decimal,
        position: Decimal,
        avg_cost_basis: Decimal,
        invested: Decimal,
        **extra: Any,
    ) -> Self:
        """Round raw figures and derive total and percentage return from them."""
        realized_pnl = round_currency(realized)
        unrealized_pnl = round_currency(unrealized)
        total_pnl = realized_pnl + unrealized_pnl
        return cls(
            realized_pnl=realized_pnl,
            unrealized_pnl=unrealized_pnl,
            total_pnl=total_pnl,
            position=position,
            avg_cost_basis=round_currency(avg_cost_basis),
            percentage_return=percentage_return(total_pnl, invested),
            total_invested=round_currency(invested),
            **extra,
        )

    def expired(self) -> Self:
        """Freeze at realized-only: no position, no unrealized P&L."""
        return replace(
            self,
            position=ZERO,
            unrealized_pnl=ZERO,
            total_pnl=self.realized_pnl,
            percentage_return=percentage_return(self.realized_pnl, self.total_invested),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "realized_pnl": self.realized_pnl,
            "unrealized_pnl": self.unrealized_pnl,
            "total_pnl": self.total_pnl,
            "position": self.position,
            "avg_cost_basis": self.avg_cost_basis,
            "percentage_return": self.percentage_return,
            "total_invested": self.total_invested,
        }


@dataclass(frozen=True)
class RealPositionResult(PositionResult):
    """Real-method result, with the open-lot details used for cheapest-lot displays."""

    lowest_open_buy_price: Decimal = ZERO
    lowest_open_buy_days_ago: int = 0
    recent_buys: tuple[TradeEvent, ...] = ()
    recent_sells: tuple[TradeEvent, ...] = ()
    todays_realized_profit: Decimal = ZERO
    orphan_sell_qty: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "lowest_open_buy_price": self.lowest_open_buy_price,
                "lowest_open_buy_days_ago": self.lowest_open_buy_days_ago,
                "recent_buys": [event.to_dict() for event in self.recent_buys],
                "recent_sells": [event.to_dict() for event in self.recent_sells],
                "todays_realized_profit": self.todays_realized_profit,
                "orphan_sell_qty": self.orphan_sell_qty,
            }
        )
        return data


@dataclass(frozen=True)
class InstrumentResult:
    """All four accounting views of one instrument (stock, ETF or option contract)."""

    kind: ClassVar[str] = "instrument"

    symbol: str
    instrument: str
    is_option: bool
    current_price: Decimal
    real: RealPositionResult
    avg_cost: PositionResult
    fifo: PositionResult
    lifo: PositionResult
    parent_instrument: str | None = None
    expired: bool = False
    previous_close: Decimal = ZERO
    daily_pnl: Decimal = ZERO
    made_up_ground: Decimal = ZERO

    def for_method(self, method: AccountingMethod) -> PositionResult:
        """Select the result computed under `method`."""
        if method is AccountingMethod.REAL:
            return self.real
        if method is AccountingMethod.AVERAGE_COST:
            return self.avg_cost
        if method is AccountingMethod.FIFO:
            return self.fifo
        return self.lifo

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "symbol": self.symbol,
            "instrument": self.instrument,
            "is_option": self.is_option,
            "current_price": self.current_price,
            "parent_instrument": self.parent_instrument,
            "expired": self.expired,
            "previous_close": self.previous_close,
            "daily_pnl": self.daily_pnl,
            "made_up_ground": self.made_up_ground,
            "real": self.real.to_dict(),
            "avg_cost": self.avg_cost.to_dict(),
            "fifo": self.fifo.to_dict(),
            "lifo": self.lifo.to_dict(),
        }


@dataclass(frozen=True)
class InstrumentRollup:
    """A stock or ETF together with the option contracts written on it.

    Options keep their own lot universe; only their P&L is summed onto the parent.
    """

    kind: ClassVar[str] = "rollup"

    instrument: InstrumentResult
    options: tuple[InstrumentResult, ...]

    @property
    def symbol(self) -> str:
        return self.instrument.symbol

    @property
    def options_count(self) -> int:
        return len(self.options)

    @property
    def options_pnl(self) -> Decimal:
        """Sum of the options' real-method total P&L (after expiration handling)."""
        return sum((option.real.total_pnl for option in self.options), ZERO)

    @property
    def options_daily_pnl(self) -> Decimal:
        return round_currency(sum((option.daily_pnl for option in self.options), ZERO))

    @property
    def options_made_up_ground(self) -> Decimal:
        return round_currency(sum((option.made_up_ground for option in self.options), ZERO))

    def options_pnl_for(self, method: AccountingMethod) -> Decimal:
        """Sum of the options' total P&L under `method`."""
        return sum((option.for_method(method).total_pnl for option in self.options), ZERO)

    def to_dict(self) -> dict[str, Any]:
        data = self.instrument.to_dict()
        data.update(
            {
                "kind": self.kind,
                "options_pnl": self.options_pnl,
                "options_count": self.options_count,
                "options_daily_pnl": self.options_daily_pnl,
                "options_made_up_ground": self.options_made_up_ground,
                "options": [option.to_dict() for option in self.options],
            }
        )
        return data


InstrumentRecord = InstrumentResult | InstrumentRollup


def base_instrument(record: InstrumentRecord) -> InstrumentResult:
    """The underlying instrument's own result, whichever variant `record` is."""
    if isinstance(record, InstrumentRollup):
        return record.instrument
    return record


def options_pnl(record: InstrumentRecord) -> Decimal:
    """Rolled-up options P&L for `record` (zero for instruments without options)."""
    if isinstance(record, InstrumentRollup):
        return record.options_pnl
    return ZERO


@dataclass
class PnLReport:
    """Output of one calculation over a full trade history."""

    as_of: date
    instruments: list[InstrumentRecord]
    orphan_options: list[InstrumentResult] = field(default_factory=list)
    anomalies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat(),
            "instruments": [record.to_dict() for record in self.instruments],
            "orphan_options": [option.to_dict() for option in self.orphan_options],
            "anomalies": list(self.anomalies),
        }
