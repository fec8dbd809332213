"""Real (hybrid) P&L method.

This method keeps two sets of books:

1. The reported realized figure is the simple cash total
   `sum(sell amounts) - sum(buy amounts) (+ dividends - interest)`. Unrealized is the
   market value of whatever is still held, so total P&L reads as "cash out minus cash
   in plus what I still own".

2. A lot walk tracks which buys are still open, only to answer "what is my cheapest
   remaining lot, and how old is it". Its consumption policy:
   - A sell below the running average open cost consumes the lowest-priced lots first.
   - Any other sell consumes the oldest lots first.

The lot walk never feeds the realized figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from brokerage_pnl.constants import LOT_POSITION_MISMATCH_TOLERANCE, MAX_RECENT_EVENTS
from brokerage_pnl.portfolio._pnl_models import Lot, RealPositionResult, TradeEvent
from brokerage_pnl.portfolio._rounding import ZERO, round_currency, safe_divide

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from brokerage_pnl.ledger.models import Trade

logger = structlog.get_logger()


def _cheapest_first(lot: Lot) -> tuple[Decimal, int]:
    return (lot.price, lot.sequence)


def _oldest_first(lot: Lot) -> tuple[date, int]:
    return (lot.acquired_date, lot.sequence)


@dataclass
class _OpenBook:
    """Open lots plus running aggregates over the open exposure only."""

    lots: list[Lot] = field(default_factory=list)
    open_bought: Decimal = ZERO
    open_cost: Decimal = ZERO

    @property
    def avg_buy_price(self) -> Decimal:
        return safe_divide(self.open_cost, self.open_bought)

    def add(self, lot: Lot) -> None:
        self.lots.append(lot)
        self.lots.sort(key=_cheapest_first)
        self.open_bought += lot.quantity
        self.open_cost += lot.quantity * lot.price

    def consume(self, quantity: Decimal, sell_price: Decimal) -> tuple[Decimal, Decimal]:
        """
        Remove `quantity` from the open lots for a sell at `sell_price`.

        Returns:
            (lot-matched P&L of the consumed slices, quantity left unmatched)
        """
        if sell_price < self.avg_buy_price:
            order = sorted(self.lots, key=_cheapest_first)
        else:
            order = sorted(self.lots, key=_oldest_first)

        matched_pnl = ZERO
        remaining = quantity
        for lot in order:
            if remaining <= 0:
                break
            consume_qty = min(lot.quantity, remaining)
            matched_pnl += (sell_price - lot.price) * consume_qty
            lot.quantity -= consume_qty
            remaining -= consume_qty
            self.open_bought -= consume_qty
            self.open_cost -= consume_qty * lot.price

        self.lots = [lot for lot in self.lots if lot.quantity > 0]
        if not self.lots:
            # Clear residue left by fractional arithmetic once everything is sold.
            self.open_bought = ZERO
            self.open_cost = ZERO
        return matched_pnl, remaining

    @property
    def quantity(self) -> Decimal:
        return sum((lot.quantity for lot in self.lots), ZERO)

    @property
    def cost(self) -> Decimal:
        return sum((lot.quantity * lot.price for lot in self.lots), ZERO)


def _recent_events(
    events: list[tuple[date, int, Decimal]], as_of: date
) -> tuple[TradeEvent, ...]:
    newest = sorted(events, key=lambda e: (e[0], e[1]), reverse=True)[:MAX_RECENT_EVENTS]
    return tuple(
        TradeEvent(price=round_currency(price), date=day, days_ago=(as_of - day).days)
        for day, _sequence, price in newest
    )


def calculate_real(
    trades: Sequence[Trade],
    current_price: Decimal,
    *,
    as_of: date,
    cash_adjustment: Decimal = ZERO,
) -> RealPositionResult:
    """
    Calculate real-method P&L for one instrument.

    Args:
        trades: One instrument's trades, already in date order.
        current_price: Reference price for the open position.
        as_of: Date that ages are measured against and that defines "today's" sells.
        cash_adjustment: Net dividends minus interest to fold into realized P&L.

    Returns:
        RealPositionResult with the simple realized total and open-lot details.
    """
    book = _OpenBook()
    total_buy_amount = ZERO
    total_buy_shares = ZERO
    total_sell_amount = ZERO
    position = ZERO
    todays_realized_profit = ZERO
    orphan_sell_qty = ZERO
    buys: list[tuple[date, int, Decimal]] = []
    sells: list[tuple[date, int, Decimal]] = []

    for sequence, trade in enumerate(trades):
        if trade.is_buy:
            total_buy_amount += trade.quantity * trade.price
            total_buy_shares += trade.quantity
            position += trade.quantity
            book.add(
                Lot(
                    quantity=trade.quantity,
                    price=trade.price,
                    acquired_date=trade.date,
                    sequence=sequence,
                )
            )
            buys.append((trade.date, sequence, trade.price))
            continue

        total_sell_amount += trade.quantity * trade.price
        position -= trade.quantity
        sells.append((trade.date, sequence, trade.price))

        matched_pnl, unmatched = book.consume(trade.quantity, trade.price)
        orphan_sell_qty += unmatched
        if trade.date == as_of:
            todays_realized_profit += matched_pnl

    if orphan_sell_qty:
        logger.warning(
            "Sell quantity exceeded open lots; excess left unmatched",
            symbol=trades[0].symbol,
            method="real",
            orphan_sell_qty=str(orphan_sell_qty),
        )

    realized = total_sell_amount - total_buy_amount + cash_adjustment

    unrealized = ZERO
    avg_cost_basis = ZERO
    if position > 0:
        unrealized = position * current_price
        open_quantity = book.quantity
        if open_quantity > 0 and abs(open_quantity - position) <= LOT_POSITION_MISMATCH_TOLERANCE:
            avg_cost_basis = safe_divide(book.cost, open_quantity)
        else:
            avg_cost_basis = safe_divide(total_buy_amount, total_buy_shares)

    lowest_open_buy_price = ZERO
    lowest_open_buy_days_ago = 0
    if book.lots:
        cheapest = min(book.lots, key=_cheapest_first)
        lowest_open_buy_price = cheapest.price
        lowest_open_buy_days_ago = (as_of - cheapest.acquired_date).days

    return RealPositionResult.build(
        realized=realized,
        unrealized=unrealized,
        position=position,
        avg_cost_basis=avg_cost_basis,
        invested=total_buy_amount,
        lowest_open_buy_price=round_currency(lowest_open_buy_price),
        lowest_open_buy_days_ago=lowest_open_buy_days_ago,
        recent_buys=_recent_events(buys, as_of),
        recent_sells=_recent_events(sells, as_of),
        todays_realized_profit=round_currency(todays_realized_profit),
        orphan_sell_qty=orphan_sell_qty,
    )
