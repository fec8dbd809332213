"""P&L (Profit and Loss) calculator across accounting methods.

Every calculation re-derives everything from the trade history it is given:
- Trades are validated, grouped by symbol, and stably ordered by date.
- Each symbol is run through all four methods (real, average cost, FIFO, LIFO), each
  with its own lot state local to that call.
- Options past expiration (relative to the as-of date) are frozen at realized P&L.
- Options are rolled up onto their underlying and removed from the top-level list.

Data-quality problems never abort a batch: the offending record is skipped, logged,
and listed in `PnLReport.anomalies`. Only caller contract violations raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from brokerage_pnl.ledger.models import DividendOrInterest, Trade
from brokerage_pnl.portfolio._average_cost import calculate_average_cost
from brokerage_pnl.portfolio._lots import calculate_fifo, calculate_lifo
from brokerage_pnl.portfolio._options import (
    extract_parent_instrument,
    is_option_expired,
    rollup_options,
)
from brokerage_pnl.portfolio._pnl_models import InstrumentResult, PnLReport
from brokerage_pnl.portfolio._real import calculate_real
from brokerage_pnl.portfolio._rounding import ZERO, round_currency, to_decimal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from brokerage_pnl.portfolio._pnl_models import InstrumentRecord

logger = structlog.get_logger()

TradeInput = Trade | Mapping[str, Any]
DivItemInput = DividendOrInterest | Mapping[str, Any]


class PnLCalculator:
    """Calculate profit/loss for every instrument in a trade history."""

    def calculate(
        self,
        trades: Iterable[TradeInput],
        prices: Mapping[str, Any],
        as_of: date | None = None,
        dividends_and_interest: Iterable[DivItemInput] | None = None,
        previous_close: Mapping[str, Any] | None = None,
    ) -> PnLReport:
        """
        Calculate P&L under all four accounting methods.

        Args:
            trades: Trade records (or mappings in the Trade shape) for any symbols.
            prices: Symbol to current price. Missing symbols are priced at 0.
            as_of: Reference date for option expiration and trade ages. Defaults to
                today; pass it explicitly when replaying a historical snapshot.
            dividends_and_interest: Cash events folded into the real method's
                realized P&L (dividends add, interest subtracts).
            previous_close: Symbol to prior close, enabling daily P&L figures.

        Returns:
            PnLReport with stock/ETF-level records sorted by symbol.

        Raises:
            TypeError: If `trades` or `prices` is None.
        """
        if trades is None:
            raise TypeError("trades must be an iterable of Trade records, not None")
        if prices is None:
            raise TypeError("prices must be a mapping of symbol to price, not None")

        if as_of is None:
            as_of = date.today()
        elif isinstance(as_of, datetime):
            as_of = as_of.date()

        anomalies: list[str] = []
        valid_trades = self._validate_trades(trades, anomalies)
        price_map = self._coerce_prices(prices, anomalies, label="price")
        previous_close_map = self._coerce_prices(
            previous_close or {}, anomalies, label="previous close"
        )
        cash_adjustments = self._cash_adjustments(dividends_and_interest or [], anomalies)

        trades_by_symbol: dict[str, list[Trade]] = {}
        for trade in valid_trades:
            trades_by_symbol.setdefault(trade.symbol, []).append(trade)

        unmatched_cash = set(cash_adjustments) - set(trades_by_symbol)
        if unmatched_cash:
            logger.debug("Cash events for symbols without trades", symbols=sorted(unmatched_cash))

        results: list[InstrumentResult] = []
        for symbol, symbol_trades in trades_by_symbol.items():
            # sorted() is stable, so same-day trades keep tape order.
            ordered = sorted(symbol_trades, key=lambda t: t.date)
            results.append(
                self._calculate_instrument(
                    symbol,
                    ordered,
                    current_price=price_map.get(symbol, ZERO),
                    previous_close=previous_close_map.get(symbol),
                    as_of=as_of,
                    cash_adjustment=cash_adjustments.get(symbol, ZERO),
                    anomalies=anomalies,
                )
            )

        records, orphans = rollup_options(results)
        logger.info(
            "Calculated P&L",
            trades=len(valid_trades),
            symbols=len(results),
            instruments=len(records),
            orphan_options=len(orphans),
            anomalies=len(anomalies),
            as_of=as_of.isoformat(),
        )
        return PnLReport(
            as_of=as_of,
            instruments=records,
            orphan_options=orphans,
            anomalies=anomalies,
        )

    @staticmethod
    def _validate_trades(trades: Iterable[TradeInput], anomalies: list[str]) -> list[Trade]:
        """Keep well-formed trades; log and skip everything else."""
        valid: list[Trade] = []
        for index, raw in enumerate(trades):
            if isinstance(raw, Trade):
                trade = raw
            elif isinstance(raw, Mapping):
                try:
                    trade = Trade.model_validate(raw)
                except ValidationError as e:
                    errors = "; ".join(
                        f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                        for err in e.errors()
                    )
                    anomalies.append(f"trade {index}: {errors}")
                    logger.warning("Skipping malformed trade", index=index, errors=errors)
                    continue
            else:
                anomalies.append(f"trade {index}: unsupported record type {type(raw).__name__}")
                logger.warning("Skipping unsupported trade record", index=index)
                continue

            if trade.quantity == 0:
                anomalies.append(f"trade {index}: zero quantity for {trade.symbol}")
                logger.warning("Skipping zero-quantity trade", index=index, symbol=trade.symbol)
                continue
            valid.append(trade)
        return valid

    @staticmethod
    def _coerce_prices(
        prices: Mapping[str, Any], anomalies: list[str], *, label: str
    ) -> dict[str, Decimal]:
        coerced: dict[str, Decimal] = {}
        for symbol, raw in prices.items():
            if raw is None:
                continue
            try:
                value = to_decimal(raw)
            except ValueError:
                anomalies.append(f"{label} for {symbol}: not a number ({raw!r})")
                logger.warning("Ignoring non-numeric price", kind=label, symbol=symbol)
                continue
            if value < 0:
                anomalies.append(f"{label} for {symbol}: negative ({value})")
                logger.warning("Ignoring negative price", kind=label, symbol=symbol)
                continue
            coerced[symbol] = value
        return coerced

    @staticmethod
    def _cash_adjustments(
        items: Iterable[DivItemInput], anomalies: list[str]
    ) -> dict[str, Decimal]:
        """Net dividends minus interest per symbol."""
        adjustments: dict[str, Decimal] = {}
        for index, raw in enumerate(items):
            try:
                item = (
                    raw
                    if isinstance(raw, DividendOrInterest)
                    else DividendOrInterest.model_validate(raw)
                )
            except ValidationError as e:
                anomalies.append(f"dividend/interest {index}: {e.error_count()} validation errors")
                logger.warning("Skipping malformed dividend/interest record", index=index)
                continue
            adjustments[item.symbol] = adjustments.get(item.symbol, ZERO) + item.signed_amount
        return adjustments

    def _calculate_instrument(
        self,
        symbol: str,
        trades: list[Trade],
        *,
        current_price: Decimal,
        previous_close: Decimal | None,
        as_of: date,
        cash_adjustment: Decimal,
        anomalies: list[str],
    ) -> InstrumentResult:
        is_option = any(trade.is_option for trade in trades)
        first = trades[0]

        real = calculate_real(trades, current_price, as_of=as_of, cash_adjustment=cash_adjustment)
        avg_cost = calculate_average_cost(trades, current_price)
        fifo = calculate_fifo(trades, current_price)
        lifo = calculate_lifo(trades, current_price)

        parent_instrument = None
        expired = False
        if is_option:
            parent_instrument = extract_parent_instrument(
                first.description or first.instrument or symbol
            )
            if parent_instrument is None:
                anomalies.append(f"option {symbol!r}: parent instrument unresolved")
            expired = is_option_expired(symbol, as_of)

        if expired:
            logger.debug("Expired option", symbol=symbol, realized_pnl=str(real.realized_pnl))
            real = real.expired()
            avg_cost = avg_cost.expired()
            fifo = fifo.expired()
            lifo = lifo.expired()

        daily_pnl = ZERO
        made_up_ground = ZERO
        if previous_close is not None and avg_cost.position > 0:
            daily_pnl = round_currency((current_price - previous_close) * avg_cost.position)
        if previous_close is not None and current_price < previous_close:
            day_profit = daily_pnl + real.todays_realized_profit
            if day_profit > 0:
                made_up_ground = day_profit

        return InstrumentResult(
            symbol=symbol,
            instrument=first.instrument or symbol,
            is_option=is_option,
            current_price=current_price,
            real=real,
            avg_cost=avg_cost,
            fifo=fifo,
            lifo=lifo,
            parent_instrument=parent_instrument,
            expired=expired,
            previous_close=previous_close if previous_close is not None else ZERO,
            daily_pnl=daily_pnl,
            made_up_ground=made_up_ground,
        )


def compute_pnl(
    trades: Iterable[TradeInput],
    prices: Mapping[str, Any],
    as_of: date | None = None,
    dividends_and_interest: Iterable[DivItemInput] | None = None,
    previous_close: Mapping[str, Any] | None = None,
) -> list[InstrumentRecord]:
    """
    Compute per-instrument P&L for a full trade history.

    Convenience wrapper around `PnLCalculator().calculate(...)` returning only the
    stock/ETF-level records (options are folded into their underlying's rollup).
    """
    return (
        PnLCalculator()
        .calculate(
            trades,
            prices,
            as_of=as_of,
            dividends_and_interest=dividends_and_interest,
            previous_close=previous_close,
        )
        .instruments
    )
