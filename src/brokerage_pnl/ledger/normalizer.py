"""Robinhood activity CSV normalization.

Turns a broker activity export into typed `Trade` and `DividendOrInterest` records.

Column handling (Robinhood export headers, with common fallbacks):
- `Activity Date` / `Date` / `Trade Date`: activity date (`MM/DD/YYYY` or ISO)
- `Instrument` / `Symbol`: ticker for stocks and ETFs
- `Description`: free text; options are detected by "put"/"call" in it
- `Trans Code` / `Type`: Buy, Sell, BTO, BTC, STO, STC, CDIV, MDIV, INT, MINT, ...
- `Quantity` / `Qty`, `Price` / `Trade Price`, `Amount`: currency-formatted numbers

Option rows are collapsed to a single unit priced at the row's total amount, so that
`quantity * price == amount` holds for contract-multiplied premiums.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from brokerage_pnl.constants import (
    BUY_TRANS_CODES,
    DIVIDEND_TRANS_CODES,
    INTEREST_TRANS_CODES,
)
from brokerage_pnl.exceptions import LedgerParseError
from brokerage_pnl.ledger.models import DividendOrInterest, Trade

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

logger = structlog.get_logger()

_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y")


@dataclass
class NormalizedLedger:
    """Trades and cash events extracted from one activity export."""

    trades: list[Trade]
    dividends_and_interest: list[DividendOrInterest]
    skipped_rows: int = 0
    anomalies: list[str] = field(default_factory=list)


def parse_currency(value: object) -> Decimal:
    """
    Parse a broker-formatted number into a Decimal.

    Strips `$` and thousands separators; `(12.50)` is read as -12.50. Empty values
    parse as zero.

    Raises:
        ValueError: If the cleaned value is not numeric.
    """
    if value is None:
        return Decimal(0)
    cleaned = str(value).strip().replace("$", "").replace(",", "")
    if not cleaned:
        return Decimal(0)
    negative = cleaned.startswith("(") and cleaned.endswith(")")
    cleaned = cleaned.strip("()")
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return -number if negative else number


def parse_activity_date(value: str) -> date:
    """Parse an activity date in any of the broker's observed formats."""
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value!r}")


def _first(row: Mapping[str, str | None], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value:
            return value
    return ""


def is_option_description(description: str) -> bool:
    """Options are identified by a put/call marker in the description."""
    lowered = description.lower()
    return "put" in lowered or "call" in lowered


def is_buy_code(trans_code: str) -> bool:
    """Buy-side transaction codes (`Buy`, `BTO`, `BTC`)."""
    return "BUY" in trans_code or trans_code in BUY_TRANS_CODES


def _cash_event_from_row(row: Mapping[str, str | None], trans_code: str) -> DividendOrInterest:
    return DividendOrInterest(
        symbol=_first(row, "Instrument", "Symbol").strip(),
        date=parse_activity_date(_first(row, "Activity Date", "Date", "Trade Date")),
        amount=abs(parse_currency(row.get("Amount"))),
        kind="dividend" if trans_code in DIVIDEND_TRANS_CODES else "interest",
        description=row.get("Description") or "",
    )


def _trade_from_row(row: Mapping[str, str | None], trans_code: str) -> Trade | None:
    instrument = _first(row, "Instrument", "Symbol").strip()
    description = (row.get("Description") or "").strip()
    is_option = is_option_description(description)
    symbol = description if is_option else instrument

    quantity = abs(parse_currency(_first(row, "Quantity", "Qty")))
    price = abs(parse_currency(_first(row, "Price", "Trade Price")))
    amount = abs(parse_currency(row.get("Amount")))
    if is_option:
        quantity = Decimal(1)
        price = amount

    if not symbol or quantity <= 0 or price <= 0:
        # Transfers, fees, and other non-trade rows.
        return None

    return Trade(
        symbol=symbol,
        date=parse_activity_date(_first(row, "Activity Date", "Date", "Trade Date")),
        quantity=quantity,
        price=price,
        amount=amount or quantity * price,
        is_buy=is_buy_code(trans_code),
        is_option=is_option,
        description=description,
        instrument=description if is_option else instrument,
        trans_code=trans_code,
    )


def normalize_rows(
    rows: list[Mapping[str, str | None]], *, source: str | None = None
) -> NormalizedLedger:
    """
    Normalize parsed CSV rows into trades and dividend/interest records.

    Malformed rows (bad date, non-numeric field) are logged and skipped; rows that are
    not trades at all are dropped silently.

    Raises:
        LedgerParseError: If no valid trades remain.
    """
    trades: list[Trade] = []
    cash_events: list[DividendOrInterest] = []
    anomalies: list[str] = []
    skipped = 0

    for index, row in enumerate(rows):
        trans_code = _first(row, "Trans Code", "Type").strip().upper()
        try:
            if trans_code in DIVIDEND_TRANS_CODES or trans_code in INTEREST_TRANS_CODES:
                cash_events.append(_cash_event_from_row(row, trans_code))
                continue
            trade = _trade_from_row(row, trans_code)
        except (ValueError, ValidationError) as e:
            skipped += 1
            message = f"row {index + 1}: {e}"
            anomalies.append(message)
            logger.warning("Skipping malformed ledger row", row=index + 1, error=str(e))
            continue
        if trade is not None:
            trades.append(trade)

    if not trades:
        raise LedgerParseError(
            "No valid trades found in CSV. Please check the file format.", source=source
        )

    trades.sort(key=lambda t: t.date)
    cash_events.sort(key=lambda d: d.date)

    logger.info(
        "Ledger parsed",
        stock_trades=sum(1 for t in trades if not t.is_option),
        option_trades=sum(1 for t in trades if t.is_option),
        dividends_and_interest=len(cash_events),
        skipped=skipped,
    )
    return NormalizedLedger(
        trades=trades,
        dividends_and_interest=cash_events,
        skipped_rows=skipped,
        anomalies=anomalies,
    )


def parse_trades_csv(text: str, *, source: str | None = None) -> NormalizedLedger:
    """Parse Robinhood activity CSV text (header row required)."""
    reader = csv.DictReader(io.StringIO(text))
    rows = [
        row
        for row in reader
        if any(isinstance(value, str) and value.strip() for value in row.values())
    ]
    return normalize_rows(rows, source=source)


def load_trades_csv(path: Path) -> NormalizedLedger:
    """Read and normalize an activity export from disk."""
    return parse_trades_csv(path.read_text(encoding="utf-8-sig"), source=str(path))
