"""Ledger records and the collaborators that produce them (CSV normalizer, splits)."""

from brokerage_pnl.ledger.models import DividendOrInterest, Trade
from brokerage_pnl.ledger.normalizer import NormalizedLedger, load_trades_csv, parse_trades_csv
from brokerage_pnl.ledger.splits import apply_splits, parse_split_spec

__all__ = [
    "DividendOrInterest",
    "NormalizedLedger",
    "Trade",
    "apply_splits",
    "load_trades_csv",
    "parse_split_spec",
    "parse_trades_csv",
]
