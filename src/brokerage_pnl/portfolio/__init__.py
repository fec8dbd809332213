"""Cost-basis accounting engine: per-method P&L, options rollup and expiration."""

from brokerage_pnl.portfolio._pnl_models import (
    AccountingMethod,
    InstrumentRecord,
    InstrumentResult,
    InstrumentRollup,
    PnLReport,
    PositionResult,
    RealPositionResult,
    TradeEvent,
    base_instrument,
    options_pnl,
)
from brokerage_pnl.portfolio._snapshots import (
    SnapshotComparison,
    SnapshotRow,
    compare_with_snapshot,
)
from brokerage_pnl.portfolio.pnl import PnLCalculator, compute_pnl

__all__ = [
    "AccountingMethod",
    "InstrumentRecord",
    "InstrumentResult",
    "InstrumentRollup",
    "PnLCalculator",
    "PnLReport",
    "PositionResult",
    "RealPositionResult",
    "SnapshotComparison",
    "SnapshotRow",
    "TradeEvent",
    "base_instrument",
    "compare_with_snapshot",
    "compute_pnl",
    "options_pnl",
]
