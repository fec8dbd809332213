"""
Brokerage P&L.

Cost-basis accounting for a brokerage trade history: realized, unrealized and total
P&L under the real, average-cost, FIFO and LIFO conventions.
"""

__version__ = "0.1.0"

from brokerage_pnl.ledger import DividendOrInterest, Trade, apply_splits, load_trades_csv

# Configure structlog once at import time (quiet by default).
from brokerage_pnl.logging import configure_structlog
from brokerage_pnl.portfolio import AccountingMethod, PnLCalculator, PnLReport, compute_pnl

configure_structlog()

__all__ = [
    "AccountingMethod",
    "DividendOrInterest",
    "PnLCalculator",
    "PnLReport",
    "Trade",
    "__version__",
    "apply_splits",
    "compute_pnl",
    "load_trades_csv",
]
