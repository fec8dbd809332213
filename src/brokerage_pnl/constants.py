"""Centralized policy constants for the accounting engine.

Literals that encode accounting policy live here so the lot matchers, the
aggregator and the tests agree on them.
"""

from __future__ import annotations

from decimal import Decimal

# =============================================================================
# Numeric precision
# =============================================================================

# Currency outputs are quantized to cents.
CURRENCY_QUANTUM: Decimal = Decimal("0.01")

# Remaining FIFO/LIFO positions at or below this are treated as exactly zero.
#
# Used by:
# - portfolio/_lots.py: calculate_fifo(), calculate_lifo()
POSITION_EPSILON: Decimal = Decimal("0.0001")

# Maximum difference between the open-lot quantity and the tape position before
# the real method falls back to the all-buys average for its cost basis display.
#
# Used by:
# - portfolio/_real.py: calculate_real()
LOT_POSITION_MISMATCH_TOLERANCE: Decimal = Decimal("0.01")

# Tolerance for `total == realized + unrealized`. Outputs are built so the identity
# holds exactly; tests assert against this bound.
PNL_IDENTITY_TOLERANCE: Decimal = Decimal("0.01")

# =============================================================================
# Real-method reporting
# =============================================================================

# Number of most recent buy/sell events kept on the real method's result.
MAX_RECENT_EVENTS: int = 10

# =============================================================================
# Ledger ingestion
# =============================================================================

# Robinhood transaction codes that are cash events rather than trades.
DIVIDEND_TRANS_CODES: frozenset[str] = frozenset({"CDIV", "MDIV"})
INTEREST_TRANS_CODES: frozenset[str] = frozenset({"INT", "MINT"})

# Transaction codes that open or close a position on the buy side.
BUY_TRANS_CODES: frozenset[str] = frozenset({"BTO", "BTC"})
