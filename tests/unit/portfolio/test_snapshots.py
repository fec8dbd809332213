"""Unit tests for snapshot comparison (made up ground)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from brokerage_pnl.portfolio import SnapshotRow, compare_with_snapshot, compute_pnl


def test_made_up_ground_against_prior_snapshot(make_trade):
    trades = [
        make_trade(quantity=10, price=100),
        make_trade(day=date(2024, 1, 10), quantity=5, price=120, is_buy=False),
    ]
    records = compute_pnl(trades, {"AAPL": 110}, as_of=date(2024, 1, 12))
    snapshot = [
        SnapshotRow(
            symbol="AAPL",
            realized_pnl=Decimal("-1000"),
            position=Decimal("10"),
            current_price=Decimal("100"),
        )
    ]

    (comparison,) = compare_with_snapshot(records, snapshot)

    # (-400 - -1000) - 10 * (110 - 100)
    assert comparison.available is True
    assert comparison.made_up_ground == Decimal("500.00")
    assert comparison.prior_position == Decimal("10")


def test_symbols_missing_from_snapshot_are_unavailable(make_trade):
    records = compute_pnl([make_trade("MSFT")], {"MSFT": 400}, as_of=date(2024, 1, 12))

    (comparison,) = compare_with_snapshot(records, [])

    assert comparison.available is False
    assert comparison.made_up_ground is None
    assert comparison.to_dict()["symbol"] == "MSFT"


def test_snapshot_row_accepts_stored_field_names():
    row = SnapshotRow.model_validate(
        {"symbol": "AAPL", "realized_pnl": "12.5", "snapshot_date": "2024-01-05"}
    )

    assert row.date == date(2024, 1, 5)
    assert row.realized_pnl == Decimal("12.5")
    assert row.position == Decimal("0")
