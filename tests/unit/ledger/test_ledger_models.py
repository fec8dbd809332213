"""Unit tests for ledger models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from brokerage_pnl.ledger.models import DividendOrInterest, Trade


class TestTrade:
    """Test Trade model."""

    def test_amount_and_instrument_default_from_other_fields(self):
        trade = Trade(symbol="AAPL", date=date(2024, 1, 2), quantity="10", price="1.5", is_buy=True)

        assert trade.amount == Decimal("15.0")
        assert trade.instrument == "AAPL"
        assert trade.is_option is False

    def test_accepts_camel_case_aliases(self):
        trade = Trade.model_validate(
            {
                "symbol": "AAPL 01/15/2024 Call $150.00",
                "transDate": "2024-01-02",
                "quantity": 1,
                "price": 250,
                "isBuy": True,
                "isOption": True,
                "transCode": "BTO",
            }
        )

        assert trade.date == date(2024, 1, 2)
        assert trade.is_option is True
        assert trade.trans_code == "BTO"

    def test_datetime_is_reduced_to_date(self):
        trade = Trade(
            symbol="AAPL", date=datetime(2024, 1, 2, 15, 30), quantity=1, price=1, is_buy=False
        )

        assert trade.date == date(2024, 1, 2)

    @pytest.mark.parametrize("amount", [-600, "-600.00", Decimal("-600")])
    def test_signed_amount_is_stored_as_magnitude(self, amount):
        trade = Trade(
            symbol="AAPL", date=date(2024, 1, 2), quantity=5, price=120, is_buy=False, amount=amount
        )

        assert trade.amount == Decimal("600")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Trade(symbol="AAPL", date=date(2024, 1, 2), quantity=-1, price=1, is_buy=True)

    def test_empty_symbol_rejected(self):
        with pytest.raises(ValidationError):
            Trade(symbol="", date=date(2024, 1, 2), quantity=1, price=1, is_buy=True)

    @pytest.mark.parametrize("amount", [0, "0.00", "", None])
    def test_zero_or_blank_amount_is_derived(self, amount):
        trade = Trade.model_validate(
            {
                "symbol": "AAPL",
                "transDate": "2024-01-02",
                "quantity": "4",
                "price": "2.5",
                "isBuy": True,
                "amount": amount,
            }
        )

        assert trade.amount == Decimal("10.0")

    def test_explicit_instrument_is_kept(self):
        trade = Trade(
            symbol="AAPL",
            date=date(2024, 1, 2),
            quantity=1,
            price=1,
            is_buy=True,
            instrument="Apple Inc.",
        )

        assert trade.instrument == "Apple Inc."

    @pytest.mark.parametrize("field", ["quantity", "price"])
    def test_non_numeric_quantity_or_price_is_a_validation_error(self, field):
        data = {"symbol": "AAPL", "date": "2024-01-02", "quantity": 1, "price": 1, "is_buy": True}
        data[field] = "oops"

        with pytest.raises(ValidationError) as exc_info:
            Trade.model_validate(data)

        assert exc_info.value.errors()[0]["loc"] == (field,)

    def test_missing_price_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            Trade.model_validate(
                {"symbol": "AAPL", "date": "2024-01-02", "quantity": 1, "is_buy": True}
            )

    def test_trade_is_frozen(self, make_trade):
        trade = make_trade()

        with pytest.raises(ValidationError):
            trade.price = Decimal("1")


class TestDividendOrInterest:
    def test_signed_amount(self):
        dividend = DividendOrInterest(
            symbol="AAPL", date=date(2024, 2, 1), amount="2.40", kind="dividend"
        )
        interest = DividendOrInterest(
            symbol="AAPL", date=date(2024, 2, 1), amount="0.12", kind="interest"
        )

        assert dividend.signed_amount == Decimal("2.40")
        assert interest.signed_amount == Decimal("-0.12")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            DividendOrInterest(symbol="AAPL", date=date(2024, 2, 1), amount=1, kind="fee")
