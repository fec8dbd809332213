from __future__ import annotations

from decimal import Decimal

import pytest
import typer

from brokerage_pnl.cli.utils import (
    format_signed_currency,
    load_prices_file,
    parse_price_override,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Decimal("1234.5"), "[green]+$1,234.50[/green]"),
        (Decimal("-12.3"), "[red]-$12.30[/red]"),
        (Decimal("0"), "$0.00"),
    ],
)
def test_format_signed_currency(value: Decimal, expected: str) -> None:
    assert format_signed_currency(value) == expected


def test_parse_price_override() -> None:
    assert parse_price_override("AAPL=190.50") == ("AAPL", Decimal("190.50"))


@pytest.mark.parametrize("spec", ["AAPL", "=1", "AAPL=abc", "AAPL=-1"])
def test_parse_price_override_rejects_bad_input(spec: str) -> None:
    with pytest.raises(ValueError):
        parse_price_override(spec)


def test_load_prices_file_requires_json_object(tmp_path) -> None:
    path = tmp_path / "prices.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(typer.Exit):
        load_prices_file(path)
