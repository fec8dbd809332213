"""Shared utilities for CLI commands (console output, money formatting, price inputs)."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from brokerage_pnl.portfolio._rounding import to_decimal

if TYPE_CHECKING:
    from pathlib import Path

console = Console()


def format_signed_currency(value: Decimal) -> str:
    """Format a dollar amount as a signed currency string with color.

    Args:
        value: Amount in dollars (can be positive, negative, or zero).

    Returns:
        Formatted string with color markup.
    """
    text = f"${abs(value):,.2f}"
    if value > 0:
        return f"[green]+{text}[/green]"
    if value < 0:
        return f"[red]-{text}[/red]"
    return text


def format_percentage(value: Decimal) -> str:
    if value > 0:
        return f"[green]+{value:.2f}%[/green]"
    if value < 0:
        return f"[red]{value:.2f}%[/red]"
    return f"{value:.2f}%"


def parse_price_override(spec: str) -> tuple[str, Decimal]:
    """Parse a `SYMBOL=PRICE` override.

    Raises:
        ValueError: If the text is not `SYMBOL=PRICE` with a non-negative number.
    """
    symbol, sep, raw_price = spec.partition("=")
    symbol = symbol.strip()
    if not sep or not symbol:
        raise ValueError(f"Invalid price {spec!r} (expected SYMBOL=PRICE)")
    price = to_decimal(raw_price)
    if price < 0:
        raise ValueError(f"Invalid price {spec!r} (price must be >= 0)")
    return symbol, price


def load_prices_file(path: Path) -> dict[str, object]:
    """Load a `{"SYMBOL": price, ...}` JSON file.

    Exits with an error message if the file is missing, is not valid JSON, or is not
    a JSON object.
    """
    if not path.exists():
        console.print(f"[red]Error:[/red] Prices file not found: {path}")
        raise typer.Exit(1)

    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError:
        console.print(f"[red]Error:[/red] Prices file is not valid JSON: {path}")
        raise typer.Exit(1) from None

    if not isinstance(raw, dict):
        console.print(
            f"[red]Error:[/red] Prices file must contain a JSON object of symbol to price: {path}"
        )
        raise typer.Exit(1)

    return raw
