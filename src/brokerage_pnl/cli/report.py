"""P&L report command - per-instrument profit and loss from a trade history CSV."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path  # noqa: TC003 - Required at runtime for Typer introspection
from typing import TYPE_CHECKING, Annotated

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from brokerage_pnl.cli.utils import (
    console,
    format_percentage,
    format_signed_currency,
    load_prices_file,
    parse_price_override,
)

if TYPE_CHECKING:
    from brokerage_pnl.portfolio import AccountingMethod, InstrumentResult, PnLReport


def _add_instrument_row(
    table: Table,
    result: InstrumentResult,
    method: AccountingMethod,
    *,
    label: str,
    options_total: Decimal | None = None,
) -> None:
    figures = result.for_method(method)
    table.add_row(
        label,
        f"{figures.position:,f}",
        f"${figures.avg_cost_basis:,.2f}",
        f"${result.current_price:,.2f}",
        format_signed_currency(figures.realized_pnl),
        format_signed_currency(figures.unrealized_pnl),
        format_signed_currency(figures.total_pnl),
        format_percentage(figures.percentage_return),
        format_signed_currency(options_total) if options_total is not None else "",
    )


def _build_report_table(report: PnLReport, method: AccountingMethod) -> Table:
    from brokerage_pnl.portfolio import InstrumentRollup, base_instrument

    table = Table(title=f"P&L by Instrument ({method.value}, as of {report.as_of.isoformat()})")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Position", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Realized", justify="right")
    table.add_column("Unrealized", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Return", justify="right")
    table.add_column("Options", justify="right")

    total_realized = Decimal(0)
    total_unrealized = Decimal(0)
    total_options = Decimal(0)

    for record in report.instruments:
        instrument = base_instrument(record)
        figures = instrument.for_method(method)
        total_realized += figures.realized_pnl
        total_unrealized += figures.unrealized_pnl

        if isinstance(record, InstrumentRollup):
            options_total = record.options_pnl_for(method)
            total_options += options_total
            _add_instrument_row(
                table,
                instrument,
                method,
                label=escape(instrument.symbol),
                options_total=options_total,
            )
            for option in record.options:
                suffix = " (expired)" if option.expired else ""
                _add_instrument_row(
                    table, option, method, label=f"[dim]  {escape(option.symbol)}{suffix}[/dim]"
                )
        else:
            _add_instrument_row(table, instrument, method, label=escape(instrument.symbol))

    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        "",
        "",
        "",
        format_signed_currency(total_realized),
        format_signed_currency(total_unrealized),
        format_signed_currency(total_realized + total_unrealized),
        "",
        format_signed_currency(total_options),
    )
    return table


def pnl_report(
    trades_csv: Annotated[
        Path,
        typer.Argument(help="Brokerage activity CSV (Robinhood export format)."),
    ],
    prices_file: Annotated[
        Path | None,
        typer.Option("--prices", "-p", help='JSON file of current prices: {"AAPL": 190.5}.'),
    ] = None,
    price: Annotated[
        list[str] | None,
        typer.Option("--price", help="Current price override SYMBOL=PRICE (repeatable)."),
    ] = None,
    split: Annotated[
        list[str] | None,
        typer.Option("--split", help="Split ratio SYMBOL=RATIO, e.g. AAPL=4 (repeatable)."),
    ] = None,
    as_of: Annotated[
        str | None,
        typer.Option("--as-of", help="Reference date YYYY-MM-DD. Defaults to today."),
    ] = None,
    method: Annotated[
        str | None,
        typer.Option(
            "--method",
            "-m",
            help="Accounting method to display (real/avg-cost/fifo/lifo). "
            "Defaults to BROKERAGE_PNL_METHOD or real.",
            show_default=False,
        ),
    ] = None,
    output_json: Annotated[
        bool, typer.Option("--json", help="Output all methods as JSON.")
    ] = False,
) -> None:
    """Compute P&L for every instrument in a trade history."""
    from brokerage_pnl.config import ReportConfig
    from brokerage_pnl.exceptions import LedgerError
    from brokerage_pnl.ledger import apply_splits, load_trades_csv, parse_split_spec
    from brokerage_pnl.portfolio import PnLCalculator

    try:
        config = ReportConfig.resolve(method)
    except ValidationError:
        console.print(
            f"[red]Error:[/red] Invalid method '{method}'. "
            "Expected one of: real, avg-cost, fifo, lifo."
        )
        raise typer.Exit(1) from None

    report_date: date | None = None
    if as_of is not None:
        try:
            report_date = date.fromisoformat(as_of)
        except ValueError:
            console.print(f"[red]Error:[/red] Invalid --as-of '{as_of}'. Expected YYYY-MM-DD.")
            raise typer.Exit(1) from None

    if not trades_csv.exists():
        console.print(f"[red]Error:[/red] Trades file not found: {trades_csv}")
        raise typer.Exit(1)

    prices: dict[str, object] = load_prices_file(prices_file) if prices_file else {}
    try:
        for spec in price or []:
            symbol, value = parse_price_override(spec)
            prices[symbol] = value
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    try:
        ledger = load_trades_csv(trades_csv)
        split_ratios = dict(parse_split_spec(spec) for spec in split or [])
    except LedgerError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    trades = apply_splits(ledger.trades, split_ratios) if split_ratios else ledger.trades
    report = PnLCalculator().calculate(
        trades,
        prices,
        as_of=report_date,
        dividends_and_interest=ledger.dividends_and_interest,
    )
    report.anomalies[:0] = ledger.anomalies

    if output_json:
        payload = report.to_dict()
        payload["method"] = config.method.value
        payload["skipped_rows"] = ledger.skipped_rows
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    if not report.instruments and not report.orphan_options:
        console.print("[yellow]No instruments to report.[/yellow]")
        return

    console.print(_build_report_table(report, config.method))

    if report.orphan_options:
        orphans = Table(title="Options Without a Traded Underlying")
        orphans.add_column("Option", style="cyan")
        orphans.add_column("Total", justify="right")
        for option in report.orphan_options:
            orphans.add_row(
                escape(option.symbol),
                format_signed_currency(option.for_method(config.method).total_pnl),
            )
        console.print(orphans)

    if ledger.skipped_rows:
        console.print(f"[dim]Skipped {ledger.skipped_rows} malformed CSV row(s).[/dim]")
    for anomaly in report.anomalies:
        console.print(f"[yellow]Warning:[/yellow] {escape(anomaly)}")
