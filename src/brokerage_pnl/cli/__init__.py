"""
CLI application for Brokerage P&L.

Provides the `report` command for per-instrument P&L from a trade history.
"""

from __future__ import annotations

import typer
from dotenv import find_dotenv, load_dotenv

from brokerage_pnl.cli.report import pnl_report
from brokerage_pnl.cli.utils import console

app = typer.Typer(
    name="brokerage-pnl",
    help="Brokerage P&L CLI - cost-basis accounting for a trade history.",
    add_completion=False,
)

app.command("report")(pnl_report)


@app.callback()
def main() -> None:
    """Brokerage P&L CLI."""
    from brokerage_pnl.logging import configure_structlog

    load_dotenv(find_dotenv(usecwd=True))
    # Re-read BROKERAGE_PNL_LOG_LEVEL now that .env may have set it.
    configure_structlog()


@app.command()
def version() -> None:
    """Show version information."""
    from brokerage_pnl import __version__

    console.print(f"brokerage-pnl v{__version__}")
