"""Custom exceptions for ledger ingestion and P&L calculation."""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for brokerage ledger errors."""


class LedgerParseError(LedgerError):
    """A ledger file could not be turned into any usable trades."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        self.message = message
        prefix = f"{source}: " if source else ""
        super().__init__(f"{prefix}{message}")


class SplitRatioError(LedgerError):
    """A split ratio specification could not be parsed."""

    def __init__(self, spec: str) -> None:
        self.spec = spec
        super().__init__(f"Invalid split ratio {spec!r} (expected SYMBOL=RATIO with RATIO > 0)")
