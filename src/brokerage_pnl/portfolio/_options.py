"""Option contract handling: underlying resolution, expiration, and rollup.

Option symbols are broker descriptions such as `"AAPL 01/15/2024 Call $150.00"`:
- The underlying ticker is the leading run of uppercase letters.
- The expiration is the first `MM/DD/YYYY` date in the text.

Expiration is always judged against an explicit as-of date so historical snapshots
replay deterministically.
"""

from __future__ import annotations

import re
from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING

import structlog

from brokerage_pnl.portfolio._pnl_models import InstrumentRollup

if TYPE_CHECKING:
    from brokerage_pnl.portfolio._pnl_models import InstrumentRecord, InstrumentResult

logger = structlog.get_logger()

_PARENT_RE = re.compile(r"^([A-Z]+)")
_EXPIRATION_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


def extract_parent_instrument(description: str | None) -> str | None:
    """
    Resolve an option's underlying ticker from its description.

    Returns:
        The leading uppercase ticker (e.g. "AAPL"), or None when the description does
        not start with one. None is logged; callers keep the option as an orphan.
    """
    if not description:
        logger.warning("Option has no description; parent unresolved")
        return None
    match = _PARENT_RE.match(description)
    if match is None:
        logger.warning("No parent instrument found for option", description=description)
        return None
    return match.group(1)


def parse_expiration(symbol: str | None) -> date | None:
    """Parse the first `MM/DD/YYYY` date embedded in an option symbol."""
    if not symbol:
        return None
    match = _EXPIRATION_RE.search(symbol)
    if match is None:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        logger.warning("Option symbol has an impossible expiration date", symbol=symbol)
        return None


def is_option_expired(symbol: str | None, as_of: date) -> bool:
    """An option is expired when its expiration date is strictly before `as_of`."""
    expiration = parse_expiration(symbol)
    return expiration is not None and expiration < as_of


def rollup_options(
    results: list[InstrumentResult],
) -> tuple[list[InstrumentRecord], list[InstrumentResult]]:
    """
    Attach option results to their underlying instruments.

    Args:
        results: Per-instrument results for stocks and options alike (expiration
            already applied).

    Returns:
        (records, orphans):
        - records: non-option instruments sorted by symbol; those with options are
          InstrumentRollup, the rest stay InstrumentResult. Options never appear here.
        - orphans: options whose parent is unresolved or has no trades of its own.
    """
    options_by_parent: dict[str, list[InstrumentResult]] = defaultdict(list)
    orphans: list[InstrumentResult] = []
    underlyings: dict[str, InstrumentResult] = {}

    for result in results:
        if not result.is_option:
            underlyings[result.symbol] = result
        elif result.parent_instrument is None:
            orphans.append(result)
        else:
            options_by_parent[result.parent_instrument].append(result)

    for parent, options in options_by_parent.items():
        if parent not in underlyings:
            logger.info(
                "Options have no traded underlying; not rolled up",
                parent=parent,
                options_count=len(options),
            )
            orphans.extend(options)

    records: list[InstrumentRecord] = []
    for symbol in sorted(underlyings):
        underlying = underlyings[symbol]
        options = options_by_parent.get(symbol)
        if options:
            rollup = InstrumentRollup(
                instrument=underlying,
                options=tuple(sorted(options, key=lambda o: o.symbol)),
            )
            records.append(rollup)
            logger.debug(
                "Rolled up options",
                symbol=symbol,
                options_count=rollup.options_count,
                options_pnl=str(rollup.options_pnl),
            )
        else:
            records.append(underlying)

    orphans.sort(key=lambda o: o.symbol)
    return records, orphans
