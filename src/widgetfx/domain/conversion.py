"""
Conversion Engine - Amount Text and Conversion Arithmetic

Pure functions turning (amount text, rate table, target currency) into a
display-ready ConversionSnapshot. Nothing here performs I/O or raises for a
missing rate: callers get None and decide whether to persist.

Files that USE this module:
- widgetfx.domain.keypad (sanitize_amount_text on every edit)
- widgetfx.application.converter_service (compute_conversion on refresh)
- widgetfx.application.keypad_service (recompute_with_rate on key press)
- tests.test_conversion (unit tests)

Files that this module USES:
- widgetfx.domain.models (RateTable, RatePoint, ConversionSnapshot)
- widgetfx.domain.errors (NoRateForTargetError)
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from widgetfx.domain.errors import NoRateForTargetError
from widgetfx.domain.models import ConversionSnapshot, RatePoint, RateTable, utcnow

log = logging.getLogger(__name__)

DECIMAL_SEPARATOR = "."
MAX_AMOUNT_LENGTH = 9


def sanitize_amount_text(raw: str) -> str:
    """
    Normalize amount text to digits and at most one decimal separator.

    A second separator is dropped rather than rejected, a leading separator
    gets a "0" prefix and empty input becomes "0". The function is
    idempotent: sanitize(sanitize(x)) == sanitize(x).
    """
    kept = []
    seen_separator = False
    for ch in raw or "":
        if ch in "0123456789":
            kept.append(ch)
        elif ch == DECIMAL_SEPARATOR and not seen_separator:
            kept.append(ch)
            seen_separator = True
    text = "".join(kept)
    if text.startswith(DECIMAL_SEPARATOR):
        text = "0" + text
    return text or "0"


def cap_amount_text(raw: str, max_length: int = MAX_AMOUNT_LENGTH) -> str:
    """Truncate raw amount text to the input length cap (applied before sanitizing)."""
    return (raw or "")[:max_length]


def parse_amount(text: str) -> float:
    """Parse amount text after sanitizing; anything unparsable counts as 0."""
    try:
        return float(sanitize_amount_text(text))
    except ValueError:
        return 0.0


def rate_for(table: RateTable, code: str) -> float:
    """
    Look up the rate for `code` in `table`.

    Raises:
        NoRateForTargetError: If the table has no entry for the code
    """
    rate = table.rate(code)
    if rate is None:
        raise NoRateForTargetError(table.base, code)
    return rate


def compute_conversion(
    amount_text: str,
    table: RateTable,
    target_currency: str,
    chart_series: Iterable[RatePoint] = (),
    timestamp: Optional[datetime] = None,
) -> Optional[ConversionSnapshot]:
    """
    Convert an amount using a rate table.

    Args:
        amount_text: Amount as typed (sanitized here)
        table: Rate table whose base is the amount's currency
        target_currency: Currency to convert into
        chart_series: Historical points carried along into the snapshot
        timestamp: Snapshot time (defaults to now; pass table.as_of when
            reusing a cached table)

    Returns:
        ConversionSnapshot, or None when the table has no rate for the target
    """
    try:
        rate = rate_for(table, target_currency)
    except NoRateForTargetError as e:
        log.debug("No conversion available: %s", e)
        return None

    text = sanitize_amount_text(amount_text)
    amount = parse_amount(text)
    return ConversionSnapshot(
        base_currency=table.base,
        target_currency=target_currency,
        rate=rate,
        amount=amount,
        amount_text=text,
        converted_amount=amount * rate,
        timestamp=timestamp or utcnow(),
        chart_series=tuple(sorted(chart_series, key=lambda p: p.date)),
    )


def recompute_with_rate(
    snapshot: ConversionSnapshot,
    amount_text: str,
    timestamp: Optional[datetime] = None,
) -> ConversionSnapshot:
    """Recompute a snapshot for new amount text, reusing its cached rate and series."""
    text = sanitize_amount_text(amount_text)
    amount = parse_amount(text)
    return ConversionSnapshot(
        base_currency=snapshot.base_currency,
        target_currency=snapshot.target_currency,
        rate=snapshot.rate,
        amount=amount,
        amount_text=text,
        converted_amount=amount * snapshot.rate,
        timestamp=timestamp or utcnow(),
        chart_series=snapshot.chart_series,
    )
