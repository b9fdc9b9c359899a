"""
Text Formatter - Widget and Session Presentation

This module turns converter state and widget timeline entries into plain
text lines for the terminal. It is the only presentation the project has:
layout, theming and localization are out of scope.

Files that USE this module:
- widgetfx.cli (prints session and widget output)
- tests.test_formatter (unit tests)

Files that this module USES:
- widgetfx.application.timeline (TimelineEntry, DisplayState)
- widgetfx.domain.models (ConversionSnapshot, RatePoint)
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from widgetfx.application.timeline import DisplayState, TimelineEntry
from widgetfx.domain.models import RatePoint

RATE_UNAVAILABLE = "rate unavailable"


def format_result(value: Optional[float]) -> str:
    """Converted amount with two decimals, or '--' when unavailable."""
    if value is None:
        return "--"
    return f"{value:,.2f}"


def format_rate(base: str, target: str, rate: Optional[float]) -> str:
    """
    Format a rate line like '1 USD = 0.9300 EUR'.

    Returns:
        The rate line, or '—' when no rate is available
    """
    if rate is None:
        return "—"
    return f"1 {base} = {rate:.4f} {target}"


def _fmt_elapsed(seconds: int) -> str:
    """
    Format elapsed time as 'Xh:YYmin' or 'Ymin'.

    Args:
        seconds: Elapsed time in seconds (will be clamped to >= 0)

    Returns:
        Formatted string like '2h:42min' or '5min'
    """
    if seconds < 0:
        seconds = 0
    minutes = seconds // 60
    hours = minutes // 60
    mins_only = minutes % 60
    if hours > 0:
        return f"{hours}h:{mins_only:02d}min"
    return f"{mins_only}min"


def format_updated(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    if timestamp is None:
        return "Never updated"
    now = now or datetime.now(timezone.utc)
    elapsed = int((now - timestamp).total_seconds())
    return f"Updated {_fmt_elapsed(elapsed)} ago"


def sparkline(series: Sequence[RatePoint]) -> str:
    """Render a series as a one-line block sparkline (empty for no points)."""
    if not series:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    values = [p.value for p in series]
    low, high = min(values), max(values)
    if high == low:
        return blocks[len(blocks) // 2] * len(values)
    scale = (len(blocks) - 1) / (high - low)
    return "".join(blocks[int(round((v - low) * scale))] for v in values)


def session_lines(
    base: str,
    target: str,
    amount_text: str,
    converted: Optional[float],
    rate: Optional[float],
    updated: Optional[datetime],
    series: Sequence[RatePoint] = (),
    notice: Optional[str] = None,
    provider: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Format the foreground converter state."""
    lines: List[str] = [f"{amount_text} {base} = {format_result(converted)} {target}"]
    lines.append(format_rate(base, target, rate) if rate is not None else RATE_UNAVAILABLE)
    trend = sparkline(series)
    if trend:
        lines.append(f"{len(series)}d trend {trend}")
    lines.append(format_updated(updated, now))
    if provider:
        lines.append(f"Reported by {provider}")
    if notice:
        lines.append(f"⚠️ {notice}")
    return "\n".join(lines)


def widget_lines(entry: TimelineEntry, now: Optional[datetime] = None) -> str:
    """
    Format a widget timeline entry: amount card, conversion card, presets and timestamp.

    Without a conversion (no cached rates for the snapshot's base) the
    conversion card reads 'rate unavailable'.
    """
    snap = entry.snapshot
    lines = [f"Amount      {snap.amount_text} {snap.base_currency}"]
    if entry.conversions:
        conversion = entry.conversions[0]
        lines.append(f"Conversion  {format_result(conversion.converted)} {conversion.code}")
        lines.append(f"            rate {conversion.rate:.4f} • {snap.target_currency}")
    elif entry.state is DisplayState.PLACEHOLDER:
        lines.append("Conversion  no data yet")
    else:
        lines.append(f"Conversion  {RATE_UNAVAILABLE}")
    if entry.presets:
        lines.append("Presets     " + "  ".join(p.title for p in entry.presets))
    lines.append(format_updated(snap.timestamp, now))
    return "\n".join(lines)
