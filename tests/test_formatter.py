"""
Formatter Tests - Session and Widget Text Output

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- widgetfx.adapters.formatting.formatter (text helpers)
- widgetfx.application.timeline (TimelineEntry, DisplayState)
"""
from datetime import datetime, timedelta, timezone

from widgetfx.adapters.formatting.formatter import (
    _fmt_elapsed,
    format_rate,
    format_result,
    format_updated,
    session_lines,
    sparkline,
    widget_lines,
)
from widgetfx.application.timeline import ConversionDisplay, DisplayState, TimelineEntry
from widgetfx.domain.models import RatePoint, default_presets, placeholder_snapshot

NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)


class TestFmtElapsed:
    """Tests for _fmt_elapsed function."""

    def test_fmt_elapsed_minutes_only(self):
        assert _fmt_elapsed(0) == "0min"
        assert _fmt_elapsed(59) == "0min"
        assert _fmt_elapsed(300) == "5min"
        assert _fmt_elapsed(3599) == "59min"

    def test_fmt_elapsed_hours_and_minutes(self):
        assert _fmt_elapsed(3600) == "1h:00min"
        assert _fmt_elapsed(3660) == "1h:01min"
        assert _fmt_elapsed(9720) == "2h:42min"

    def test_fmt_elapsed_negative_clamped(self):
        assert _fmt_elapsed(-100) == "0min"


class TestFormatHelpers:
    def test_format_result(self):
        assert format_result(None) == "--"
        assert format_result(1234.5) == "1,234.50"

    def test_format_rate(self):
        assert format_rate("USD", "EUR", 0.93) == "1 USD = 0.9300 EUR"
        assert format_rate("USD", "EUR", None) == "—"

    def test_format_updated(self):
        assert format_updated(None) == "Never updated"
        assert format_updated(NOW - timedelta(minutes=5), NOW) == "Updated 5min ago"

    def test_sparkline(self):
        assert sparkline([]) == ""
        flat = [RatePoint(NOW, 1.0), RatePoint(NOW, 1.0)]
        assert len(set(sparkline(flat))) == 1
        rising = [RatePoint(NOW, v) for v in (1.0, 2.0, 3.0)]
        line = sparkline(rising)
        assert line[0] == "▁" and line[-1] == "█"


class TestSessionLines:
    def test_with_rate(self):
        text = session_lines(
            "USD", "EUR", "100", 93.0, 0.93, NOW - timedelta(minutes=2),
            provider="exchangerate.host", now=NOW,
        )
        lines = text.splitlines()
        assert lines[0] == "100 USD = 93.00 EUR"
        assert lines[1] == "1 USD = 0.9300 EUR"
        assert "Updated 2min ago" in lines
        assert "Reported by exchangerate.host" in lines

    def test_unavailable_with_notice(self):
        text = session_lines("USD", "EUR", "100", None, None, None, notice="Could not refresh rates")
        assert "100 USD = -- EUR" in text
        assert "rate unavailable" in text
        assert "⚠️ Could not refresh rates" in text


class TestWidgetLines:
    def _entry(self, conversions, state):
        return TimelineEntry(
            date=NOW,
            snapshot=placeholder_snapshot(NOW),
            presets=default_presets(),
            conversions=conversions,
            state=state,
        )

    def test_with_conversion(self):
        entry = self._entry([ConversionDisplay("EUR", 0.93, 93.0)], DisplayState.LOADED)
        text = widget_lines(entry, NOW)
        assert "Amount      100 USD" in text
        assert "Conversion  93.00 EUR" in text
        assert "Presets     25  50  100" in text

    def test_placeholder(self):
        text = widget_lines(self._entry([], DisplayState.PLACEHOLDER), NOW)
        assert "no data yet" in text

    def test_rate_unavailable(self):
        text = widget_lines(self._entry([], DisplayState.EDITED), NOW)
        assert "Conversion  rate unavailable" in text
