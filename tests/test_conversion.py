"""
Conversion Tests - Amount Sanitizing, Conversion and Keypad Edits

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- widgetfx.domain.conversion (sanitize_amount_text, compute_conversion, recompute_with_rate)
- widgetfx.domain.keypad (KeypadButton, apply_keypad_edit)
"""
from datetime import datetime, timezone

import pytest

from widgetfx.domain.conversion import (
    cap_amount_text,
    compute_conversion,
    parse_amount,
    rate_for,
    recompute_with_rate,
    sanitize_amount_text,
)
from widgetfx.domain.errors import NoRateForTargetError
from widgetfx.domain.keypad import KeypadButton, apply_keypad_edit
from widgetfx.domain.models import RatePoint, RateTable

NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)
TABLE = RateTable("USD", NOW, {"EUR": 0.9, "GBP": 0.8})

SAMPLES = ["", "0", ".", ".5", "12", "1.2.3", "abc", "12a3", "..9", "007", "5.", "1,5", "9" * 12]


class TestSanitizeAmountText:
    @pytest.mark.parametrize("raw,expected", [
        ("", "0"),
        (".5", "0.5"),
        ("1.2.3", "1.23"),
        ("abc", "0"),
        ("12a3", "123"),
        ("5.", "5."),
    ])
    def test_examples(self, raw, expected):
        assert sanitize_amount_text(raw) == expected

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_idempotent(self, raw):
        once = sanitize_amount_text(raw)
        assert sanitize_amount_text(once) == once

    @pytest.mark.parametrize("raw", SAMPLES)
    def test_shape(self, raw):
        text = sanitize_amount_text(raw)
        assert text
        assert not text.startswith(".")
        assert text.count(".") <= 1
        assert all(ch.isdigit() or ch == "." for ch in text)

    def test_none_is_zero(self):
        assert sanitize_amount_text(None) == "0"


class TestConversion:
    def test_cap_amount_text(self):
        assert cap_amount_text("1234567890123", 9) == "123456789"
        assert cap_amount_text(None) == ""

    def test_parse_amount(self):
        assert parse_amount("12.5") == 12.5
        assert parse_amount("") == 0.0
        assert parse_amount("5.") == 5.0

    def test_rate_for_missing(self):
        with pytest.raises(NoRateForTargetError) as exc_info:
            rate_for(TABLE, "JPY")
        assert exc_info.value.base == "USD"
        assert exc_info.value.target == "JPY"

    def test_compute_conversion(self):
        series = [
            RatePoint(datetime(2025, 11, 9, tzinfo=timezone.utc), 0.91),
            RatePoint(datetime(2025, 11, 8, tzinfo=timezone.utc), 0.92),
        ]

        snapshot = compute_conversion("1.2.3", TABLE, "EUR", chart_series=series, timestamp=NOW)

        assert snapshot.amount_text == "1.23"
        assert snapshot.amount == 1.23
        assert snapshot.converted_amount == pytest.approx(1.23 * 0.9)
        assert snapshot.base_currency == "USD"
        assert snapshot.timestamp == NOW
        assert [p.value for p in snapshot.chart_series] == [0.92, 0.91]

    def test_compute_conversion_missing_target(self):
        assert compute_conversion("100", TABLE, "JPY") is None

    def test_recompute_keeps_rate_and_series(self):
        snapshot = compute_conversion("100", TABLE, "GBP", timestamp=NOW)

        updated = recompute_with_rate(snapshot, "5", timestamp=NOW)

        assert updated.rate == 0.8
        assert updated.converted_amount == pytest.approx(4.0)
        assert updated.chart_series == snapshot.chart_series
        assert updated.target_currency == "GBP"


class TestKeypad:
    def test_press_sequence(self):
        presses = [
            (KeypadButton.DIGIT5, "5"),
            (KeypadButton.DECIMAL, "5."),
            (KeypadButton.DECIMAL, "5."),
            (KeypadButton.DIGIT7, "5.7"),
            (KeypadButton.BACKSPACE, "5."),
            (KeypadButton.BACKSPACE, "5"),
            (KeypadButton.BACKSPACE, "0"),
            (KeypadButton.BACKSPACE, "0"),
        ]
        text = "0"
        for button, expected in presses:
            text = apply_keypad_edit(text, button)
            assert text == expected, button

    def test_zero_is_replaced(self):
        assert apply_keypad_edit("0", KeypadButton.DIGIT0) == "0"
        assert apply_keypad_edit("0", KeypadButton.DIGIT3) == "3"

    def test_length_cap(self):
        assert apply_keypad_edit("123456789", KeypadButton.DIGIT1) == "123456789"
        assert apply_keypad_edit("123456789", KeypadButton.DECIMAL) == "123456789"
        assert apply_keypad_edit("12", KeypadButton.DIGIT3, max_length=3) == "123"

    def test_decimal_on_zero(self):
        assert apply_keypad_edit("0", KeypadButton.DECIMAL) == "0."

    def test_parse(self):
        assert KeypadButton.parse("digit5") is KeypadButton.DIGIT5
        assert KeypadButton.parse("5") is KeypadButton.DIGIT5
        assert KeypadButton.parse(".") is KeypadButton.DECIMAL
        assert KeypadButton.parse("backspace") is KeypadButton.BACKSPACE
        with pytest.raises(ValueError):
            KeypadButton.parse("enter")

    def test_button_properties(self):
        assert KeypadButton.DIGIT0.is_digit
        assert not KeypadButton.BACKSPACE.is_digit
        assert KeypadButton.BACKSPACE.symbol == "⌫"
