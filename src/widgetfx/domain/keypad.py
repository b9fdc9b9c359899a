"""
Keypad Reducer - Discrete Amount Edits

Applies a single widget keypad press (digit, decimal point, backspace) to
amount text. Used by the out-of-band mutation path, which has no text field
and only ever receives one of the twelve buttons below.
"""
from __future__ import annotations

from enum import Enum

from widgetfx.domain.conversion import DECIMAL_SEPARATOR, MAX_AMOUNT_LENGTH, sanitize_amount_text


class KeypadButton(str, Enum):
    DIGIT0 = "digit0"
    DIGIT1 = "digit1"
    DIGIT2 = "digit2"
    DIGIT3 = "digit3"
    DIGIT4 = "digit4"
    DIGIT5 = "digit5"
    DIGIT6 = "digit6"
    DIGIT7 = "digit7"
    DIGIT8 = "digit8"
    DIGIT9 = "digit9"
    DECIMAL = "decimal"
    BACKSPACE = "backspace"

    @property
    def symbol(self) -> str:
        if self is KeypadButton.DECIMAL:
            return DECIMAL_SEPARATOR
        if self is KeypadButton.BACKSPACE:
            return "⌫"
        return self.value[-1]

    @property
    def is_digit(self) -> bool:
        return self.value.startswith("digit")

    @classmethod
    def parse(cls, raw: str) -> "KeypadButton":
        """
        Resolve a button from its identifier ("digit5") or symbol ("5").

        Raises:
            ValueError: If raw matches no button
        """
        for button in cls:
            if raw in (button.value, button.symbol):
                return button
        raise ValueError(f"Unknown keypad button: {raw!r}")


def apply_keypad_edit(
    current_text: str,
    button: KeypadButton,
    max_length: int = MAX_AMOUNT_LENGTH,
) -> str:
    """
    Apply one keypad press to amount text.

    Digits replace a bare "0" or append while under the length cap; the
    decimal point appends only when absent and under the cap; backspace
    drops the last character and an empty result becomes "0".

    Returns:
        Sanitized amount text
    """
    text = current_text or "0"
    if button is KeypadButton.DECIMAL:
        if DECIMAL_SEPARATOR not in text and len(text) < max_length:
            text += DECIMAL_SEPARATOR
    elif button is KeypadButton.BACKSPACE:
        text = text[:-1] or "0"
    elif text == "0":
        text = button.symbol
    elif len(text) < max_length:
        text += button.symbol
    return sanitize_amount_text(text)
