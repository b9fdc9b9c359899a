"""
Formatting Adapters - Text Output

This package contains plain-text formatting for the converter session and
the widget timeline.
"""

from widgetfx.adapters.formatting.formatter import (
    format_rate,
    format_result,
    session_lines,
    widget_lines,
)

__all__ = [
    "format_rate",
    "format_result",
    "session_lines",
    "widget_lines",
]
