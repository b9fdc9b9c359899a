"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Logging configuration
"""

from widgetfx.shared.validators import (
    normalize_currency_code,
    validate_currency_code,
    validate_namespace,
    validate_preset_amount,
)
from widgetfx.shared.logging_conf import setup_logging

__all__ = [
    "validate_currency_code",
    "normalize_currency_code",
    "validate_namespace",
    "validate_preset_amount",
    "setup_logging",
]
