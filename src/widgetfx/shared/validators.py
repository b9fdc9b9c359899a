"""
Input Validation Utilities - Configuration and Input Validation

This module validates currency codes, store namespaces and preset amounts
so that bad configuration or CLI input is rejected before it reaches the
providers or the snapshot store.

Files that USE this module:
- widgetfx.config.settings (field validators for default currencies and namespace)
- widgetfx.adapters.providers.* (drop malformed currency codes from responses)
- widgetfx.application.converter_service (validate selected currencies)
- widgetfx.cli (validate --base/--target options)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Optional

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
_NAMESPACE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def validate_currency_code(code: str) -> bool:
    """
    Validate an ISO-4217 style currency code.

    Args:
        code: Currency code to validate (must already be uppercase)

    Returns:
        True if the code is exactly three uppercase letters
    """
    if not code or not isinstance(code, str):
        return False
    return bool(_CURRENCY_CODE.match(code))


def normalize_currency_code(code: Optional[str]) -> Optional[str]:
    """
    Uppercase and strip a currency code.

    Returns:
        The normalized code, or None if it is not a valid code
    """
    if not code:
        return None
    normalized = code.strip().upper()
    return normalized if validate_currency_code(normalized) else None


def validate_namespace(namespace: str) -> bool:
    """
    Validate a shared storage namespace identifier.

    The namespace becomes a directory name, so path separators and leading
    dots are rejected.
    """
    if not namespace:
        return False
    return bool(_NAMESPACE.match(namespace)) and ".." not in namespace


def validate_preset_amount(amount: float) -> bool:
    """Preset amounts must be strictly positive finite numbers."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False
    return value > 0 and value != float("inf")
