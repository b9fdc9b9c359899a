"""
Domain Errors - Business Logic Exceptions

This module defines the exceptions raised by the rate pipeline, the
conversion engine and the snapshot store. None of them is fatal: every
caller has a defined fallback for each one.
"""


class WidgetFXError(Exception):
    """Base exception for domain errors."""
    pass


class ProviderUnavailableError(WidgetFXError):
    """Raised when a single upstream provider fails (network, HTTP or decode)."""
    pass


class RatesUnavailableError(WidgetFXError):
    """Raised when every rate provider in the chain has failed."""
    pass


class DateRangeError(WidgetFXError):
    """Raised when a historical date window cannot be computed."""
    pass


class StoreDecodeError(WidgetFXError):
    """Raised when a persisted record cannot be decoded."""
    pass


class NoRateForTargetError(WidgetFXError):
    """Raised when the rate table has no entry for the requested currency."""

    def __init__(self, base: str, target: str):
        super().__init__(f"No {base}->{target} rate in the current table")
        self.base = base
        self.target = target
