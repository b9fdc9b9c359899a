"""
Domain Layer - Pure Business Objects

This package contains the rate and snapshot models, the conversion engine,
the keypad reducer and the domain errors. No I/O happens here.
"""

from widgetfx.domain.models import (
    ConversionSnapshot,
    Preset,
    RatePoint,
    RateTable,
)
from widgetfx.domain.errors import (
    DateRangeError,
    NoRateForTargetError,
    ProviderUnavailableError,
    RatesUnavailableError,
    StoreDecodeError,
    WidgetFXError,
)

__all__ = [
    "RateTable",
    "RatePoint",
    "ConversionSnapshot",
    "Preset",
    "WidgetFXError",
    "ProviderUnavailableError",
    "RatesUnavailableError",
    "DateRangeError",
    "StoreDecodeError",
    "NoRateForTargetError",
]
