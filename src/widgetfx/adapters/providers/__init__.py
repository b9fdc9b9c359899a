"""
Provider Adapters - External API Clients

This package contains adapters for external exchange rate APIs.
All providers implement the RateProvider interface.
"""

from widgetfx.adapters.providers.base import RateProvider
from widgetfx.adapters.providers.exchangerate_host import ExchangeRateHostProvider
from widgetfx.adapters.providers.open_er import OpenERProvider

__all__ = [
    "RateProvider",
    "ExchangeRateHostProvider",
    "OpenERProvider",
]
