"""
Application Layer - Use Cases and Services

This package contains the services that orchestrate the domain logic:
the rate gateway, the foreground converter session, the widget keypad
entry point and the widget timeline scheduler.
"""

from widgetfx.application.rates_service import ProviderChain, RatesGateway, trend_window
from widgetfx.application.converter_service import ConverterSession
from widgetfx.application.keypad_service import KeypadService
from widgetfx.application.timeline import (
    DisplayState,
    Timeline,
    TimelineEntry,
    TimelineProvider,
    WidgetScheduler,
    build_conversions,
)

__all__ = [
    "ProviderChain",
    "RatesGateway",
    "trend_window",
    "ConverterSession",
    "KeypadService",
    "DisplayState",
    "Timeline",
    "TimelineEntry",
    "TimelineProvider",
    "WidgetScheduler",
    "build_conversions",
]
