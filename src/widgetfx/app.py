"""
Application Wiring - Composition Root

This module wires the store, providers, gateway and services from settings.
Each execution context (converter session, keypad press, widget timeline)
builds only what it needs; they share nothing but the store directory.

Files that USE this module:
- widgetfx.cli (every command builds its services here)

Files that this module USES:
- widgetfx.config (settings)
- widgetfx.adapters.providers (ExchangeRateHostProvider, OpenERProvider)
- widgetfx.adapters.persistence (SnapshotStore, ReloadSignal)
- widgetfx.application.* (gateway, session, keypad, timeline)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations for forward references

import logging
from datetime import timedelta
from typing import Callable, Optional

from widgetfx.adapters.persistence.reload_signal import ReloadSignal
from widgetfx.adapters.persistence.snapshot_store import SnapshotStore
from widgetfx.adapters.providers.exchangerate_host import ExchangeRateHostProvider
from widgetfx.adapters.providers.open_er import OpenERProvider
from widgetfx.application.converter_service import ConverterSession
from widgetfx.application.keypad_service import KeypadService
from widgetfx.application.rates_service import ProviderChain, RatesGateway
from widgetfx.application.timeline import TimelineEntry, TimelineProvider, WidgetScheduler
from widgetfx.config.settings import Settings, settings

log = logging.getLogger(__name__)


def _settings(cfg: Optional[Settings]) -> Settings:
    return cfg if cfg is not None else settings


def build_store(cfg: Optional[Settings] = None) -> SnapshotStore:
    cfg = _settings(cfg)
    return SnapshotStore(cfg.data_dir, cfg.app_group, max_presets=cfg.max_presets)


def build_signal(cfg: Optional[Settings] = None) -> ReloadSignal:
    cfg = _settings(cfg)
    return ReloadSignal(cfg.data_dir, cfg.app_group, cfg.widget_kind)


def build_gateway(cfg: Optional[Settings] = None) -> RatesGateway:
    """Primary exchangerate.host, then open.er-api; history from exchangerate.host."""
    cfg = _settings(cfg)
    host = ExchangeRateHostProvider(
        latest_url=cfg.latest_rates_url,
        timeseries_url=cfg.timeseries_url,
        timeout=cfg.http_timeout_seconds,
    )
    open_er = OpenERProvider(base_url=cfg.open_er_url, timeout=cfg.http_timeout_seconds)
    return RatesGateway(ProviderChain([host, open_er]), series_provider=host)


def build_session(cfg: Optional[Settings] = None, gateway: Optional[RatesGateway] = None) -> ConverterSession:
    cfg = _settings(cfg)
    return ConverterSession(
        gateway=gateway or build_gateway(cfg),
        store=build_store(cfg),
        signal=build_signal(cfg),
        base_currency=cfg.default_base,
        target_currency=cfg.default_target,
        amount_text=cfg.default_amount,
        trend_days=cfg.trend_days,
        max_amount_length=cfg.max_amount_length,
        max_presets=cfg.max_presets,
    )


def build_keypad(cfg: Optional[Settings] = None) -> KeypadService:
    cfg = _settings(cfg)
    return KeypadService(build_store(cfg), build_signal(cfg), max_amount_length=cfg.max_amount_length)


def build_timeline(cfg: Optional[Settings] = None) -> TimelineProvider:
    cfg = _settings(cfg)
    return TimelineProvider(build_store(cfg), refresh_interval=timedelta(minutes=cfg.widget_refresh_minutes))


def build_scheduler(render: Callable[[TimelineEntry], None], cfg: Optional[Settings] = None) -> WidgetScheduler:
    cfg = _settings(cfg)
    return WidgetScheduler(
        build_timeline(cfg),
        build_signal(cfg),
        render,
        poll_seconds=cfg.widget_poll_seconds,
    )
