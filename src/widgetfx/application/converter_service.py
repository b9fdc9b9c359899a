"""
Converter Service - Foreground Refresh Orchestration

This module holds the foreground converter session: the currently selected
currencies and amount, the latest rate table and chart series, and the
refresh sequence that pulls rates and history, recomputes the conversion
and persists it for the widget.

The session starts from whatever the shared store holds, like an app being
reopened, so it always has something to show before the network answers.

Files that USE this module:
- widgetfx.app (builds ConverterSession from settings)
- widgetfx.cli (refresh, convert and presets commands)
- tests.test_converter_service (unit tests)

Files that this module USES:
- widgetfx.application.rates_service (RatesGateway)
- widgetfx.adapters.persistence (SnapshotStore, ReloadSignal)
- widgetfx.domain.conversion (sanitizing and conversion arithmetic)
- widgetfx.domain.models (records and catalogs)
- widgetfx.shared.validators (currency code and preset validation)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import asyncio  # Concurrent rate and trend refresh
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from widgetfx.adapters.persistence.reload_signal import ReloadSignal
from widgetfx.adapters.persistence.snapshot_store import SnapshotStore
from widgetfx.application.rates_service import RatesGateway
from widgetfx.domain.conversion import (
    MAX_AMOUNT_LENGTH,
    cap_amount_text,
    compute_conversion,
    sanitize_amount_text,
)
from widgetfx.domain.errors import DateRangeError, RatesUnavailableError
from widgetfx.domain.models import (
    EXTENDED_CODES,
    ConversionSnapshot,
    Preset,
    RatePoint,
    RateTable,
    default_presets,
    placeholder_series,
    utcnow,
)
from widgetfx.shared.validators import normalize_currency_code, validate_preset_amount

log = logging.getLogger(__name__)

DEFAULT_TREND_DAYS = 7
STALE_NOTICE = "Could not refresh rates: {error}. Showing cached data."


class ConverterSession:
    """Foreground converter state with refresh and persistence."""

    def __init__(
        self,
        gateway: RatesGateway,
        store: SnapshotStore,
        signal: ReloadSignal,
        base_currency: str = "USD",
        target_currency: str = "EUR",
        amount_text: str = "100",
        symbols: Sequence[str] = EXTENDED_CODES,
        trend_days: int = DEFAULT_TREND_DAYS,
        max_amount_length: int = MAX_AMOUNT_LENGTH,
        max_presets: int = 6,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.gateway = gateway
        self.store = store
        self.signal = signal
        self.symbols = list(symbols)
        self.trend_days = trend_days
        self.max_amount_length = max_amount_length
        self.max_presets = max_presets
        self.clock = clock

        self.base_currency = base_currency
        self.target_currency = target_currency
        self.amount_text = sanitize_amount_text(amount_text)
        self.latest_rates: Optional[RateTable] = None
        self.converted_value: Optional[float] = None
        self.last_updated: Optional[datetime] = None
        self.chart_series: List[RatePoint] = []
        self.notice: Optional[str] = None
        self.presets: List[Preset] = []

        # Rate and trend refreshes run in worker threads
        self._lock = threading.RLock()
        self._restore()

    def _restore(self) -> None:
        """Load the last persisted state, rates first, then the snapshot."""
        cached_rates = self.store.load_rates()
        if cached_rates is not None:
            self.latest_rates = cached_rates
            self.last_updated = cached_rates.as_of
            self.base_currency = cached_rates.base

        snapshot = self.store.load_snapshot()
        if snapshot is not None:
            self.base_currency = snapshot.base_currency
            self.target_currency = snapshot.target_currency
            self.amount_text = snapshot.amount_text
            self.converted_value = snapshot.converted_amount
            self.last_updated = snapshot.timestamp
            self.chart_series = list(snapshot.chart_series)

        self._track(self.base_currency)
        self._track(self.target_currency)
        self.presets = self.store.load_presets()
        log.debug(
            "Session restored: %s->%s amount=%s rates=%s",
            self.base_currency, self.target_currency, self.amount_text,
            "cached" if cached_rates else "none",
        )

    # --- refresh sequence ---

    async def activate(self) -> None:
        """
        Run the activation refresh: rates and trend concurrently.

        Both may persist the snapshot; each write is a full replacement, so
        whichever finishes last wins.
        """
        await asyncio.gather(
            asyncio.to_thread(self.refresh_rates),
            asyncio.to_thread(self.refresh_trend),
        )

    async def refresh(self) -> None:
        """Manual pull-to-refresh; same sequence as activation."""
        await self.activate()

    def refresh_rates(self) -> bool:
        """
        Fetch rates, persist them and recompute the conversion.

        On failure a stale-data notice is set and the cached table is reused
        when its base matches the current base; otherwise the conversion
        becomes unavailable.

        Returns:
            True if fresh rates were fetched
        """
        base = self.base_currency
        with self._lock:
            self.notice = None
        try:
            table = self.gateway.fetch_rates(base, self.symbols)
        except RatesUnavailableError as e:
            log.warning("Rate refresh for %s failed, falling back to cache: %s", base, e)
            self._use_cached_rates(str(e))
            return False

        if table.base != base:
            log.warning("Gateway returned %s rates for %s, falling back to cache", table.base, base)
            self._use_cached_rates(f"received {table.base} rates for {base}")
            return False

        with self._lock:
            self.latest_rates = table
            self.last_updated = self.clock()
            self.store.save_rates(table)
            self._update_conversion()
        return True

    def _use_cached_rates(self, error: str) -> None:
        with self._lock:
            self.notice = STALE_NOTICE.format(error=error)
            cached = self.store.load_rates()
            if cached is not None and cached.base == self.base_currency:
                self.latest_rates = cached
                self.last_updated = cached.as_of
            elif self.latest_rates is None or self.latest_rates.base != self.base_currency:
                log.warning("No cached %s rates, conversion unavailable", self.base_currency)
                self.latest_rates = None
            self._update_conversion()

    def refresh_trend(self, days: Optional[int] = None) -> List[RatePoint]:
        """
        Fetch the chart series and persist the snapshot with it.

        Runs regardless of whether the rate refresh succeeded; trend failures
        never surface, they become a placeholder series.
        """
        days = self.trend_days if days is None else days
        seed = self.current_rate()
        try:
            series = self.gateway.fetch_trend(self.base_currency, self.target_currency, days, seed=seed)
        except DateRangeError as e:
            log.warning("Trend window error, using placeholder series: %s", e)
            series = placeholder_series(seed or 1.0, days)

        with self._lock:
            self.chart_series = list(series)
            self._persist_snapshot()
        return self.chart_series

    # --- user actions ---

    def update_amount(self, raw: str) -> Optional[float]:
        """
        Apply typed amount text and recompute.

        Returns:
            The converted value, or None when no rate is available
        """
        text = cap_amount_text((raw or "").replace(",", "."), self.max_amount_length)
        with self._lock:
            self.amount_text = sanitize_amount_text(text)
            return self._update_conversion()

    async def swap_currencies(self) -> None:
        with self._lock:
            self.base_currency, self.target_currency = self.target_currency, self.base_currency
        await self.refresh()

    async def select_base(self, code: str) -> bool:
        """
        Change the base currency and refresh everything.

        Returns:
            False if the code was already selected (nothing refreshed)

        Raises:
            ValueError: If code is not a valid currency code
        """
        code = self._validated(code)
        if code == self.base_currency:
            return False
        with self._lock:
            self.base_currency = code
            self._track(code)
        await self.refresh()
        return True

    async def select_target(self, code: str) -> bool:
        """
        Change the target currency, recompute from the current table and refresh the trend.

        A code outside the requested symbols is added to them and triggers a
        full refresh.

        Returns:
            False if the code was already selected (nothing refreshed)

        Raises:
            ValueError: If code is not a valid currency code
        """
        code = self._validated(code)
        if code == self.target_currency:
            return False
        with self._lock:
            self.target_currency = code
            needs_rates = self._track(code)
            if not needs_rates:
                self._update_conversion()
        if needs_rates:
            await self.refresh()
        else:
            await asyncio.to_thread(self.refresh_trend)
        return True

    def update_presets(self, presets: Sequence[Preset]) -> List[Preset]:
        """
        Replace the widget presets.

        Non-positive amounts are dropped, the list is capped and an empty
        result falls back to the defaults.
        """
        kept = [p for p in presets if validate_preset_amount(p.amount)][: self.max_presets]
        if not kept:
            kept = default_presets()
        self.presets = kept
        if self.store.save_presets(kept):
            self.signal.request()
        return kept

    # --- helpers ---

    @staticmethod
    def _validated(code: str) -> str:
        normalized = normalize_currency_code(code)
        if normalized is None:
            raise ValueError(f"Invalid currency code: {code!r}")
        return normalized

    def _track(self, code: str) -> bool:
        """Add `code` to the requested symbols; True if it was not requested before."""
        if code in self.symbols:
            return False
        self.symbols.append(code)
        return True

    def current_rate(self) -> Optional[float]:
        table = self.latest_rates
        if table is None or table.base != self.base_currency:
            return None
        return table.rate(self.target_currency)

    def current_snapshot(self) -> Optional[ConversionSnapshot]:
        """Build the snapshot for the current state, or None without a valid rate."""
        table = self.latest_rates
        if table is None or table.base != self.base_currency:
            return None
        return compute_conversion(
            self.amount_text,
            table,
            self.target_currency,
            chart_series=self.chart_series,
            timestamp=self.last_updated or self.clock(),
        )

    def _update_conversion(self) -> Optional[float]:
        snapshot = self.current_snapshot()
        if snapshot is None:
            self.converted_value = None
            return None
        self.converted_value = snapshot.converted_amount
        self._write_snapshot(snapshot)
        return self.converted_value

    def _persist_snapshot(self) -> bool:
        snapshot = self.current_snapshot()
        if snapshot is None:
            log.debug("No valid %s->%s rate, snapshot not persisted", self.base_currency, self.target_currency)
            return False
        return self._write_snapshot(snapshot)

    def _write_snapshot(self, snapshot: ConversionSnapshot) -> bool:
        if not self.store.save_snapshot(snapshot):
            return False
        self.signal.request()
        return True
