"""
Widget Timeline - Display Surface Regeneration

This module rebuilds what the widget shows from the shared store alone.
The widget never performs network I/O: it reads the latest snapshot,
presets and cached rates, renders one entry and schedules the next
regeneration a fixed interval later. A reload request (from the keypad or
the converter session) makes it regenerate immediately instead.

Display states cycle without a terminal state:
    PLACEHOLDER -> LOADED -> EDITED (reload) / SCHEDULED (cadence) -> ...
PLACEHOLDER is used whenever no snapshot has ever been persisted.

Files that USE this module:
- widgetfx.app (builds TimelineProvider and WidgetScheduler)
- widgetfx.cli (widget command)
- tests.test_timeline (unit tests)

Files that this module USES:
- widgetfx.adapters.persistence (SnapshotStore, ReloadSignal)
- widgetfx.domain.models (records, catalogs, placeholder snapshot)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Sequence

from widgetfx.adapters.persistence.reload_signal import ReloadSignal
from widgetfx.adapters.persistence.snapshot_store import SnapshotStore
from widgetfx.domain.models import (
    PRIMARY_CODES,
    ConversionSnapshot,
    Preset,
    RateTable,
    placeholder_snapshot,
    utcnow,
)

log = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = timedelta(minutes=15)
CONVERSION_CANDIDATES = 5


class DisplayState(str, Enum):
    PLACEHOLDER = "placeholder"
    LOADED = "loaded"
    EDITED = "edited"
    SCHEDULED = "scheduled"


@dataclass(frozen=True)
class ConversionDisplay:
    code: str
    rate: float
    converted: float


@dataclass(frozen=True)
class TimelineEntry:
    date: datetime
    snapshot: ConversionSnapshot
    presets: List[Preset]
    conversions: List[ConversionDisplay]
    state: DisplayState


@dataclass(frozen=True)
class Timeline:
    entries: List[TimelineEntry]
    next_update: datetime


def build_conversions(
    snapshot: ConversionSnapshot,
    table: Optional[RateTable],
    limit: int = 1,
    codes: Sequence[str] = PRIMARY_CODES,
) -> List[ConversionDisplay]:
    """
    Convert the snapshot amount into the first primary codes other than its base.

    Only a cached table with the same base as the snapshot is used; without
    one the list is empty and the widget shows "rate unavailable".
    """
    if table is None or table.base != snapshot.base_currency:
        return []
    candidates = [code for code in codes if code != snapshot.base_currency][:CONVERSION_CANDIDATES]
    result = []
    for code in candidates:
        rate = table.rate(code)
        if rate is None:
            continue
        result.append(ConversionDisplay(code=code, rate=rate, converted=snapshot.amount * rate))
    return result[:limit]


class TimelineProvider:
    """Builds timeline entries from the shared store only."""

    def __init__(
        self,
        store: SnapshotStore,
        refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.refresh_interval = refresh_interval
        self.clock = clock

    def placeholder(self) -> TimelineEntry:
        """Entry shown before anything was ever persisted."""
        snapshot = placeholder_snapshot(self.clock())
        return TimelineEntry(
            date=snapshot.timestamp,
            snapshot=snapshot,
            presets=self.store.load_presets(),
            conversions=[],
            state=DisplayState.PLACEHOLDER,
        )

    def _entry(self, date: Optional[datetime], state: DisplayState) -> TimelineEntry:
        snapshot = self.store.load_snapshot()
        if snapshot is None:
            entry = self.placeholder()
            if date is None:
                return entry
            return TimelineEntry(date, entry.snapshot, entry.presets, entry.conversions, entry.state)
        return TimelineEntry(
            date=date or snapshot.timestamp,
            snapshot=snapshot,
            presets=self.store.load_presets(),
            conversions=build_conversions(snapshot, self.store.load_rates()),
            state=state,
        )

    def snapshot(self) -> TimelineEntry:
        """Single entry dated at the persisted snapshot's timestamp."""
        return self._entry(None, DisplayState.LOADED)

    def timeline(self, state: DisplayState = DisplayState.LOADED) -> Timeline:
        """
        Build a one-entry timeline dated now, with the next update one interval later.

        Args:
            state: Why the timeline is regenerated (ignored when no snapshot exists)
        """
        now = self.clock()
        entry = self._entry(now, state)
        return Timeline(entries=[entry], next_update=now + self.refresh_interval)


class WidgetScheduler:
    """
    Timer that regenerates the widget on a fixed cadence or on request.

    In-process callers use reload_now(); other processes bump the
    ReloadSignal token, which poll() checks on every pass.
    """

    def __init__(
        self,
        provider: TimelineProvider,
        signal: ReloadSignal,
        render: Callable[[TimelineEntry], None],
        poll_seconds: float = 1.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.signal = signal
        self.render = render
        self.poll_seconds = poll_seconds
        self.clock = clock or provider.clock
        self.current: Optional[TimelineEntry] = None
        self.next_update: Optional[datetime] = None
        self._seen_token = signal.token()
        self._reload = threading.Event()
        self._wake = threading.Event()

    @property
    def state(self) -> Optional[DisplayState]:
        return self.current.state if self.current else None

    def regenerate(self, state: DisplayState) -> TimelineEntry:
        """Rebuild the timeline, render its entry and schedule the next pass."""
        self._seen_token = self.signal.token()
        timeline = self.provider.timeline(state)
        entry = timeline.entries[0]
        self.current = entry
        self.next_update = timeline.next_update
        log.info("Widget regenerated (%s), next update at %s", entry.state.value, self.next_update.isoformat())
        self.render(entry)
        return entry

    def reload_now(self) -> None:
        """Ask for an immediate regeneration on the next poll."""
        self._reload.set()
        self._wake.set()

    def poll(self) -> Optional[TimelineEntry]:
        """
        Regenerate if anything is due.

        Returns:
            The new entry, or None when nothing was due
        """
        if self.current is None:
            return self.regenerate(DisplayState.LOADED)

        if self._reload.is_set() or self.signal.token() != self._seen_token:
            self._reload.clear()
            return self.regenerate(DisplayState.EDITED)

        if self.next_update is not None and self.clock() >= self.next_update:
            return self.regenerate(DisplayState.SCHEDULED)
        return None

    def run(self, stop: threading.Event) -> None:
        """Poll until `stop` is set; reload_now() and stop() wake the loop early."""
        log.info("Widget scheduler started (poll every %.1fs)", self.poll_seconds)
        while not stop.is_set():
            self.poll()
            self._wake.wait(self.poll_seconds)
            self._wake.clear()
        log.info("Widget scheduler stopped")

    def wake(self) -> None:
        self._wake.set()
