"""
Keypad Service - Out-of-band Amount Edits from the Widget

The widget keypad runs as a short-lived invocation with no foreground
session: it reads the persisted snapshot, applies one button press,
recomputes with the rate already cached in the snapshot and asks the widget
timeline to regenerate. It never touches the network.

Files that USE this module:
- widgetfx.cli (press command)
- tests.test_keypad_service (unit tests)

Files that this module USES:
- widgetfx.adapters.persistence (SnapshotStore, ReloadSignal)
- widgetfx.domain.keypad (KeypadButton, apply_keypad_edit)
- widgetfx.domain.conversion (recompute_with_rate)
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from widgetfx.adapters.persistence.reload_signal import ReloadSignal
from widgetfx.adapters.persistence.snapshot_store import SnapshotStore
from widgetfx.domain.conversion import MAX_AMOUNT_LENGTH, recompute_with_rate
from widgetfx.domain.keypad import KeypadButton, apply_keypad_edit
from widgetfx.domain.models import ConversionSnapshot, placeholder_snapshot, utcnow

log = logging.getLogger(__name__)


class KeypadService:
    def __init__(
        self,
        store: SnapshotStore,
        signal: ReloadSignal,
        max_amount_length: int = MAX_AMOUNT_LENGTH,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.signal = signal
        self.max_amount_length = max_amount_length
        self.clock = clock
        self.last_snapshot: Optional[ConversionSnapshot] = None

    def press(self, button: KeypadButton) -> bool:
        """
        Apply a keypad press to the persisted snapshot and request a reload.

        Args:
            button: One of the twelve keypad buttons

        Returns:
            True if the updated snapshot was written to the store
        """
        now = self.clock()
        snapshot = self.store.load_snapshot() or placeholder_snapshot(now)
        amount_text = apply_keypad_edit(snapshot.amount_text, button, self.max_amount_length)
        updated = recompute_with_rate(snapshot, amount_text, timestamp=now)

        if not self.store.save_snapshot(updated):
            log.error("Keypad %s: snapshot could not be saved", button.value)
            return False

        self.last_snapshot = updated
        log.info("Keypad %s: amount %s -> %s", button.value, snapshot.amount_text, updated.amount_text)
        self.signal.request()
        return True
