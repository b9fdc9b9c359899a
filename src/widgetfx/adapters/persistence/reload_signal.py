"""
Reload Signal - Cross-process "regenerate now" Trigger

The widget timeline runs in its own process and cannot be called directly
by the converter session or the keypad entry point. Writers request a
regeneration by bumping a token file next to the shared records; the
timeline scheduler polls the token and regenerates when it changes.

Files that USE this module:
- widgetfx.application.converter_service (request after persisting)
- widgetfx.application.keypad_service (request after a key press)
- widgetfx.application.timeline (WidgetScheduler polls the token)
- tests.test_timeline (unit tests)

Files that this module USES:
- widgetfx.adapters.persistence.snapshot_store (atomic_write_json)
"""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from widgetfx.adapters.persistence.snapshot_store import atomic_write_json

log = logging.getLogger(__name__)


class ReloadSignal:
    """Token file whose value changes every time a reload is requested."""

    def __init__(self, root: Path, namespace: str, kind: str):
        self.path = Path(root) / namespace / f"{kind}.reload"
        self.kind = kind

    def request(self) -> bool:
        """
        Request that every timeline of this kind regenerates.

        Returns:
            True if the request was written
        """
        token = max(time.time_ns(), self.token() + 1)
        try:
            atomic_write_json(self.path, {"kind": self.kind, "token": token})
        except OSError as e:
            log.error("Failed to request %s reload: %s", self.kind, e)
            return False
        log.debug("Requested %s reload (token=%d)", self.kind, token)
        return True

    def token(self) -> int:
        """Current token, 0 when no reload was ever requested or the file is unreadable."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return int(json.load(f)["token"])
        except FileNotFoundError:
            return 0
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.warning("Ignoring unreadable %s reload token: %s", self.kind, e)
            return 0
