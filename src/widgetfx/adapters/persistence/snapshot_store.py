"""
Snapshot Store - Shared Record Persistence

This module persists the three records shared by the converter session and
the widget: the latest rate table, the latest conversion snapshot and the
widget presets. Each record lives in its own JSON file under a namespace
directory that every execution context can reach, so a write to one record
never disturbs another.

Writes replace a record wholesale through a temp file and an atomic rename,
so a reader in another process only ever sees the previous or the new
record. Reads of a missing or undecodable record return None.

Files that USE this module:
- widgetfx.application.converter_service (reads and writes all three records)
- widgetfx.application.keypad_service (reads and writes the snapshot)
- widgetfx.application.timeline (reads snapshot, rates and presets)
- widgetfx.app (builds the store from settings)
- tests.test_snapshot_store (unit tests)

Files that this module USES:
- widgetfx.domain.models (RateTable, ConversionSnapshot, Preset)
- widgetfx.domain.errors (StoreDecodeError)
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from widgetfx.domain.errors import StoreDecodeError
from widgetfx.domain.models import ConversionSnapshot, Preset, RateTable, default_presets
from widgetfx.shared.validators import validate_preset_amount

log = logging.getLogger(__name__)

T = TypeVar("T")

RATES_KEY = "latest_rates"
SNAPSHOT_KEY = "latest_snapshot"
PRESETS_KEY = "widget_presets"


def atomic_write_json(path: Path, payload: Any) -> None:
    """
    Write JSON to `path` using a temp file and an atomic rename.

    Raises:
        OSError: If the temp file cannot be written or renamed
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        prefix=f".{path.stem}.",
        suffix=".json.tmp",
        dir=str(path.parent),
        text=True,
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, str(path))
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class SnapshotStore:
    """Key-value store of independently replaced JSON records."""

    def __init__(self, root: Path, namespace: str, max_presets: int = 6):
        """
        Initialize the store.

        Args:
            root: Data directory shared by every execution context
            namespace: Shared namespace identifier (a directory under root)
            max_presets: Cap applied when presets are saved or loaded
        """
        self.directory = Path(root) / namespace
        self.max_presets = max_presets

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    # --- generic record access ---

    def _write(self, key: str, payload: Any) -> bool:
        path = self._path(key)
        try:
            atomic_write_json(path, payload)
        except (OSError, TypeError, ValueError) as e:
            log.error("Failed to save %s record to %s: %s", key, path, e)
            return False
        log.debug("Saved %s record to %s", key, path)
        return True

    def _read(self, key: str, decode: Callable[[Any], T]) -> Optional[T]:
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            log.error("Failed to read %s record from %s: %s", key, path, e)
            return None

        try:
            return self._decode(key, raw, decode)
        except StoreDecodeError as e:
            log.warning("Ignoring unreadable %s record: %s", key, e)
            return None

    @staticmethod
    def _decode(key: str, raw: bytes, decode: Callable[[Any], T]) -> T:
        # UnicodeDecodeError is a ValueError
        try:
            return decode(json.loads(raw.decode("utf-8")))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StoreDecodeError(f"{key}: {e}") from e

    # --- rates ---

    def load_rates(self) -> Optional[RateTable]:
        return self._read(RATES_KEY, RateTable.from_json)

    def save_rates(self, table: RateTable) -> bool:
        return self._write(RATES_KEY, table.to_json())

    # --- conversion snapshot ---

    def load_snapshot(self) -> Optional[ConversionSnapshot]:
        return self._read(SNAPSHOT_KEY, ConversionSnapshot.from_json)

    def save_snapshot(self, snapshot: ConversionSnapshot) -> bool:
        return self._write(SNAPSHOT_KEY, snapshot.to_json())

    # --- presets ---

    @staticmethod
    def _decode_presets(data: Any) -> List[Preset]:
        if not isinstance(data, list):
            raise TypeError("presets record is not a list")
        return [Preset.from_json(item) for item in data]

    def load_presets(self) -> List[Preset]:
        """
        Load presets, substituting the built-in defaults for an absent,
        unreadable or empty record. Presets with a non-positive amount are
        dropped first, so a record holding only those also yields defaults.
        """
        presets = [
            p for p in self._read(PRESETS_KEY, self._decode_presets) or []
            if validate_preset_amount(p.amount)
        ]
        if not presets:
            return default_presets()
        return presets[: self.max_presets]

    def save_presets(self, presets: List[Preset]) -> bool:
        return self._write(PRESETS_KEY, [p.to_json() for p in presets[: self.max_presets]])
