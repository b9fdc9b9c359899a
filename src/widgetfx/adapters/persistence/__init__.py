"""
Persistence Adapters - Shared Data Storage

This package contains adapters for persisting data shared between the
converter session and the widget:
- File-based record store (JSON, one file per record)
- Cross-process reload signal
"""

from widgetfx.adapters.persistence.snapshot_store import SnapshotStore, atomic_write_json
from widgetfx.adapters.persistence.reload_signal import ReloadSignal

__all__ = [
    "SnapshotStore",
    "atomic_write_json",
    "ReloadSignal",
]
