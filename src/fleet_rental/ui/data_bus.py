"""Signals shared between screens."""

from __future__ import annotations

from PySide6 import QtCore


class DataEventBus(QtCore.QObject):
    """Global emitter for store changes and snapshot refreshes."""

    data_changed = QtCore.Signal()
    # Carries the version of the snapshot just installed.
    snapshot_refreshed = QtCore.Signal(int)
