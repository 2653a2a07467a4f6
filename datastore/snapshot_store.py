from __future__ import annotations

from threading import Lock

from models.records import DashboardSnapshot


class SnapshotStore:
    """Holds the one dashboard snapshot currently on display.

    Snapshots are immutable, so readers get the stored instance itself and a
    refresh swaps the whole reference in one step.
    """

    def __init__(self, initial: DashboardSnapshot | None = None) -> None:
        self._snapshot = initial or DashboardSnapshot()
        self._version = 0
        self._lock = Lock()

    def get(self) -> DashboardSnapshot:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: DashboardSnapshot) -> int:
        with self._lock:
            self._snapshot = snapshot
            self._version += 1
            return self._version

    @property
    def version(self) -> int:
        with self._lock:
            return self._version
