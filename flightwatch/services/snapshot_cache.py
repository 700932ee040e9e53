"""
All-Flights Snapshot Cache - one shared, time-boxed copy of the OpenSky feed
N flight lookups inside one TTL window cost a single upstream call
"""

import threading
import time
from typing import Any, Callable, List, Optional

from flightwatch.models.flight import CachedSnapshot


class SnapshotCache:
    """Holds at most one CachedSnapshot, valid for ttl_seconds after it was stored"""

    def __init__(self, ttl_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[CachedSnapshot] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[CachedSnapshot]:
        """Current snapshot, or None when empty or expired"""
        with self._lock:
            if self._snapshot is None:
                return None
            if self._clock() - self._snapshot.timestamp >= self.ttl_seconds:
                return None
            return self._snapshot

    def store(self, states: List[List[Any]]) -> CachedSnapshot:
        """Replace the snapshot wholesale"""
        # The global feed holds thousands of rows; skip per-row validation
        snapshot = CachedSnapshot.model_construct(states=states, timestamp=self._clock())
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
