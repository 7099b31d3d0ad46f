from __future__ import annotations

import threading
from datetime import date
from typing import Optional, Tuple

from .model import AttendanceRecord

_MISS = object()


class TodayStatusCache:
    """Explicit per-worker cache of today's attendance record.

    Entries are keyed by worker id and remember the civil day they were read for,
    so a day rollover is a miss. Writers call ``invalidate`` for the worker, which
    also bumps the worker's version: a reader that took ``version()`` before going
    to the store only gets to ``put`` if no write happened in between.
    """

    MISS = _MISS

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[int, Tuple[date, Optional[AttendanceRecord]]] = {}
        self._versions: dict[int, int] = {}

    def version(self, worker_id: int) -> int:
        with self._lock:
            return self._versions.get(int(worker_id), 0)

    def get(self, worker_id: int, day: date):
        """Return the cached record (possibly None) or ``TodayStatusCache.MISS``."""
        with self._lock:
            entry = self._entries.get(int(worker_id))
        if entry is None or entry[0] != day:
            return _MISS
        return entry[1]

    def put(
        self,
        worker_id: int,
        day: date,
        record: Optional[AttendanceRecord],
        *,
        version: Optional[int] = None,
    ) -> bool:
        """Store ``record``; with ``version``, only if the worker was not invalidated since."""
        key = int(worker_id)
        with self._lock:
            if version is not None and self._versions.get(key, 0) != version:
                return False
            self._entries[key] = (day, record)
            return True

    def invalidate(self, worker_id: int) -> None:
        key = int(worker_id)
        with self._lock:
            self._entries.pop(key, None)
            self._versions[key] = self._versions.get(key, 0) + 1
