"""Time-windowed corridor history.

Design notes:
    - Append-only: snapshots are stamped with the current clock on
      insertion and never mutated afterwards.
    - Eviction happens on every insertion, not lazily on read: after an
      append, entries older than ``now - window`` are dropped from the
      front.  There is no count cap.
    - A threading.Lock covers append+evict as one critical section and
      reads take a copy, so sync FastAPI handlers (run in the threadpool)
      and the background loop never observe a half-evicted sequence.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import timedelta

from pulseops.domain.snapshot import TimedWorldStatus, WorldStatus
from pulseops.foundation.clock import now_ms

logger = logging.getLogger(__name__)


class WorldHistory:
    """Bounded, ordered (oldest → newest) sequence of TimedWorldStatus.

    Args:
        window: How far back snapshots are retained.
    """

    def __init__(self, window: timedelta = timedelta(minutes=60)) -> None:
        self._window_ms = int(window.total_seconds() * 1000)
        self._entries: deque[TimedWorldStatus] = deque()
        self._lock = threading.Lock()

    # ── Public API ───────────────────────────────────────────────────────

    def record(self, status: WorldStatus) -> TimedWorldStatus:
        """Stamp *status* with now, append it, then evict stale entries."""
        now = now_ms()
        timed = TimedWorldStatus.stamp(status, now)
        cutoff = now - self._window_ms

        with self._lock:
            self._entries.append(timed)
            evicted = 0
            while self._entries and self._entries[0].timestamp < cutoff:
                self._entries.popleft()
                evicted += 1
            size = len(self._entries)

        logger.debug(
            "Recorded snapshot route=%s delay=%.1f source=%s (size=%d, evicted=%d)",
            timed.route_id, timed.avg_delay_minutes, timed.source.value, size, evicted,
        )
        return timed

    def history(self) -> list[TimedWorldStatus]:
        """Copy of the current sequence, oldest first."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
