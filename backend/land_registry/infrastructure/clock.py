"""System Clock - UTC wall-clock time that never moves backwards.

Invariants:
    - now() is timezone-aware (UTC)
    - Successive now() calls are non-decreasing, even across NTP step-backs

Design Decisions:
    - Clamp to the last issued value instead of using time.monotonic(): sale
      records need a wall-clock date, not an uptime counter
"""

import threading
from datetime import datetime, timezone


class SystemClock:
    """Clock implementation used by the running service."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def now(self) -> datetime:
        with self._lock:
            current = datetime.now(timezone.utc)
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current
