"""
Single-slot contribution cache.
"""

import threading
import time
from typing import Callable, Iterable, Optional, Tuple

from shared.logging import get_logger

from service_contributions.app.domain.models import ContributionDay, ContributionSeries


DEFAULT_TTL_MS = 12 * 60 * 60 * 1000


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class ContributionCache:
    """Last fetched contribution series plus the time it was fetched.

    An entry is fresh while ``fetched_at_ms > now_ms - ttl_ms``; the instant
    ``fetched_at_ms + ttl_ms`` itself is already stale. Value and timestamp
    change together under one lock, and no method does I/O, so the lock is
    only ever held briefly.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = epoch_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[ContributionSeries] = None
        self._fetched_at_ms = 0
        self.logger = get_logger("gh.contribution_cache")

    def now_ms(self) -> int:
        return self._clock()

    @property
    def fetched_at_ms(self) -> int:
        with self._lock:
            return self._fetched_at_ms

    def _is_fresh(self, now_ms: int) -> bool:
        return self._fetched_at_ms > now_ms - self.ttl_ms

    def is_fresh(self, now_ms: int) -> bool:
        """Whether the stored timestamp is still inside the TTL window."""
        with self._lock:
            return self._is_fresh(now_ms)

    def read(self) -> Optional[ContributionSeries]:
        with self._lock:
            return self._value

    def lookup(self, now_ms: int) -> Tuple[bool, Optional[ContributionSeries]]:
        """Freshness and value observed under a single lock acquisition."""
        with self._lock:
            return self._is_fresh(now_ms), self._value

    def write(self, value: Iterable[ContributionDay], at_ms: int) -> None:
        """Replace the stored series and its fetch time together."""
        series = tuple(value)
        with self._lock:
            self._value = series
            self._fetched_at_ms = at_ms
        self.logger.debug("Contribution cache updated", fetched_at_ms=at_ms, days=len(series))

    def invalidate(self) -> None:
        """Force the next freshness check to fail; the stored value is kept."""
        with self._lock:
            self._fetched_at_ms = 0
        self.logger.info("Contribution cache invalidated")

    def state(self, now_ms: int) -> str:
        """Summarize the slot as ``fresh``, ``stale`` or ``empty``."""
        fresh, value = self.lookup(now_ms)
        if value is None:
            return "empty"
        return "fresh" if fresh else "stale"
