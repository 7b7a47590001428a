from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Callable

from ..core.constants import DEFAULT_DEDUP_MAX_ENTRIES, DEFAULT_DEDUP_TTL_SECONDS


class TTLDedupCache:
    """Bounded "seen recently" set with max-age eviction.

    In-process only: duplicates sent through another server instance are not
    suppressed.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_DEDUP_TTL_SECONDS,
        max_entries: int = DEFAULT_DEDUP_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._ttl = float(ttl_seconds)
        self._max = int(max_entries)
        self._clock = clock
        self._lock = threading.Lock()
        self._seen: OrderedDict[str, float] = OrderedDict()

    def _evict(self, now: float) -> None:
        while self._seen:
            key, stamp = next(iter(self._seen.items()))
            if now - stamp < self._ttl and len(self._seen) <= self._max:
                break
            self._seen.popitem(last=False)

    def seen_recently(self, key: str) -> bool:
        """True if ``key`` was recorded within the TTL; otherwise record it."""
        now = self._clock()
        with self._lock:
            self._evict(now)
            if key in self._seen:
                return True
            self._seen[key] = now
            self._evict(now)
            return False

    def __len__(self) -> int:
        with self._lock:
            self._evict(self._clock())
            return len(self._seen)
