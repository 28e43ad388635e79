from __future__ import annotations

import time
from typing import Any, Callable, Hashable, Optional, Tuple


class ListingCache:
    """
    Single-slot TTL cache for the default drill listing.

    Holds at most one (key, value) pair. Reads may be up to `ttl` seconds
    stale. Concurrent misses may both recompute; the last `set` wins.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._slot: Optional[Tuple[Hashable, Any, float, float]] = None

    def get(self, key: Hashable) -> Optional[Any]:
        slot = self._slot
        if slot is None:
            return None
        slot_key, value, stored_at, ttl = slot
        if slot_key != key or self._clock() - stored_at >= ttl:
            return None
        return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        self._slot = (key, value, self._clock(), ttl)

    def clear(self) -> None:
        self._slot = None
