"""In-process TTL cache implementing ICacheClient.

Used for local development without Redis and as the cache fake in tests.
Expired entries are dropped lazily on read; there is no sweep.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """Cached value with its insertion time."""

    value: Any
    inserted_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.inserted_at < self.ttl


class InMemoryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.value

    async def bulk_get(self, keys: list[str]) -> dict[str, Any]:
        found = {}
        for key in keys:
            value = await self.get(key)
            if value is not None:
                found[key] = value
        return found

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = CacheEntry(value, self._clock(), ttl)

    def __len__(self) -> int:
        return len(self._entries)
