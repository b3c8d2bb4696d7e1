"""Cache primitive required by the loader layer."""

from typing import Any, Protocol


class ICacheClient(Protocol):
    """
    Key-value cache with TTL semantics.

    Implementations fail open: a connectivity problem surfaces as a miss
    (None / absent key), never as an exception.
    """

    async def get(self, key: str) -> Any | None:
        """Return the cached value or None on a miss."""
        ...

    async def bulk_get(self, keys: list[str]) -> dict[str, Any]:
        """Return a mapping containing only the keys that were hits."""
        ...

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value for ttl seconds."""
        ...
