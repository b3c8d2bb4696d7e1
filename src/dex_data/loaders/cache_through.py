"""Batch function that resolves keys cache -> store -> compute -> default.

Pipeline for one chunk of keys:
    1. one bulk_get against the distributed cache
    2. one bulk store query for the cache misses
    3. the computation callback for keys still missing, run concurrently;
       a failing callback yields the default for that key only
    4. values in input order, unresolved keys get the default
    5. optional write-back of store/computed values to the cache

Read paths always return something usable: any cache error counts as
a miss or a skipped write, and a failing store query is logged and
leaves the keys to the computation callback.
"""

import asyncio
from collections.abc import Awaitable, Callable, Hashable, Mapping
from typing import Any

from dex_data.infrastructure.cache.ports import ICacheClient
from dex_data.infrastructure.observability import get_loader_logger
from dex_data.loaders.batch import NOT_FOUND
from dex_data.shared.errors import CacheUnavailableError

FetchFn = Callable[[list[Any]], Awaitable[Mapping[Hashable, Any]]]
ComputeFn = Callable[[Any], Awaitable[Any]]


class CacheThroughBatch:
    """Callable batch function for DataLoader.

    Args:
        name: Loader name used in logs
        cache: Distributed cache (optional)
        fetch: Bulk store lookup returning {key: value} for keys it found
        compute: Per-key fallback returning a value or None
        key_format: Cache key template, e.g. "pair:{}:reserveUsd"
        ttl: TTL in seconds for write-back
        default: Value for keys nothing could resolve
        write_back: Whether store/computed values are written to the cache
        coerce: Applied to every resolved value (e.g. str for decimal strings)
    """

    def __init__(
        self,
        name: str,
        *,
        cache: ICacheClient | None = None,
        fetch: FetchFn | None = None,
        compute: ComputeFn | None = None,
        key_format: str = "{}",
        ttl: int = 300,
        default: Any = NOT_FOUND,
        write_back: bool = False,
        coerce: Callable[[Any], Any] | None = None,
    ):
        self.name = name
        self.cache = cache
        self.fetch = fetch
        self.compute = compute
        self.key_format = key_format
        self.ttl = ttl
        self.default = default
        self.write_back = write_back
        self.coerce = coerce
        self.log = get_loader_logger(name)

    def cache_key(self, key: Any) -> str:
        return self.key_format.format(key)

    async def __call__(self, keys: list[Any]) -> list[Any]:
        resolved: dict[Any, Any] = {}

        cached = await self._from_cache(keys)
        resolved.update(cached)

        missing = [key for key in dict.fromkeys(keys) if key not in resolved]
        fetched = await self._from_store(missing) if missing else {}
        resolved.update(fetched)

        missing = [key for key in missing if key not in resolved]
        computed = await self._from_compute(missing) if missing else {}
        resolved.update(computed)

        self.log.debug(
            "batch_resolved",
            keys=len(keys),
            cache_hits=len(cached),
            store_hits=len(fetched),
            computed=len(computed),
        )

        if self.write_back and self.cache is not None:
            await self._write_back({**fetched, **computed})

        if self.coerce is not None:
            resolved = {key: self.coerce(value) for key, value in resolved.items()}
        return [resolved.get(key, self.default) for key in keys]

    async def _from_cache(self, keys: list[Any]) -> dict[Any, Any]:
        if self.cache is None or not keys:
            return {}
        cache_keys = {self.cache_key(key): key for key in keys}
        try:
            hits = await self.cache.bulk_get(list(cache_keys))
        except Exception as e:
            self.log.warning("cache_unavailable", error=str(e))
            return {}
        return {
            cache_keys[ck]: value
            for ck, value in hits.items()
            if ck in cache_keys and value is not None
        }

    async def _from_store(self, keys: list[Any]) -> dict[Any, Any]:
        if self.fetch is None:
            return {}
        try:
            found = await self.fetch(keys)
        except Exception as e:
            self.log.error("store_lookup_failed", keys=len(keys), error=str(e))
            return {}
        return {key: found[key] for key in keys if found.get(key) is not None}

    async def _from_compute(self, keys: list[Any]) -> dict[Any, Any]:
        if self.compute is None:
            return {}
        outcomes = await asyncio.gather(
            *(self.compute(key) for key in keys), return_exceptions=True
        )

        computed = {}
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, Exception):
                self.log.warning("compute_failed", key=str(key), error=str(outcome))
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome is not None:
                computed[key] = outcome
        return computed

    async def _write_back(self, values: dict[Any, Any]) -> None:
        for key, value in values.items():
            try:
                await self.cache.set(self.cache_key(key), value, self.ttl)
            except CacheUnavailableError as e:
                self.log.warning("cache_write_skipped", key=str(key), error=str(e))
                return
            except Exception as e:
                self.log.warning("cache_write_failed", key=str(key), error=str(e))
