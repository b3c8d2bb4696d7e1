"""Batched point lookups.

Two layers:

BatchLoader
    One micro-batch. Accepts keys until the end of the current event
    loop tick, then dispatches every distinct key to the batch function
    in chunks of ``max_batch_size`` and resolves the waiting futures.
    Once dispatched it is inert; submitting another key raises
    LoaderClosedError.

DataLoader
    The request-scoped façade resolvers call. Keeps a local memo of
    in-flight and resolved keys (short TTL, never shared across
    requests) and opens a new BatchLoader whenever the current one has
    dispatched.

Usage:
    >>> loader = DataLoader(fetch_tokens, name="token_loader")
    >>> a, b = await asyncio.gather(loader.load("0x1"), loader.load("0x2"))
    >>> # one call: fetch_tokens(["0x1", "0x2"])
"""

import asyncio
import enum
import time
from collections.abc import Awaitable, Callable, Hashable, Sequence
from typing import Any

from dex_data.infrastructure.cache.memory import CacheEntry
from dex_data.infrastructure.observability import get_loader_logger
from dex_data.shared.errors import BatchLoadError, LoaderClosedError

BatchFn = Callable[[list[Any]], Awaitable[Sequence[Any]]]


class _NotFound:
    """Marker for a key that resolved to no value.

    Distinct from None, 0 and "" which are all legitimate values.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


class BatchState(str, enum.Enum):
    ACCEPTING = "accepting"
    DISPATCHED = "dispatched"


class BatchLoader:
    """A single micro-batch of keys."""

    def __init__(
        self,
        batch_fn: BatchFn,
        max_batch_size: int = 100,
        name: str = "batch",
    ):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be >= 1")
        self.batch_fn = batch_fn
        self.max_batch_size = max_batch_size
        self.name = name
        self.state = BatchState.ACCEPTING

        self._futures: dict[Hashable, asyncio.Future] = {}
        self._scheduled = False
        self._task: asyncio.Task | None = None
        self.log = get_loader_logger(name)

    def load(self, key: Hashable) -> asyncio.Future:
        """Register a key and return the future its value will resolve.

        Duplicate keys share one future. The first key schedules dispatch
        for the next loop iteration.
        """
        if self.state is BatchState.DISPATCHED:
            raise LoaderClosedError(f"{self.name}: batch already dispatched")

        future = self._futures.get(key)
        if future is not None:
            return future

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._futures[key] = future

        if not self._scheduled:
            self._scheduled = True
            loop.call_soon(self._schedule_dispatch)
        return future

    def _schedule_dispatch(self) -> None:
        if self.state is BatchState.ACCEPTING:
            self._task = asyncio.ensure_future(self.dispatch())

    async def dispatch(self) -> None:
        """Run the batch function over every accepted key."""
        if self.state is BatchState.DISPATCHED:
            return
        self.state = BatchState.DISPATCHED

        keys = list(self._futures)
        self.log.debug("batch_dispatched", keys=len(keys))

        for start in range(0, len(keys), self.max_batch_size):
            chunk = keys[start : start + self.max_batch_size]
            try:
                values = list(await self.batch_fn(chunk))
            except Exception as e:
                self.log.error("batch_failed", keys=len(chunk), error=str(e))
                self._fail(chunk, e)
                continue

            if len(values) != len(chunk):
                self._fail(
                    chunk,
                    BatchLoadError(
                        f"{self.name}: batch function returned {len(values)} "
                        f"values for {len(chunk)} keys"
                    ),
                )
                continue

            for key, value in zip(chunk, values):
                future = self._futures[key]
                if not future.done():
                    future.set_result(value)

    def _fail(self, keys: list[Hashable], error: BaseException) -> None:
        for key in keys:
            future = self._futures[key]
            if not future.done():
                future.set_exception(error)

    def __len__(self) -> int:
        return len(self._futures)


class DataLoader:
    """Request-scoped batching loader with a local memo.

    Must be constructed per request: the memo would otherwise leak values
    between unrelated callers.
    """

    def __init__(
        self,
        batch_fn: BatchFn,
        *,
        name: str = "loader",
        max_batch_size: int = 100,
        cache_key_fn: Callable[[Any], Hashable] | None = None,
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.batch_fn = batch_fn
        self.name = name
        self.max_batch_size = max_batch_size
        self.cache_key_fn = cache_key_fn or (lambda key: key)
        self.ttl = ttl
        self._clock = clock

        self._memo: dict[Hashable, CacheEntry] = {}
        self._batch: BatchLoader | None = None
        self.log = get_loader_logger(name)

    def _current_batch(self) -> BatchLoader:
        if self._batch is None or self._batch.state is not BatchState.ACCEPTING:
            self._batch = BatchLoader(self.batch_fn, self.max_batch_size, self.name)
        return self._batch

    def _resolve(self, key: Any) -> Any:
        """Return a memoized value or a pending future for ``key``."""
        cache_key = self.cache_key_fn(key)
        now = self._clock()

        entry = self._memo.get(cache_key)
        if entry is not None and entry.is_fresh(now):
            return entry.value

        future = self._current_batch().load(cache_key)
        self._memo[cache_key] = CacheEntry(future, now, self.ttl)
        future.add_done_callback(lambda f, k=cache_key: self._forget_failed(k, f))
        return future

    def _forget_failed(self, cache_key: Hashable, future: asyncio.Future) -> None:
        if future.cancelled() or future.exception() is not None:
            entry = self._memo.get(cache_key)
            if entry is not None and entry.value is future:
                del self._memo[cache_key]

    async def load(self, key: Any) -> Any:
        pending = self._resolve(key)
        if isinstance(pending, asyncio.Future):
            return await pending
        return pending

    async def load_many(self, keys: Sequence[Any]) -> list[Any]:
        """Load several keys; output length and order match the input.

        Every key is registered before the first await so all misses land
        in the same batch.
        """
        pending = [self._resolve(key) for key in keys]
        results = []
        for item in pending:
            if isinstance(item, asyncio.Future):
                item = await item
            results.append(item)
        return results

    def prime(self, key: Any, value: Any) -> None:
        """Seed the memo; an existing entry for the key is kept."""
        cache_key = self.cache_key_fn(key)
        if cache_key not in self._memo:
            self._memo[cache_key] = CacheEntry(value, self._clock(), self.ttl)

    def clear(self, key: Any = None) -> None:
        if key is None:
            self._memo.clear()
        else:
            self._memo.pop(self.cache_key_fn(key), None)
