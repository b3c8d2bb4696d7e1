"""Redis-backed distributed cache client.

Keys are shared with the external price updater, which writes plain
strings (``"2.5"``), so scalars are stored as their string form and only
structured values (rows, mappings) are JSON-encoded. Numeric text is
returned exactly as stored.

Every Redis failure is converted to a miss and recorded on the circuit
breaker. A value that cannot be decoded is a miss for that key only.
"""

import asyncio
import json
from decimal import Decimal
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from dex_data.config.state import RedisConfig
from dex_data.infrastructure.cache.circuit_breaker import CircuitBreaker
from dex_data.infrastructure.observability import get_cache_logger
from dex_data.shared.errors import CacheUnavailableError

_FAILURES = (RedisError, OSError, asyncio.TimeoutError)

_UNDECODABLE = object()


def _decode(raw: str | bytes | None) -> Any:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return _UNDECODABLE
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    # bool is an int subclass but "true" is not numeric text
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return raw
    return value


def _encode(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return json.dumps(value, default=str)


class RedisCache:
    """ICacheClient over redis.asyncio with fail-open semantics."""

    def __init__(
        self,
        client: redis.Redis,
        breaker: CircuitBreaker | None = None,
    ):
        self._client = client
        self.breaker = breaker or CircuitBreaker()
        self.log = get_cache_logger("redis-cache")

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisCache":
        # bytes in, decoded per value so one bad entry cannot fail a whole MGET
        client = redis.Redis.from_url(
            config.redis_url,
            socket_timeout=config.socket_timeout,
            decode_responses=False,
        )
        return cls(client, CircuitBreaker(config.circuit_breaker))

    def _guard(self) -> None:
        if not self.breaker.can_request():
            raise CacheUnavailableError("circuit open")

    def _value(self, key: str, raw: str | bytes | None) -> Any | None:
        value = _decode(raw)
        if value is _UNDECODABLE:
            self.log.warning("cache_value_undecodable", key=key)
            return None
        return value

    async def get(self, key: str) -> Any | None:
        try:
            self._guard()
            raw = await self._client.get(key)
        except CacheUnavailableError:
            return None
        except _FAILURES as e:
            self.breaker.record_failure(e)
            self.log.warning("cache_get_failed", key=key, error=str(e))
            return None

        self.breaker.record_success()
        return self._value(key, raw)

    async def bulk_get(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}
        try:
            self._guard()
            values = await self._client.mget(keys)
        except CacheUnavailableError:
            return {}
        except _FAILURES as e:
            self.breaker.record_failure(e)
            self.log.warning("cache_bulk_get_failed", keys=len(keys), error=str(e))
            return {}

        self.breaker.record_success()
        hits = {}
        for key, raw in zip(keys, values):
            value = self._value(key, raw)
            if value is not None:
                hits[key] = value
        return hits

    async def set(self, key: str, value: Any, ttl: int) -> None:
        try:
            payload = _encode(value)
        except (TypeError, ValueError) as e:
            self.log.warning("cache_value_unencodable", key=key, error=str(e))
            return

        try:
            self._guard()
            await self._client.set(key, payload, ex=ttl)
        except CacheUnavailableError:
            return
        except _FAILURES as e:
            self.breaker.record_failure(e)
            self.log.warning("cache_set_failed", key=key, error=str(e))
            return

        self.breaker.record_success()

    async def close(self) -> None:
        await self._client.aclose()
