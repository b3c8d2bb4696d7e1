"""
Testes dos clientes de cache: Redis (fail-open) e memória (TTL).
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from dex_data.config import CircuitBreakerConfig, RedisConfig
from dex_data.infrastructure.cache import CircuitBreaker, CircuitState, InMemoryCache, RedisCache


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.mget = AsyncMock(return_value=[])
    client.set = AsyncMock()
    client.aclose = AsyncMock()
    return client


class TestRedisCache:
    @pytest.mark.asyncio
    async def test_get_decodes_json_and_plain_strings(self, redis_client):
        cache = RedisCache(redis_client)

        redis_client.get.return_value = json.dumps({"reserveUSD": "10"})
        assert await cache.get("k") == {"reserveUSD": "10"}

        redis_client.get.return_value = "not-json"
        assert await cache.get("k") == "not-json"

    @pytest.mark.asyncio
    async def test_bulk_get_returns_hits_only(self, redis_client):
        redis_client.mget.return_value = ['"5000"', None, "1.25"]
        cache = RedisCache(redis_client)

        hits = await cache.bulk_get(["a", "b", "c"])

        assert hits == {"a": "5000", "c": "1.25"}
        redis_client.mget.assert_awaited_once_with(["a", "b", "c"])

    @pytest.mark.asyncio
    async def test_bulk_get_without_keys_skips_redis(self, redis_client):
        assert await RedisCache(redis_client).bulk_get([]) == {}
        redis_client.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_writes_scalars_as_plain_text(self, redis_client):
        cache = RedisCache(redis_client)
        await cache.set("token:t1:priceUSD", "1.0", ttl=10)
        await cache.set("token:t2:priceUSD", Decimal("2.50"), ttl=10)

        assert redis_client.set.await_args_list[0].args == ("token:t1:priceUSD", "1.0")
        assert redis_client.set.await_args_list[0].kwargs == {"ex": 10}
        assert redis_client.set.await_args_list[1].args == ("token:t2:priceUSD", "2.50")

    @pytest.mark.asyncio
    async def test_set_json_encodes_rows(self, redis_client):
        row = {"id": "t1", "decimals": 6, "priceUSD": Decimal("1")}
        await RedisCache(redis_client).set("token:t1", row, ttl=300)

        payload = redis_client.set.await_args.args[1]
        assert json.loads(payload) == {"id": "t1", "decimals": 6, "priceUSD": "1"}

    @pytest.mark.asyncio
    async def test_unencodable_value_is_skipped(self, redis_client):
        row = {}
        row["self"] = row

        await RedisCache(redis_client).set("k", row, ttl=5)

        redis_client.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_undecodable_bytes_are_misses(self, redis_client):
        redis_client.mget.return_value = [b"\xff", b'"7"', b"3.10"]
        redis_client.get.return_value = b"\xfe\xff"
        cache = RedisCache(redis_client)

        assert await cache.bulk_get(["bad", "ok", "num"]) == {"ok": "7", "num": "3.10"}
        assert await cache.get("bad") is None
        assert cache.breaker.state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_failures_are_misses_and_open_the_circuit(self, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")
        redis_client.mget.side_effect = RedisConnectionError("refused")
        breaker = CircuitBreaker(CircuitBreakerConfig(failure_threshold=2))
        cache = RedisCache(redis_client, breaker)

        assert await cache.get("k") is None
        assert await cache.bulk_get(["k"]) == {}
        assert breaker.state is CircuitState.OPEN

        redis_client.get.reset_mock()
        assert await cache.get("k") is None
        redis_client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_failure_does_not_raise(self, redis_client):
        redis_client.set.side_effect = TimeoutError()

        await RedisCache(redis_client).set("k", 1, ttl=5)

    @pytest.mark.asyncio
    async def test_from_config_and_close(self):
        config = RedisConfig(redis_url="redis://cache:6379/1")
        with patch("dex_data.infrastructure.cache.redis_cache.redis.Redis.from_url") as from_url:
            from_url.return_value.aclose = AsyncMock()
            cache = RedisCache.from_config(config)
            await cache.close()

        from_url.assert_called_once_with(
            "redis://cache:6379/1", socket_timeout=2.0, decode_responses=False
        )
        from_url.return_value.aclose.assert_awaited_once()


class TestInMemoryCache:
    @pytest.mark.asyncio
    async def test_entries_expire(self):
        now = [0.0]
        cache = InMemoryCache(clock=lambda: now[0])
        await cache.set("a", 1, ttl=10)

        assert await cache.get("a") == 1
        now[0] = 10.0
        assert await cache.get("a") is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_bulk_get(self):
        cache = InMemoryCache()
        await cache.set("a", 0, ttl=10)

        assert await cache.bulk_get(["a", "b"]) == {"a": 0}
