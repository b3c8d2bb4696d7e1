"""
Testes do DatabaseAdapter (asyncpg) com pool mockado.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

from dex_data.config import DatabaseConfig
from dex_data.infrastructure.database import DatabaseAdapter


@pytest.fixture
def config():
    return DatabaseConfig(url="postgresql://ponder:pw@db:5432/ponder", schema_name="ponder_v2")


def mock_pool(conn):
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    pool.close = AsyncMock()
    return pool


class TestDatabaseAdapter:
    @pytest.mark.asyncio
    async def test_connect_sets_search_path(self, config):
        with patch(
            "dex_data.infrastructure.database.ports.asyncpg.create_pool",
            new=AsyncMock(return_value=mock_pool(AsyncMock())),
        ) as create_pool:
            adapter = DatabaseAdapter(config)
            await adapter.connect()
            await adapter.connect()

        create_pool.assert_awaited_once()
        kwargs = create_pool.await_args.kwargs
        assert kwargs["server_settings"]["search_path"] == "ponder_v2"
        assert kwargs["server_settings"]["statement_timeout"] == "30000"

    @pytest.mark.asyncio
    async def test_execute_binds_positionally(self, config):
        conn = AsyncMock()
        conn.fetch.return_value = [{"id": "t1", "symbol": "USDT"}]
        adapter = DatabaseAdapter(config)
        adapter._pool = mock_pool(conn)

        rows = await adapter.execute("SELECT * FROM token WHERE id = $1", ["t1"])

        conn.fetch.assert_awaited_once_with("SELECT * FROM token WHERE id = $1", "t1")
        assert rows == [{"id": "t1", "symbol": "USDT"}]

    @pytest.mark.asyncio
    async def test_execute_reraises_postgres_errors(self, config):
        conn = AsyncMock()
        conn.fetch.side_effect = asyncpg.PostgresError("syntax error")
        adapter = DatabaseAdapter(config)
        adapter._pool = mock_pool(conn)

        with pytest.raises(asyncpg.PostgresError):
            await adapter.execute("SELECT nope")

    @pytest.mark.asyncio
    async def test_execute_requires_connection(self, config):
        with pytest.raises(RuntimeError, match="not connected"):
            await DatabaseAdapter(config).execute("SELECT 1")

    @pytest.mark.asyncio
    async def test_disconnect_closes_pool(self, config):
        adapter = DatabaseAdapter(config)
        pool = mock_pool(AsyncMock())
        adapter._pool = pool

        await adapter.disconnect()

        pool.close.assert_awaited_once()
        assert adapter.pool is None
