"""
Database adapter interfaces and implementations.
Provides abstraction over the indexer store for dependency injection.

The data access layer only ever needs one primitive from the store:
execute a fully formed parameterized statement and return its rows.
Parameters are bound by position ($1, $2, ...), so callers must hand
over the parameter vector in the exact order placeholders were emitted.
"""

import time
from typing import Any, Protocol

import asyncpg

from dex_data.config.state import DatabaseConfig
from dex_data.infrastructure.observability import get_database_logger

Row = dict[str, Any]


class IDatabaseAdapter(Protocol):
    """
    Protocol defining the store execution primitive.
    Enables dependency injection and testing with different implementations.
    """

    async def execute(self, statement: str, params: list[Any] | None = None) -> list[Row]:
        """
        Execute a parameterized statement.

        Args:
            statement: SQL text using $n placeholders
            params: Positional bind values

        Returns:
            Rows as dictionaries keyed by column name
        """
        ...


class DatabaseAdapter:
    """
    asyncpg pool-backed implementation of IDatabaseAdapter.

    The pool is shared across requests; every call acquires a connection
    for the duration of a single statement. Timeouts are enforced by the
    server-side statement_timeout, not by this layer.
    """

    def __init__(self, config: DatabaseConfig):
        """
        Initialize adapter.

        Args:
            config: Database section of ConfigState
        """
        self.config = config
        self._pool: asyncpg.Pool | None = None
        self.log = get_database_logger(schema=config.schema_name)

    async def connect(self) -> None:
        """Open the connection pool with search_path set to the indexer schema."""
        if self._pool is not None:
            return

        self._pool = await asyncpg.create_pool(
            dsn=self.config.url,
            min_size=self.config.min_pool_size,
            max_size=self.config.max_pool_size,
            ssl=self.config.ssl,
            server_settings={
                "search_path": self.config.schema_name,
                "statement_timeout": str(self.config.statement_timeout),
            },
        )
        self.log.info(
            "pool_opened",
            min_size=self.config.min_pool_size,
            max_size=self.config.max_pool_size,
        )

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        self.log.info("pool_closed")

    async def execute(self, statement: str, params: list[Any] | None = None) -> list[Row]:
        """Execute a statement and return all rows as dictionaries."""
        if not self._pool:
            raise RuntimeError("Database not connected")

        started = time.perf_counter()
        async with self._pool.acquire() as conn:
            try:
                records = await conn.fetch(statement, *(params or []))
            except asyncpg.PostgresError as e:
                self.log.error("statement_failed", error=str(e), statement=statement)
                raise

        self.log.debug(
            "statement_executed",
            rows=len(records),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return [dict(record) for record in records]

    @property
    def pool(self) -> asyncpg.Pool | None:
        """Access underlying connection pool."""
        return self._pool
