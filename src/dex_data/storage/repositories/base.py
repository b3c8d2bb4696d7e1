"""Generic entity adapter over one indexer table.

Exposes the ORM-shaped read surface the API resolvers were written
against (find_first / find_many / count) and translates every call into a
single parameterized statement. Relation slots named in ``include`` are
filled afterwards by the RelationResolver.

Statement shape:
    SELECT <select> FROM <table> <where> <order> <limit> <offset>
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any, ClassVar

from dex_data.infrastructure.database.ports import IDatabaseAdapter, Row
from dex_data.infrastructure.observability import get_storage_logger
from dex_data.shared.errors import QueryDescriptorError
from dex_data.shared.models.enums import EntityKind, SortDirection
from dex_data.storage.query import (
    InList,
    OrderTerm,
    ParameterSequence,
    QueryDescriptor,
    StatementBuilder,
    parse_descriptor,
)
from dex_data.storage.relations import Relation, RelationResolver

QueryParams = Mapping[str, Any] | QueryDescriptor | None


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _identity(value: Any) -> Any:
    return value


class EntityAdapter:
    """Read adapter for one table.

    Subclasses declare the table, the cursor column and the relation
    slots. The cursor column must be monotonically comparable so that
    ``col > last_seen`` selects exactly the rows after the previous page.
    """

    kind: ClassVar[EntityKind]
    table: ClassVar[str]
    cursor_field: ClassVar[str | None] = "id"
    relations: ClassVar[tuple[Relation, ...]] = ()
    default_order: ClassVar[tuple[OrderTerm, ...]] = ()

    def __init__(
        self,
        db: IDatabaseAdapter,
        builder: StatementBuilder | None = None,
        resolver: RelationResolver | None = None,
    ):
        self.db = db
        self.builder = builder or StatementBuilder()
        self.resolver = resolver
        self.log = get_storage_logger(f"{self.table}-adapter", table=self.table)

    # ------------------------------------------------------------------
    # Public read surface
    # ------------------------------------------------------------------
    async def find_many(self, params: QueryParams = None) -> list[Row]:
        descriptor = parse_descriptor(params, self.cursor_field)
        relations = self._requested_relations(descriptor.include)
        descriptor = self._with_relation_fields(descriptor, relations)

        compiled = self.builder.build(descriptor, self.cursor_field, self.default_order)
        rows = await self._execute(compiled.statement(self.table), compiled.params)

        if relations:
            if self.resolver is None:
                raise QueryDescriptorError(
                    f"{self.table} adapter has no relation resolver configured"
                )
            rows = await self.resolver.attach(rows, relations)
        return rows

    async def find_first(self, params: QueryParams = None) -> Row | None:
        """find_many with LIMIT 1; skip, cursor and take are ignored."""
        descriptor = parse_descriptor(params, self.cursor_field)
        descriptor = dataclasses.replace(descriptor, take=1, skip=None, cursor=None)
        rows = await self.find_many(descriptor)
        return rows[0] if rows else None

    async def count(self, params: QueryParams = None) -> int:
        descriptor = parse_descriptor(params, self.cursor_field)
        where_sql, values = self.builder.build_where(descriptor)
        statement = " ".join(
            p
            for p in (
                "SELECT CAST(COUNT(*) AS INTEGER) AS count",
                f"FROM {self.table}",
                where_sql,
            )
            if p
        )
        rows = await self._execute(statement, values)
        return int(rows[0]["count"]) if rows else 0

    async def find_unique_by(self, field: str, value: Any) -> Row | None:
        return await self.find_first({"where": {field: value}})

    async def latest_per_key(
        self,
        key_field: str,
        keys: Iterable[Any],
        order_field: str = "timestamp",
    ) -> list[Row]:
        """Most recent row per key in one DISTINCT ON statement.

        Rows for keys with no record are simply absent.
        """
        keys = list(keys)
        if not keys:
            return []

        params = ParameterSequence()
        key_column = self.builder.column(key_field)
        order_column = self.builder.column(order_field)
        condition = self.builder.where(InList(key_field, tuple(keys)), params)

        statement = (
            f"SELECT DISTINCT ON ({key_column}) * FROM {self.table} "
            f"WHERE {condition} "
            f"ORDER BY {key_column}, {order_column} DESC NULLS LAST"
        )
        return await self._execute(statement, params.values)

    def key_normalizer(self, field: str) -> Callable[[Any], Any]:
        """Comparison key matching the builder's case rules for ``field``."""
        if self.builder.rules.applies_to(self.builder.column(field)):
            return _lower
        return _identity

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _requested_relations(self, names: tuple[str, ...]) -> list[Relation]:
        if not names:
            return []
        available = {rel.name: rel for rel in self.relations}
        unknown = [name for name in names if name not in available]
        if unknown:
            raise QueryDescriptorError(
                f"Unknown relation(s) for {self.table}: {', '.join(unknown)}"
            )
        return [available[name] for name in names]

    def _with_relation_fields(
        self, descriptor: QueryDescriptor, relations: list[Relation]
    ) -> QueryDescriptor:
        # A projection must still carry the foreign keys relations resolve through
        if descriptor.select is None or not relations:
            return descriptor
        missing = tuple(
            rel.local_field for rel in relations if rel.local_field not in descriptor.select
        )
        if not missing:
            return descriptor
        return dataclasses.replace(descriptor, select=descriptor.select + missing)

    async def _execute(self, statement: str, params: list[Any]) -> list[Row]:
        started = time.perf_counter()
        self.log.debug("statement_built", statement=statement, params=len(params))
        try:
            rows = await self.db.execute(statement, params)
        except Exception as e:
            self.log.error("query_failed", error=str(e), statement=statement)
            raise

        self.log.debug(
            "rows_fetched",
            rows=len(rows),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return [self.builder.translator.row_to_fields(row) for row in rows]


def newest_first(field: str = "timestamp") -> tuple[OrderTerm, ...]:
    return (OrderTerm(field, SortDirection.DESC),)
