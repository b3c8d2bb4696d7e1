"""Statement building: predicates, projection, ordering and paging.

Turns a QueryDescriptor into SQL fragments plus a positional parameter
vector for a PostgreSQL driver that binds ``$1, $2, ...`` by position.
Placeholders are numbered in the exact order conditions are emitted,
the cursor predicate always taking the last slot.

Column names come from the IdentifierTranslator and are interpolated
into the statement text; values never are.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from dex_data.storage.query.descriptor import (
    And,
    Compare,
    Contains,
    Equals,
    InList,
    IsNull,
    Or,
    OrderTerm,
    Predicate,
    QueryDescriptor,
)
from dex_data.storage.query.naming import IdentifierTranslator


@dataclass(frozen=True)
class CaseInsensitiveRules:
    """Columns compared with LOWER() on both sides.

    The default set is the indexer's hex-address columns: ``address``
    itself and anything ending in ``_address``.
    """

    columns: frozenset[str] = frozenset({"address"})
    suffixes: tuple[str, ...] = ("_address",)

    def applies_to(self, column: str) -> bool:
        return column in self.columns or any(column.endswith(s) for s in self.suffixes)


class ParameterSequence:
    """Positional bind vector that hands out sequential placeholders."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class CompiledQuery:
    """SQL fragments for one read plus the parameters they reference."""

    select_sql: str = "*"
    where_sql: str = ""
    order_sql: str = ""
    limit_sql: str = ""
    offset_sql: str = ""
    params: list[Any] = field(default_factory=list)

    def statement(self, table: str) -> str:
        parts = [f"SELECT {self.select_sql}", f"FROM {table}"]
        parts += [p for p in (self.where_sql, self.order_sql, self.limit_sql, self.offset_sql) if p]
        return " ".join(parts)


class StatementBuilder:
    """Builds SQL fragments from parsed descriptors.

    Precondition for cursor pagination: the cursor column is monotonically
    comparable, i.e. ``col > last_seen`` selects exactly the rows after the
    previous page. Adapters declare which column that is.
    """

    def __init__(
        self,
        translator: IdentifierTranslator | None = None,
        rules: CaseInsensitiveRules | None = None,
    ):
        self.translator = translator or IdentifierTranslator()
        self.rules = rules or CaseInsensitiveRules()

    def column(self, field_name: str) -> str:
        return self.translator.to_column(field_name)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------
    def where(self, node: Predicate, params: ParameterSequence) -> str:
        """Render a predicate without the WHERE keyword ("" matches all)."""
        if isinstance(node, And):
            parts = [self.where(child, params) for child in node.children]
            return " AND ".join(p for p in parts if p)

        if isinstance(node, Or):
            branches = []
            for child in node.children:
                rendered = self.where(child, params)
                if not rendered:
                    continue
                if isinstance(child, And) and len(child.children) > 1:
                    rendered = f"({rendered})"
                branches.append(rendered)
            if not branches:
                return ""
            return f"({' OR '.join(branches)})"

        column = self.column(node.field)

        if isinstance(node, Equals):
            placeholder = params.add(node.value)
            if self.rules.applies_to(column):
                return f"LOWER({column}) = LOWER({placeholder})"
            return f"{column} = {placeholder}"

        if isinstance(node, IsNull):
            return f"{column} IS NULL"

        if isinstance(node, Compare):
            return f"{column} {node.operator} {params.add(node.value)}"

        if isinstance(node, InList):
            if not node.values:
                return "1 = 1" if node.negated else "1 = 0"
            keyword = "NOT IN" if node.negated else "IN"
            if self.rules.applies_to(column):
                placeholders = ", ".join(f"LOWER({params.add(v)})" for v in node.values)
                return f"LOWER({column}) {keyword} ({placeholders})"
            placeholders = ", ".join(params.add(v) for v in node.values)
            return f"{column} {keyword} ({placeholders})"

        if isinstance(node, Contains):
            placeholder = params.add(f"%{node.value}%")
            if node.case_insensitive:
                return f"LOWER({column}) LIKE LOWER({placeholder})"
            return f"{column} LIKE {placeholder}"

        raise TypeError(f"Unknown predicate node: {node!r}")

    # ------------------------------------------------------------------
    # Projection / ordering
    # ------------------------------------------------------------------
    def select(self, fields: Iterable[str] | None) -> str:
        if not fields:
            return "*"
        return ", ".join(self.column(f) for f in fields)

    def order_by(self, terms: Iterable[OrderTerm]) -> str:
        clauses = [
            f"{self.column(t.field)} {t.direction.value.upper()} NULLS LAST" for t in terms
        ]
        return f"ORDER BY {', '.join(clauses)}" if clauses else ""

    # ------------------------------------------------------------------
    # Full read
    # ------------------------------------------------------------------
    def build(
        self,
        descriptor: QueryDescriptor,
        cursor_field: str | None = None,
        default_order: tuple[OrderTerm, ...] = (),
    ) -> CompiledQuery:
        params = ParameterSequence()
        conditions = self.where(descriptor.where, params)

        if descriptor.has_cursor and cursor_field:
            cursor_condition = f"{self.column(cursor_field)} > {params.add(descriptor.cursor)}"
            conditions = f"{conditions} AND {cursor_condition}" if conditions else cursor_condition

        return CompiledQuery(
            select_sql=self.select(descriptor.select),
            where_sql=f"WHERE {conditions}" if conditions else "",
            order_sql=self.order_by(descriptor.order_by or default_order),
            limit_sql=f"LIMIT {int(descriptor.take)}" if descriptor.take is not None else "",
            offset_sql=f"OFFSET {int(descriptor.skip)}" if descriptor.skip else "",
            params=params.values,
        )

    def build_where(self, descriptor: QueryDescriptor) -> tuple[str, list[Any]]:
        """Return the WHERE fragment and its parameters only (used by count)."""
        params = ParameterSequence()
        conditions = self.where(descriptor.where, params)
        return (f"WHERE {conditions}" if conditions else ""), params.values
