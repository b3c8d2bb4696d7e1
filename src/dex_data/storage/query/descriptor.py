"""Query descriptors: parsing ORM-shaped request mappings into an AST.

A descriptor looks like::

    {
        "where": {
            "OR": [{"symbol": "USDT"}, {"symbol": "USDC"}],
            "name": {"contains": "tether", "mode": "insensitive"},
        },
        "select": {"id": True, "symbol": True},
        "orderBy": [{"volumeUSD24h": "desc"}, {"symbol": "asc"}],
        "take": 20,
        "cursor": {"id": "0xabc"},
        "include": {"token0": True},
    }

All "what does this shape mean" decisions happen here, once, so the
statement builder only ever walks a closed set of node types. Field
names stay in the caller's convention; the builder translates them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from dex_data.shared.errors import QueryDescriptorError
from dex_data.shared.models.enums import SortDirection

OR_KEY = "OR"
AND_KEY = "AND"

COMPARISON_OPERATORS = {"gte": ">=", "lte": "<=", "gt": ">", "lt": "<"}

# Emission order for several operators inside one field mapping
OPERATOR_ORDER = ("equals", "gte", "lte", "gt", "lt", "in", "notIn", "contains")
MODIFIER_KEYS = {"mode", "caseInsensitive"}


# =============================================================================
# AST NODES
# =============================================================================


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class IsNull:
    field: str


@dataclass(frozen=True)
class Compare:
    field: str
    operator: str  # one of >=, <=, >, <
    value: Any


@dataclass(frozen=True)
class InList:
    field: str
    values: tuple[Any, ...]
    negated: bool = False


@dataclass(frozen=True)
class Contains:
    field: str
    value: str
    case_insensitive: bool = False


@dataclass(frozen=True)
class And:
    children: tuple[Predicate, ...] = ()


@dataclass(frozen=True)
class Or:
    children: tuple[Predicate, ...] = ()


Predicate = Union[Equals, IsNull, Compare, InList, Contains, And, Or]


@dataclass(frozen=True)
class OrderTerm:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class QueryDescriptor:
    """Validated, immutable form of a request descriptor."""

    where: And = field(default_factory=And)
    select: tuple[str, ...] | None = None
    order_by: tuple[OrderTerm, ...] = ()
    take: int | None = None
    skip: int | None = None
    cursor: Any = None
    include: tuple[str, ...] = ()

    @property
    def has_cursor(self) -> bool:
        return self.cursor is not None


# =============================================================================
# PARSING
# =============================================================================


def parse_where(where: Mapping[str, Any] | None) -> And:
    """Parse a where mapping into a conjunction.

    An empty or absent mapping yields an empty conjunction, which matches
    every row.
    """
    if not where:
        return And()
    if not isinstance(where, Mapping):
        raise QueryDescriptorError(f"where must be a mapping, got {type(where).__name__}")

    children: list[Predicate] = []
    for key, value in where.items():
        if key == OR_KEY:
            children.append(_parse_or(value))
        elif key == AND_KEY:
            for branch in _as_branch_list(key, value):
                children.extend(parse_where(branch).children)
        else:
            children.extend(_parse_field(key, value))
    return And(tuple(children))


def _as_branch_list(key: str, value: Any) -> list[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise QueryDescriptorError(f"{key} expects a list of where mappings")
    return list(value)


def _parse_or(value: Any) -> Or:
    if isinstance(value, Mapping):
        raise QueryDescriptorError(f"{OR_KEY} expects a list of where mappings")
    branches = []
    for branch in _as_branch_list(OR_KEY, value):
        parsed = parse_where(branch)
        if parsed.children:
            branches.append(parsed)
    return Or(tuple(branches))


def _parse_field(name: str, value: Any) -> list[Predicate]:
    if value is None:
        return [IsNull(name)]
    if not isinstance(value, Mapping):
        return [Equals(name, value)]

    unknown = set(value) - set(OPERATOR_ORDER) - MODIFIER_KEYS
    if unknown:
        raise QueryDescriptorError(
            f"Unsupported operator(s) for {name}: {', '.join(sorted(unknown))}"
        )

    insensitive = value.get("mode") == "insensitive" or bool(value.get("caseInsensitive"))
    predicates: list[Predicate] = []
    for op in OPERATOR_ORDER:
        if op not in value or value[op] is None:
            continue
        operand = value[op]
        if op == "equals":
            predicates.append(Equals(name, operand))
        elif op in COMPARISON_OPERATORS:
            predicates.append(Compare(name, COMPARISON_OPERATORS[op], operand))
        elif op in ("in", "notIn"):
            if isinstance(operand, (str, bytes)) or not hasattr(operand, "__iter__"):
                raise QueryDescriptorError(f"{op} for {name} expects a list")
            predicates.append(InList(name, tuple(operand), negated=op == "notIn"))
        else:
            predicates.append(Contains(name, str(operand), case_insensitive=insensitive))

    if not predicates:
        raise QueryDescriptorError(f"No operator given for {name}")
    return predicates


def parse_order_by(order_by: Any) -> tuple[OrderTerm, ...]:
    """Parse one ordering mapping or a list of them.

    Accepts ``{"field": "desc"}`` and ``{"field": "x", "direction": "desc"}``.
    """
    if not order_by:
        return ()
    items = order_by if isinstance(order_by, (list, tuple)) else [order_by]

    terms = []
    for item in items:
        if not isinstance(item, Mapping) or not item:
            raise QueryDescriptorError(f"Invalid orderBy entry: {item!r}")
        if "field" in item:
            name, direction = item["field"], item.get("direction", "asc")
        elif len(item) == 1:
            ((name, direction),) = item.items()
        else:
            raise QueryDescriptorError(
                f"orderBy entries must name exactly one field: {item!r}"
            )
        try:
            terms.append(OrderTerm(name, SortDirection.parse(direction)))
        except ValueError:
            raise QueryDescriptorError(
                f"Invalid sort direction for {name}: {direction!r}"
            ) from None
    return tuple(terms)


def parse_select(select: Any) -> tuple[str, ...] | None:
    if not select:
        return None
    if isinstance(select, Mapping):
        fields = tuple(name for name, wanted in select.items() if wanted)
    elif isinstance(select, (list, tuple)):
        fields = tuple(select)
    else:
        raise QueryDescriptorError(f"Invalid select: {select!r}")
    return fields or None


def parse_include(include: Any) -> tuple[str, ...]:
    """Relation names requested for one-level attachment.

    Nested include mappings are accepted but their own ``include`` is
    ignored.
    """
    if not include:
        return ()
    if isinstance(include, Mapping):
        return tuple(name for name, wanted in include.items() if wanted)
    if isinstance(include, (list, tuple)):
        return tuple(include)
    raise QueryDescriptorError(f"Invalid include: {include!r}")


def _parse_bound(name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QueryDescriptorError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def parse_descriptor(
    params: Mapping[str, Any] | QueryDescriptor | None,
    cursor_field: str | None = None,
) -> QueryDescriptor:
    """Validate a request mapping and return its QueryDescriptor.

    Args:
        params: ORM-shaped request mapping (or an already parsed descriptor)
        cursor_field: Field whose value is read from ``cursor``
    """
    if isinstance(params, QueryDescriptor):
        return params
    params = params or {}

    cursor = params.get("cursor")
    cursor_value = None
    if cursor is not None:
        if isinstance(cursor, Mapping):
            if cursor_field is None:
                raise QueryDescriptorError("This entity does not support cursor pagination")
            cursor_value = cursor.get(cursor_field)
        else:
            cursor_value = cursor

    return QueryDescriptor(
        where=parse_where(params.get("where")),
        select=parse_select(params.get("select")),
        order_by=parse_order_by(params.get("orderBy")),
        take=_parse_bound("take", params.get("take")),
        skip=_parse_bound("skip", params.get("skip")),
        cursor=cursor_value,
        include=parse_include(params.get("include")),
    )
