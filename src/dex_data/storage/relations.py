"""Relation resolution: one-level foreign-key attachment.

After an adapter fetches its primary rows, each requested relation slot
is filled by looking up the target entity through a foreign-key-shaped
field already present on the row (``pair.token0Address`` ->
``token.address``). Only one level is resolved; a nested ``include``
inside an ``include`` is ignored.

Three strategies produce identical rows and differ only in latency:

    SEQUENTIAL  one find_first per row per slot, awaited in order
    CONCURRENT  the same lookups, gathered
    BATCHED     distinct keys per slot collected across all rows, one
                find_many with IN per slot, results scattered back
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dex_data.infrastructure.observability import get_storage_logger
from dex_data.shared.models.enums import EntityKind, RelationMode

if TYPE_CHECKING:
    from dex_data.storage.repositories.base import EntityAdapter

Row = dict[str, Any]


@dataclass(frozen=True)
class Relation:
    """A relation slot declared by an entity adapter.

    Attributes:
        name: Field the related row is attached under (e.g. "token0")
        local_field: Field on the primary row holding the key
        target: Entity kind to look up
        target_field: Field on the target matched against the key
    """

    name: str
    local_field: str
    target: EntityKind
    target_field: str = "address"


class RelationResolver:
    """Attaches related rows to freshly fetched primary rows."""

    def __init__(
        self,
        lookup: Callable[[EntityKind], EntityAdapter],
        mode: RelationMode = RelationMode.SEQUENTIAL,
    ):
        self._lookup = lookup
        self.mode = mode
        self.log = get_storage_logger("relation-resolver", mode=mode.value)

    async def attach(self, rows: Sequence[Row], relations: Sequence[Relation]) -> list[Row]:
        """Return new rows with every requested relation slot filled.

        A row whose key is None gets None for that slot. Input rows are
        never mutated.
        """
        if not rows or not relations:
            return [dict(row) for row in rows]

        if self.mode == RelationMode.BATCHED:
            return await self._attach_batched(rows, relations)
        if self.mode == RelationMode.CONCURRENT:
            return list(
                await asyncio.gather(*(self._attach_row(row, relations, True) for row in rows))
            )

        resolved = []
        for row in rows:
            resolved.append(await self._attach_row(row, relations, False))
        return resolved

    async def _lookup_one(self, relation: Relation, key: Any) -> Row | None:
        if key is None:
            return None
        target = self._lookup(relation.target)
        return await target.find_first({"where": {relation.target_field: key}})

    async def _attach_row(
        self, row: Row, relations: Sequence[Relation], concurrent: bool
    ) -> Row:
        result = dict(row)
        if concurrent:
            related = await asyncio.gather(
                *(self._lookup_one(rel, row.get(rel.local_field)) for rel in relations)
            )
            for rel, value in zip(relations, related):
                result[rel.name] = value
        else:
            for rel in relations:
                result[rel.name] = await self._lookup_one(rel, row.get(rel.local_field))
        return result

    async def _attach_batched(
        self, rows: Sequence[Row], relations: Sequence[Relation]
    ) -> list[Row]:
        results = [dict(row) for row in rows]

        for rel in relations:
            target = self._lookup(rel.target)
            normalize = target.key_normalizer(rel.target_field)

            keys: list[Any] = []
            seen: set[Any] = set()
            for row in rows:
                key = row.get(rel.local_field)
                if key is None or normalize(key) in seen:
                    continue
                seen.add(normalize(key))
                keys.append(key)

            by_key: dict[Any, Row] = {}
            if keys:
                related_rows = await target.find_many(
                    {"where": {rel.target_field: {"in": keys}}}
                )
                for related in related_rows:
                    # First match wins, mirroring find_first's LIMIT 1
                    by_key.setdefault(normalize(related.get(rel.target_field)), related)

            self.log.debug(
                "relation_batched",
                relation=rel.name,
                keys=len(keys),
                matched=len(by_key),
            )

            for result in results:
                key = result.get(rel.local_field)
                related = by_key.get(normalize(key)) if key is not None else None
                result[rel.name] = dict(related) if related is not None else None

        return results
