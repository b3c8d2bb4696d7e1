"""PonderDb: every entity adapter bundled over one store handle.

Resolvers receive one PonderDb and address tables as attributes
(``db.token.find_many(...)``). The store handle and statement builder
are shared; relation lookups resolve through this same bundle.
"""

from typing import Any

from dex_data.config.state import ConfigState, QueryConfig
from dex_data.infrastructure.database.ports import DatabaseAdapter, IDatabaseAdapter, Row
from dex_data.infrastructure.observability import get_storage_logger
from dex_data.shared.models.enums import EntityKind, RelationMode
from dex_data.storage.query import CaseInsensitiveRules, IdentifierTranslator, StatementBuilder
from dex_data.storage.relations import RelationResolver
from dex_data.storage.repositories.base import EntityAdapter
from dex_data.storage.repositories.launches import LaunchAdapter, LaunchContributionAdapter
from dex_data.storage.repositories.market_data import (
    HourlyPriceSnapshotAdapter,
    PairReserveSnapshotAdapter,
    PriceObservationAdapter,
    ProtocolMetricAdapter,
)
from dex_data.storage.repositories.pairs import PairAdapter
from dex_data.storage.repositories.positions import (
    FarmingPositionAdapter,
    LiquidityPositionAdapter,
    StakingPositionAdapter,
)
from dex_data.storage.repositories.swaps import SwapAdapter
from dex_data.storage.repositories.tokens import TokenAdapter
from dex_data.storage.repositories.users import UserStatAdapter

ADAPTERS: dict[EntityKind, type[EntityAdapter]] = {
    adapter.kind: adapter
    for adapter in (
        TokenAdapter,
        PairAdapter,
        SwapAdapter,
        LiquidityPositionAdapter,
        PriceObservationAdapter,
        HourlyPriceSnapshotAdapter,
        PairReserveSnapshotAdapter,
        ProtocolMetricAdapter,
        FarmingPositionAdapter,
        StakingPositionAdapter,
        LaunchAdapter,
        LaunchContributionAdapter,
        UserStatAdapter,
    )
}


def builder_from_config(config: QueryConfig) -> StatementBuilder:
    return StatementBuilder(
        translator=IdentifierTranslator(config.acronyms),
        rules=CaseInsensitiveRules(
            columns=frozenset(config.case_insensitive_columns),
            suffixes=tuple(config.case_insensitive_suffixes),
        ),
    )


class PonderDb:
    """Adapter bundle for the indexer schema."""

    token: TokenAdapter
    pair: PairAdapter
    swap: SwapAdapter
    liquidity_position: LiquidityPositionAdapter
    price_observation: PriceObservationAdapter
    hourly_price_snapshot: HourlyPriceSnapshotAdapter
    pair_reserve_snapshot: PairReserveSnapshotAdapter
    protocol_metric: ProtocolMetricAdapter
    farming_position: FarmingPositionAdapter
    staking_position: StakingPositionAdapter
    launch: LaunchAdapter
    launch_contribution: LaunchContributionAdapter
    user_stat: UserStatAdapter

    def __init__(
        self,
        db: IDatabaseAdapter,
        builder: StatementBuilder | None = None,
        relation_mode: RelationMode = RelationMode.SEQUENTIAL,
    ):
        self.db = db
        self.builder = builder or StatementBuilder()
        self.resolver = RelationResolver(self.adapter, relation_mode)
        self._adapters: dict[EntityKind, EntityAdapter] = {}

        for kind, adapter_cls in ADAPTERS.items():
            adapter = adapter_cls(db, self.builder, self.resolver)
            self._adapters[kind] = adapter
            setattr(self, kind.value, adapter)

        self.log = get_storage_logger("ponder-db", relation_mode=relation_mode.value)

    @classmethod
    async def from_config(cls, config: ConfigState) -> "PonderDb":
        """Open an asyncpg pool and build the bundle around it."""
        database = DatabaseAdapter(config.database)
        await database.connect()
        return cls(
            database,
            builder=builder_from_config(config.query),
            relation_mode=config.query.relation_mode,
        )

    def adapter(self, kind: EntityKind | str) -> EntityAdapter:
        return self._adapters[EntityKind(kind)]

    async def raw(self, statement: str, params: list[Any] | None = None) -> list[Row]:
        """Run a hand-written statement; rows keep their column names."""
        self.log.debug("raw_statement", statement=statement)
        return await self.db.execute(statement, list(params or []))

    async def close(self) -> None:
        disconnect = getattr(self.db, "disconnect", None)
        if disconnect is not None:
            await disconnect()
        self.log.info("ponder_db_closed")
