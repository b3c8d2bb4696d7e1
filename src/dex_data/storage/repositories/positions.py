"""Position-like adapters: liquidity, farming and staking positions."""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.relations import Relation
from dex_data.storage.repositories.base import EntityAdapter


class LiquidityPositionAdapter(EntityAdapter):
    """LP token balances per user and pair.

    The pair is referenced by id, not by address.
    """

    kind = EntityKind.LIQUIDITY_POSITION
    table = "liquidity_position"
    cursor_field = "id"
    relations = (Relation("pair", "pairId", EntityKind.PAIR, target_field="id"),)


class FarmingPositionAdapter(EntityAdapter):
    kind = EntityKind.FARMING_POSITION
    table = "farming_position"
    cursor_field = "id"


class StakingPositionAdapter(EntityAdapter):
    kind = EntityKind.STAKING_POSITION
    table = "staking_position"
    cursor_field = "id"
