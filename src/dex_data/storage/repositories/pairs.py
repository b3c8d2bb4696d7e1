"""Pair adapter.

Table ``pair``:
    - id, address, token0_address, token1_address
    - reserve0, reserve1 (raw integer strings), reserve_usd, tvl
    - volume_usd_24h, created_at
"""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.relations import Relation
from dex_data.storage.repositories.base import EntityAdapter


class PairAdapter(EntityAdapter):
    """Pair reads with optional ``token0`` / ``token1`` attachment."""

    kind = EntityKind.PAIR
    table = "pair"
    cursor_field = "id"
    relations = (
        Relation("token0", "token0Address", EntityKind.TOKEN),
        Relation("token1", "token1Address", EntityKind.TOKEN),
    )
