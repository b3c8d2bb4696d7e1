"""Swap adapter (transaction-like rows).

Table ``swap``:
    - id (monotonic: block number + log index), tx_hash, pair_address
    - sender, to_address, amount0_in, amount1_in, amount0_out, amount1_out
    - timestamp
"""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.relations import Relation
from dex_data.storage.repositories.base import EntityAdapter


class SwapAdapter(EntityAdapter):
    kind = EntityKind.SWAP
    table = "swap"
    cursor_field = "id"
    relations = (Relation("pair", "pairAddress", EntityKind.PAIR),)
