"""Token adapter.

Table ``token`` (one row per ERC-20 seen by the indexer):
    - id, address (hex, stored lowercase by the indexer but matched
      case-insensitively), symbol, name, decimals
    - price_usd, volume_usd_24h, tvl, image_uri
"""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.repositories.base import EntityAdapter


class TokenAdapter(EntityAdapter):
    """Token reads. Cursor pagination walks ``address``."""

    kind = EntityKind.TOKEN
    table = "token"
    cursor_field = "address"
