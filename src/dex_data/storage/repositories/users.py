"""Per-wallet aggregates.

Table ``user_stat`` (one row per wallet):
    id, user_address, total_swaps, total_volume_usd, total_fees_usd,
    first_seen, last_seen
"""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.repositories.base import EntityAdapter, newest_first


class UserStatAdapter(EntityAdapter):
    """Wallet statistics, looked up by ``userAddress`` (case-insensitive)."""

    kind = EntityKind.USER_STAT
    table = "user_stat"
    cursor_field = "id"
    default_order = newest_first("lastSeen")
