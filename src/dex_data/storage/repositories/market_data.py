"""Market data adapters backing charts, reserve valuation and metrics.

These tables are append-only time series written by the indexer:
    - price_observation: token_address, price, timestamp
    - hourly_price_snapshot: token_address, hour, open, high, low, close
    - pair_reserve_snapshot: pair_id, reserve0, reserve1, reserve_usd, timestamp
    - protocol_metric: total_value_locked_usd, daily_volume_usd, timestamp
"""

from dex_data.shared.models.enums import EntityKind
from dex_data.storage.repositories.base import EntityAdapter, newest_first


class PriceObservationAdapter(EntityAdapter):
    kind = EntityKind.PRICE_OBSERVATION
    table = "price_observation"
    cursor_field = "id"


class HourlyPriceSnapshotAdapter(EntityAdapter):
    kind = EntityKind.HOURLY_PRICE_SNAPSHOT
    table = "hourly_price_snapshot"
    cursor_field = "id"


class PairReserveSnapshotAdapter(EntityAdapter):
    """Reserve history per pair; latest_per_key("pairId", ...) feeds reserve loaders."""

    kind = EntityKind.PAIR_RESERVE_SNAPSHOT
    table = "pair_reserve_snapshot"
    cursor_field = "id"
    default_order = newest_first()


class ProtocolMetricAdapter(EntityAdapter):
    """Protocol-wide metrics; without an explicit orderBy the newest row comes first."""

    kind = EntityKind.PROTOCOL_METRIC
    table = "protocol_metric"
    cursor_field = None
    default_order = newest_first()
