"""
Shared enumerations for the data access layer.
"""

import enum


# ============================================================================
# QUERY SHAPE
# ============================================================================
class SortDirection(str, enum.Enum):
    """Sort direction accepted in an orderBy term."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: str) -> "SortDirection":
        return cls(str(raw).lower())


class RelationMode(str, enum.Enum):
    """How related entities are attached after the primary rows are fetched.

    SEQUENTIAL is the reference behaviour (one lookup per row, awaited in
    order). CONCURRENT gathers the same lookups. BATCHED collects foreign
    keys across all rows and issues one IN query per relation slot.
    """

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"
    BATCHED = "batched"


# ============================================================================
# ENTITIES
# ============================================================================
class EntityKind(str, enum.Enum):
    """Indexer tables exposed through entity adapters."""

    TOKEN = "token"
    PAIR = "pair"
    SWAP = "swap"
    LIQUIDITY_POSITION = "liquidity_position"
    PRICE_OBSERVATION = "price_observation"
    HOURLY_PRICE_SNAPSHOT = "hourly_price_snapshot"
    PAIR_RESERVE_SNAPSHOT = "pair_reserve_snapshot"
    PROTOCOL_METRIC = "protocol_metric"
    FARMING_POSITION = "farming_position"
    STAKING_POSITION = "staking_position"
    LAUNCH = "launch"
    LAUNCH_CONTRIBUTION = "launch_contribution"
    USER_STAT = "user_stat"


# ============================================================================
# CACHING
# ============================================================================
class CacheTier(str, enum.Enum):
    """TTL tiers for distributed cache entries."""

    VOLATILE = "volatile"  # prices
    STANDARD = "standard"  # tokens, pairs, reserves
    EXTENDED = "extended"  # charts, user stats
