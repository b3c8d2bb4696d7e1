"""Entity adapters for the indexer tables.

Every adapter shares one read surface (find_first, find_many, count)
over a single table; PonderDb bundles them over one store handle.
"""

from .base import EntityAdapter
from .launches import LaunchAdapter, LaunchContributionAdapter
from .market_data import (
    HourlyPriceSnapshotAdapter,
    PairReserveSnapshotAdapter,
    PriceObservationAdapter,
    ProtocolMetricAdapter,
)
from .pairs import PairAdapter
from .ponder_db import ADAPTERS, PonderDb, builder_from_config
from .positions import FarmingPositionAdapter, LiquidityPositionAdapter, StakingPositionAdapter
from .swaps import SwapAdapter
from .tokens import TokenAdapter
from .users import UserStatAdapter

__all__ = [
    "ADAPTERS",
    "EntityAdapter",
    "FarmingPositionAdapter",
    "HourlyPriceSnapshotAdapter",
    "LaunchAdapter",
    "LaunchContributionAdapter",
    "LiquidityPositionAdapter",
    "PairAdapter",
    "PairReserveSnapshotAdapter",
    "PonderDb",
    "PriceObservationAdapter",
    "ProtocolMetricAdapter",
    "StakingPositionAdapter",
    "SwapAdapter",
    "TokenAdapter",
    "UserStatAdapter",
    "builder_from_config",
]
