"""Request-scoped batched loaders."""

from .batch import NOT_FOUND, BatchLoader, BatchState, DataLoader
from .cache_through import CacheThroughBatch
from .registry import (
    PAIR_KEY,
    PAIR_RESERVE_KEY,
    TOKEN_KEY,
    TOKEN_PRICE_KEY,
    USER_STATS_KEY,
    Loaders,
    create_loaders,
)

__all__ = [
    "NOT_FOUND",
    "BatchLoader",
    "BatchState",
    "CacheThroughBatch",
    "DataLoader",
    "Loaders",
    "PAIR_KEY",
    "PAIR_RESERVE_KEY",
    "TOKEN_KEY",
    "TOKEN_PRICE_KEY",
    "USER_STATS_KEY",
    "create_loaders",
]
