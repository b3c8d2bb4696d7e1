"""Exception taxonomy for the data access layer.

Store errors (asyncpg exceptions) are deliberately absent: they propagate
unchanged to callers of the entity adapters.
"""


class DataAccessError(Exception):
    """Base exception for data access errors."""

    pass


class QueryDescriptorError(DataAccessError):
    """Query descriptor is malformed (unknown operator, bad direction, etc)."""

    pass


class LoaderClosedError(DataAccessError):
    """A key was submitted to a batch that has already been dispatched."""

    pass


class BatchLoadError(DataAccessError):
    """Batch function broke its contract (wrong result length, etc)."""

    pass


class CacheUnavailableError(DataAccessError):
    """Distributed cache could not be reached or the circuit is open."""

    pass


__all__ = [
    "DataAccessError",
    "QueryDescriptorError",
    "LoaderClosedError",
    "BatchLoadError",
    "CacheUnavailableError",
]
