"""
Observability for the data access layer: structlog configuration and
layer-specific logger factories that bind architectural context to
every event.
"""

from .logging import (
    get_cache_logger,
    get_database_logger,
    get_infrastructure_logger,
    get_loader_logger,
    get_logger,
    get_pricing_logger,
    get_storage_logger,
    setup_logging,
)

__all__ = [
    # Setup
    "setup_logging",
    # Base
    "get_logger",
    # Layer-specific
    "get_infrastructure_logger",
    "get_storage_logger",
    "get_loader_logger",
    "get_cache_logger",
    "get_pricing_logger",
    # Aliases
    "get_database_logger",
]
