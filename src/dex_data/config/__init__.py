"""Configuration state and loader."""

from .state import (
    CircuitBreakerConfig,
    ConfigLoader,
    ConfigState,
    DatabaseConfig,
    LoaderConfig,
    LoggingConfig,
    QueryConfig,
    RedisConfig,
    get_config,
)

__all__ = [
    "CircuitBreakerConfig",
    "ConfigLoader",
    "ConfigState",
    "DatabaseConfig",
    "LoaderConfig",
    "LoggingConfig",
    "QueryConfig",
    "RedisConfig",
    "get_config",
]
