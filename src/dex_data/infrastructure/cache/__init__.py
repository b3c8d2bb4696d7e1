from .circuit_breaker import CircuitBreaker, CircuitState
from .memory import CacheEntry, InMemoryCache
from .ports import ICacheClient
from .redis_cache import RedisCache

__all__ = [
    "CacheEntry",
    "CircuitBreaker",
    "CircuitState",
    "ICacheClient",
    "InMemoryCache",
    "RedisCache",
]
