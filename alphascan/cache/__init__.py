"""Market data cache: in-process TTL tier plus optional shared Valkey tier."""

from .cache import (
    CacheEntry,
    DataClass,
    HybridCache,
    cache_key,
    get_cache,
    ttl_for,
)
from .client import (
    close_valkey_client,
    get_valkey_client,
    valkey_enabled,
    valkey_healthcheck,
)


__all__ = [
    "CacheEntry",
    "DataClass",
    "HybridCache",
    "cache_key",
    "close_valkey_client",
    "get_cache",
    "get_valkey_client",
    "ttl_for",
    "valkey_enabled",
    "valkey_healthcheck",
]
