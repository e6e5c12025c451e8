"""Two-tier TTL cache with stale fallback for upstream market data."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel

from alphascan.core.config import Settings, settings
from alphascan.core.logging import get_logger

from .client import get_valkey_client, valkey_enabled


logger = get_logger("cache")

# Cache key prefixes for namespacing
CACHE_PREFIX = "alphascan"
CACHE_VERSION = "v1"


class DataClass(str, Enum):
    """Kinds of upstream data, each with its own freshness window."""

    QUOTE = "quote"
    PROFILE = "profile"
    METRICS = "metrics"
    HISTORY = "history"
    NEWS = "news"
    BENCHMARK = "benchmark"
    ANALYST = "analyst"


def ttl_for(data_class: DataClass | str, s: Settings | None = None) -> int:
    """TTL in seconds for a data class."""
    s = s or settings
    return int(getattr(s, f"cache_ttl_{DataClass(data_class).value}"))


def cache_key(*parts: Union[str, int, float], prefix: str = "cache") -> str:
    """
    Generate a consistent cache key from parts.

    Usage:
        cache_key("quote", "AAPL") -> "alphascan:v1:cache:quote:AAPL"
    """
    sanitized = [str(part).replace(":", "_") for part in parts]
    return f"{CACHE_PREFIX}:{CACHE_VERSION}:{prefix}:{':'.join(sanitized)}"


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return str(value)


def _serialize(value: Any) -> str:
    return json.dumps(value, default=_json_default)


def _deserialize(value: str) -> Any:
    return json.loads(value)


@dataclass
class CacheEntry:
    """A cached value with the time it was stored and its TTL."""

    key: str
    value: Any
    stored_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_expired(self, now: float) -> bool:
        return self.age(now) >= self.ttl


class HybridCache:
    """
    In-process TTL cache with an optional shared Valkey tier.

    Expired in-process entries are not served by ``get`` but remain
    available through ``get_stale`` until evicted, so callers can degrade
    to old data when the upstream is down.
    """

    def __init__(
        self,
        prefix: str = "data",
        max_entries: int | None = None,
        *,
        use_shared: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.prefix = prefix
        self.max_entries = max_entries or settings.cache_max_entries
        self.use_shared = valkey_enabled() if use_shared is None else use_shared
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._stale_hits = 0

    def _full_key(self, key: str) -> str:
        return cache_key(key, prefix=self.prefix)

    async def get(self, key: str) -> Optional[Any]:
        """Return a fresh value or None."""
        entry = self._entries.get(key)
        now = self._clock()
        if entry is not None and not entry.is_expired(now):
            self._hits += 1
            return entry.value

        if self.use_shared:
            value = await self._shared_get(key)
            if value is not None:
                self._hits += 1
                # Remote TTL is authoritative; keep a short local copy
                self._store(key, value, 60.0)
                return value

        self._misses += 1
        return None

    def get_stale(self, key: str) -> Optional[CacheEntry]:
        """Return the in-process entry even if it has expired."""
        return self._entries.get(key)

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` for ``ttl`` seconds."""
        self._store(key, value, ttl)
        if self.use_shared:
            await self._shared_set(key, value, ttl)

    def _store(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = CacheEntry(
            key=key, value=value, stored_at=self._clock(), ttl=float(ttl)
        )
        if len(self._entries) > self.max_entries:
            self._prune()

    def _prune(self) -> None:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            oldest = sorted(self._entries.values(), key=lambda e: e.stored_at)
            for entry in oldest[:overflow]:
                del self._entries[entry.key]
        logger.debug(f"Cache pruned to {len(self._entries)} entries")

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        if self.use_shared:
            try:
                client = await get_valkey_client()
                await client.delete(self._full_key(key))
            except Exception as e:
                logger.warning(f"Cache delete failed: {e}")

    def clear(self) -> None:
        """Drop all in-process entries."""
        self._entries.clear()

    def stats(self) -> dict:
        now = self._clock()
        fresh = sum(1 for e in self._entries.values() if not e.is_expired(now))
        return {
            "entries": len(self._entries),
            "fresh": fresh,
            "hits": self._hits,
            "misses": self._misses,
            "stale_hits": self._stale_hits,
        }

    async def get_or_fetch(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl: float,
        allow_stale: bool = True,
    ) -> Any:
        """
        Cache-aside read with stale fallback.

        Args:
            key: Cache key
            factory: Coroutine function producing the fresh value
            ttl: Freshness window for the stored value
            allow_stale: Serve an expired entry if ``factory`` raises

        Returns:
            Cached, fresh, or (on upstream failure) stale value. ``None``
            results are returned but not cached.
        """
        value = await self.get(key)
        if value is not None:
            return value

        try:
            value = await factory()
        except Exception as e:
            stale = self.get_stale(key) if allow_stale else None
            if stale is None:
                raise
            self._stale_hits += 1
            logger.warning(
                f"Serving stale cache for {key} "
                f"(age {stale.age(self._clock()):.0f}s) after upstream error: {e}"
            )
            return stale.value

        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def _shared_get(self, key: str) -> Optional[Any]:
        try:
            client = await get_valkey_client()
            raw = await client.get(self._full_key(key))
        except Exception as e:
            logger.warning(f"Shared cache get failed: {e}")
            return None
        return _deserialize(raw) if raw is not None else None

    async def _shared_set(self, key: str, value: Any, ttl: float) -> None:
        try:
            client = await get_valkey_client()
            await client.set(self._full_key(key), _serialize(value), ex=max(int(ttl), 1))
        except Exception as e:
            logger.warning(f"Shared cache set failed: {e}")


_cache: HybridCache | None = None


def get_cache() -> HybridCache:
    """Process-wide market data cache."""
    global _cache
    if _cache is None:
        _cache = HybridCache()
    return _cache
