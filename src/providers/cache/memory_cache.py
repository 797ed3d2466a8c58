"""In-memory cache provider using cachetools.TTLCache.

Suitable for single-process deployments.  Can be swapped for Redis or
another backend via the ICacheProvider interface.
"""

from __future__ import annotations

import time
from typing import Any

import structlog
from cachetools import TTLCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    ``TTLCache`` evicts everything after the provider-wide *ttl*; a shorter
    per-entry ``ttl`` passed to :meth:`set` is enforced on read.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Default time-to-live in seconds for cache entries.
    """

    def __init__(self, max_size: int = 1000, ttl: int = 3600) -> None:
        self._default_ttl = ttl
        self._cache: TTLCache[str, tuple[Any, float]] = TTLCache(maxsize=max_size, ttl=ttl)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        entry = self._lookup(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry[0]

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        effective_ttl = self._default_ttl if ttl is None else min(ttl, self._default_ttl)
        self._cache[key] = (value, time.monotonic() + effective_ttl)
        logger.debug("cache_set", key=key, ttl=effective_ttl)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        return self._lookup(key) is not None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lookup(self, key: str) -> tuple[Any, float] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry[1] <= time.monotonic():
            self._cache.pop(key, None)
            return None
        return entry
