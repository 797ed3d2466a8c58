"""Cache providers.

In-memory TTL-based cache used to avoid redundant ticketing API calls
(e.g. two users in the same city searching the same weekend within the
hour share one Ticketmaster request).

MemoryCacheProvider is not shared across processes.  For multi-worker
deployments, swap in a Redis adapter implementing ICacheProvider.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
