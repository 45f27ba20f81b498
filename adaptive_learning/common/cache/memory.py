"""
Memory Cache Backend Module

In-process cache backend with TTL expiry and LRU eviction. It holds the
per-learner performance snapshots between recomputations.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, TypeVar

from .base import CacheBackend, CacheResult
from .entry import CacheEntry

logger = logging.getLogger(__name__)

K = TypeVar('K')
V = TypeVar('V')


class MemoryCacheBackend(CacheBackend[K, V]):
    """
    In-memory cache backend implementation.

    Entries live in an ``OrderedDict`` ordered by recency of use; when the
    cache is full the least recently used entry is evicted. Expired entries
    are dropped lazily on read and in bulk by ``cleanup_expired``.

    The backend is meant for a single event loop. Its methods never await, so
    each call is atomic with respect to other coroutines.
    """

    def __init__(self, max_size: int = 10000, cleanup_interval: int = 60, name: str = "memory"):
        """
        Initialize the memory cache backend.

        Args:
            max_size: Maximum number of entries to store
            cleanup_interval: Seconds between sweeps run by ``start_cleanup_task``
            name: Name for this cache backend
        """
        self._cache: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._max_size = max_size
        self._cleanup_interval = cleanup_interval
        self._name = name
        self._cleanup_task: Optional[asyncio.Task] = None

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: K) -> CacheResult[V]:
        entry = self._cache.get(key)

        if entry is None:
            self._misses += 1
            return CacheResult(success=False, hit=False, source=self.name, error="Key not found")

        if entry.is_expired():
            del self._cache[key]
            self._expirations += 1
            self._misses += 1
            return CacheResult(success=False, hit=False, source=self.name, error="Entry expired")

        entry.access()
        self._cache.move_to_end(key)
        self._hits += 1

        return CacheResult(success=True, value=entry.value, hit=True, ttl=entry.get_ttl(), source=self.name)

    async def set(self, key: K, value: V, ttl: Optional[float] = None) -> CacheResult[V]:
        if key not in self._cache and len(self._cache) >= self._max_size:
            self._evict_entries()

        self._cache[key] = CacheEntry(value, ttl=ttl)
        self._cache.move_to_end(key)

        return CacheResult(success=True, value=value, hit=False, ttl=ttl, source=self.name)

    async def delete(self, key: K) -> bool:
        if key in self._cache:
            del self._cache[key]
            return True
        return False

    async def clear(self) -> bool:
        self._cache.clear()
        return True

    async def get_stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            'backend': 'memory',
            'size': len(self._cache),
            'max_size': self._max_size,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / total if total > 0 else 0,
            'evictions': self._evictions,
            'expirations': self._expirations
        }

    def cleanup_expired(self) -> int:
        """
        Remove expired entries from the cache.

        Returns:
            Number of entries removed
        """
        now = time.time()
        expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(now)]
        for key in expired_keys:
            del self._cache[key]
        self._expirations += len(expired_keys)
        if expired_keys:
            logger.debug(f"Swept {len(expired_keys)} expired entries from cache '{self.name}'")
        return len(expired_keys)

    def start_cleanup_task(self) -> asyncio.Task:
        """
        Start the periodic expiry sweep on the running event loop.

        Returns:
            The background task; cancel it (or call ``stop_cleanup_task``) on shutdown
        """
        async def cleanup():
            while True:
                await asyncio.sleep(self._cleanup_interval)
                self.cleanup_expired()

        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.get_running_loop().create_task(cleanup())
        return self._cleanup_task

    async def stop_cleanup_task(self) -> None:
        """Cancel the periodic sweep if it is running."""
        if self._cleanup_task is not None and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    def _evict_entries(self) -> None:
        """Evict least recently used entries until there is room for one more."""
        while len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)
            self._evictions += 1

    def __len__(self) -> int:
        return len(self._cache)
