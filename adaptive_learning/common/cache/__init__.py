"""
Caching System

Cache backend interface plus the in-memory TTL/LRU backend used for
performance snapshots.
"""

from adaptive_learning.common.cache.base import CacheBackend, CacheResult
from adaptive_learning.common.cache.entry import CacheEntry
from adaptive_learning.common.cache.memory import MemoryCacheBackend

__all__ = [
    'CacheBackend',
    'CacheResult',
    'CacheEntry',
    'MemoryCacheBackend',
]
