import asyncio
import time
import unittest

import pytest

from adaptive_learning.common.cache.entry import CacheEntry
from adaptive_learning.common.cache.memory import MemoryCacheBackend


class TestCacheEntry(unittest.TestCase):
    """Test the CacheEntry class."""

    def test_init(self):
        """Test initializing a CacheEntry."""
        value = {"test": "value"}
        entry = CacheEntry(value)
        self.assertEqual(entry.value, value)
        self.assertIsNone(entry.expires_at)
        self.assertIsNone(entry.get_ttl())
        self.assertEqual(entry.access_count, 0)

        entry = CacheEntry(value, ttl=10)
        self.assertEqual(entry.expires_at, entry.created_at + 10)

    def test_is_expired(self):
        """Test checking if a CacheEntry is expired."""
        entry = CacheEntry("test")
        self.assertFalse(entry.is_expired())

        entry.expires_at = time.time() - 10
        self.assertTrue(entry.is_expired())

        entry.expires_at = time.time() + 10
        self.assertFalse(entry.is_expired())
        self.assertTrue(entry.is_expired(now=entry.expires_at + 1))

    def test_access(self):
        entry = CacheEntry("test")
        entry.access()
        entry.access()
        self.assertEqual(entry.access_count, 2)
        self.assertGreaterEqual(entry.last_accessed, entry.created_at)


class TestMemoryCacheBackend(unittest.TestCase):
    """Test the MemoryCacheBackend class."""

    def setUp(self):
        """Set up a MemoryCacheBackend instance for testing."""
        self.cache = MemoryCacheBackend(max_size=3)
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

    def tearDown(self):
        """Clean up the event loop."""
        self.loop.close()
        asyncio.set_event_loop(None)

    def _await(self, coro):
        return self.loop.run_until_complete(coro)

    def test_get_set(self):
        """Test setting and getting a value."""
        value = {"test": "value"}

        result = self._await(self.cache.set("key", value))
        self.assertTrue(result.success)

        result = self._await(self.cache.get("key"))
        self.assertTrue(result.hit)
        self.assertIs(result.value, value)

        result = self._await(self.cache.get("nonexistent"))
        self.assertFalse(result.hit)
        self.assertIsNone(result.value)

    def test_ttl(self):
        """Test time-to-live functionality."""
        self._await(self.cache.set("key", "expires_quickly", ttl=0.05))
        self.assertTrue(self._await(self.cache.get("key")).hit)

        time.sleep(0.1)

        self.assertFalse(self._await(self.cache.get("key")).hit)
        self.assertEqual(self._await(self.cache.get_stats())["expirations"], 1)

    def test_delete(self):
        """Test deleting a value."""
        self._await(self.cache.set("key", "to_be_deleted"))

        self.assertTrue(self._await(self.cache.delete("key")))
        self.assertFalse(self._await(self.cache.get("key")).hit)
        self.assertFalse(self._await(self.cache.delete("nonexistent")))

    def test_clear(self):
        self._await(self.cache.set("key1", "value1"))
        self._await(self.cache.set("key2", "value2"))

        self.assertTrue(self._await(self.cache.clear()))
        self.assertEqual(len(self.cache), 0)

    def test_lru_eviction(self):
        """Least recently used entries are evicted first."""
        for key in ("a", "b", "c"):
            self._await(self.cache.set(key, key))
        self._await(self.cache.get("a"))

        self._await(self.cache.set("d", "d"))

        self.assertEqual(len(self.cache), 3)
        self.assertFalse(self._await(self.cache.get("b")).hit)
        self.assertTrue(self._await(self.cache.get("a")).hit)

    def test_cleanup_expired(self):
        self._await(self.cache.set("short", 1, ttl=0.01))
        self._await(self.cache.set("forever", 2))
        time.sleep(0.05)

        self.assertEqual(self.cache.cleanup_expired(), 1)
        self.assertEqual(len(self.cache), 1)

    def test_get_stats(self):
        """Test getting cache statistics."""
        self._await(self.cache.set("stat_key1", "value1"))
        self._await(self.cache.get("stat_key1"))
        self._await(self.cache.get("nonexistent"))

        stats = self._await(self.cache.get_stats())

        self.assertEqual(stats["backend"], "memory")
        self.assertEqual(stats["size"], 1)
        self.assertEqual(stats["hits"], 1)
        self.assertEqual(stats["misses"], 1)
        self.assertEqual(stats["hit_rate"], 0.5)


@pytest.mark.asyncio
async def test_cleanup_task_lifecycle():
    cache = MemoryCacheBackend(cleanup_interval=1)

    task = cache.start_cleanup_task()
    assert cache.start_cleanup_task() is task
    assert not task.done()

    await cache.stop_cleanup_task()
    assert task.done()


if __name__ == '__main__':
    unittest.main()
