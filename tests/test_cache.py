"""
Unittest suite for the result cache.

The in-process store is driven by a fake clock so that expiry can be
tested without sleeping.  No test talks to a real Redis server.
"""

from __future__ import annotations

import unittest

from jobrank.rank.cache import (
    CacheStore,
    MemoryCacheStore,
    NullCacheStore,
    ResultCache,
    build_cache_store,
    job_score_key,
    rerank_key,
    response_key,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class BrokenStore(CacheStore):
    def get(self, key):
        raise ConnectionError("store is down")

    def set(self, key, value, ttl_seconds):
        raise ConnectionError("store is down")


class TestCacheKeys(unittest.TestCase):
    def test_response_key_ignores_url_order(self) -> None:
        a = response_key("resume", ["https://x/2", "https://x/1"])
        b = response_key("resume", ["https://x/1", "https://x/2"])
        self.assertEqual(a, b)
        self.assertTrue(a.startswith("rank:resp:"))

    def test_response_key_uses_resume_prefix_only(self) -> None:
        base = "r" * 2000
        self.assertEqual(
            response_key(base + "tail one", ["https://x/1"]),
            response_key(base + "tail two", ["https://x/1"]),
        )
        self.assertNotEqual(
            response_key("resume a", ["https://x/1"]),
            response_key("resume b", ["https://x/1"]),
        )

    def test_response_key_skips_empty_urls(self) -> None:
        self.assertEqual(
            response_key("resume", ["https://x/1", ""]),
            response_key("resume", ["https://x/1"]),
        )

    def test_key_prefixes(self) -> None:
        self.assertTrue(job_score_key("resume", "job").startswith("rank:"))
        self.assertFalse(job_score_key("resume", "job").startswith("rank:resp:"))
        self.assertTrue(rerank_key("https://x/1", "resume").startswith("rank:llm:"))
        self.assertNotEqual(job_score_key("resume", "job a"), job_score_key("resume", "job b"))


class TestMemoryCacheStore(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = MemoryCacheStore(max_entries=2, clock=self.clock)

    def test_entries_expire_on_read(self) -> None:
        self.store.set("k", "v", ttl_seconds=600)
        self.clock.now += 599
        self.assertEqual(self.store.get("k"), "v")
        self.clock.now += 1
        self.assertIsNone(self.store.get("k"))
        self.assertEqual(len(self.store), 0)

    def test_least_recently_used_entry_is_evicted(self) -> None:
        self.store.set("a", "1", 600)
        self.store.set("b", "2", 600)
        self.store.get("a")
        self.store.set("c", "3", 600)
        self.assertEqual(self.store.get("a"), "1")
        self.assertIsNone(self.store.get("b"))
        self.assertEqual(self.store.get("c"), "3")

    def test_max_entries_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            MemoryCacheStore(max_entries=0)


class TestResultCache(unittest.TestCase):
    def test_round_trips_json_values(self) -> None:
        cache = ResultCache(MemoryCacheStore())
        cache.set("k", {"score": 42, "reasons": ["Matches: Python"]})
        self.assertEqual(cache.get("k"), {"score": 42, "reasons": ["Matches: Python"]})
        self.assertIsNone(cache.get("missing"))
        stats = cache.stats()
        self.assertEqual((stats["hits"], stats["misses"], stats["writes"]), (1, 1, 1))
        self.assertEqual(stats["backend"], "MemoryCacheStore")

    def test_uses_configured_ttl(self) -> None:
        clock = FakeClock()
        cache = ResultCache(MemoryCacheStore(clock=clock), ttl_seconds=10)
        cache.set("k", [1])
        clock.now += 10
        self.assertIsNone(cache.get("k"))

    def test_store_failures_are_swallowed(self) -> None:
        cache = ResultCache(BrokenStore())
        with self.assertLogs("jobrank.rank.cache", level="WARNING"):
            cache.set("k", {"score": 1})
            self.assertIsNone(cache.get("k"))
        self.assertEqual(cache.stats()["errors"], 2)

    def test_null_store_never_hits(self) -> None:
        cache = ResultCache(NullCacheStore())
        cache.set("k", {"score": 1})
        self.assertIsNone(cache.get("k"))
        stats = cache.stats()
        self.assertFalse(stats["enabled"])
        self.assertEqual(stats["writes"], 0)

    def test_empty_memory_store_is_kept(self) -> None:
        store = MemoryCacheStore()
        self.assertEqual(len(store), 0)
        cache = ResultCache(store)
        self.assertIs(cache.store, store)
        self.assertTrue(cache.stats()["enabled"])
        cache.set("k", [1])
        self.assertEqual(len(store), 1)


class TestBuildCacheStore(unittest.TestCase):
    def test_without_url_uses_memory_store(self) -> None:
        store = build_cache_store(None, max_entries=5)
        self.assertIsInstance(store, MemoryCacheStore)
        self.assertEqual(store.max_entries, 5)


if __name__ == "__main__":
    unittest.main()
