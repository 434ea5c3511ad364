"""Tests for cache.py."""

import pytest

from kthulu_insight.cache import DiskCache, MemoryCache, NullCache, create_cache, fingerprint
from kthulu_insight.config import AnalyzerConfig


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestFingerprint:
    def test_stable_and_sensitive_to_mtime(self):
        assert fingerprint("a.go", 1.5) == fingerprint("a.go", 1.5)
        assert fingerprint("a.go", 1.5) != fingerprint("a.go", 1.6)
        assert fingerprint("a.go", 1.5) != fingerprint("b.go", 1.5)
        assert len(fingerprint("a.go", 0.0)) == 64


class TestNullCache:
    def test_always_misses(self):
        cache = NullCache()
        cache.set("k", b"v")
        assert cache.get("k") == (None, False)


class TestMemoryCache:
    def test_get_within_ttl(self):
        clock = FakeClock()
        cache = MemoryCache(ttl=10.0, clock=clock)
        cache.set("k", b"value")
        clock.now += 9.9
        assert cache.get("k") == (b"value", True)

    def test_expired_after_ttl(self):
        clock = FakeClock()
        cache = MemoryCache(ttl=10.0, clock=clock)
        cache.set("k", b"value")
        clock.now += 10.0
        assert cache.get("k") == (None, False)

    def test_evicts_expired_before_oldest(self):
        clock = FakeClock()
        cache = MemoryCache(max_entries=2, ttl=10.0, clock=clock)
        cache.set("old", b"1")
        clock.now += 5
        cache.set("fresh", b"2")
        clock.now += 6  # "old" expired, "fresh" still valid
        cache.set("new", b"3")

        assert cache.get("fresh") == (b"2", True)
        assert cache.get("new") == (b"3", True)
        assert len(cache) == 2

    def test_evicts_oldest_when_nothing_expired(self):
        cache = MemoryCache(max_entries=2, ttl=100.0, clock=FakeClock())
        cache.set("a", b"1")
        cache.set("b", b"2")
        cache.set("c", b"3")

        assert cache.get("a") == (None, False)
        assert cache.get("b") == (b"2", True)
        assert cache.stats()["evictions"] == 1

    def test_stats_count_hits_and_misses(self):
        cache = MemoryCache(clock=FakeClock())
        cache.set("k", b"v")
        cache.get("k")
        cache.get("missing")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["size"] == 1

    def test_delete_and_clear(self):
        cache = MemoryCache(clock=FakeClock())
        cache.set("a", b"1")
        cache.set("b", b"2")
        cache.delete("a")
        assert cache.get("a") == (None, False)
        cache.clear()
        assert len(cache) == 0

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            MemoryCache(max_entries=0)


class TestDiskCache:
    def test_round_trip_and_clear(self, tmp_path):
        cache = DiskCache(str(tmp_path / "cache"), ttl=60.0)
        try:
            cache.set("k", b"payload")
            assert cache.get("k") == (b"payload", True)
            assert cache.stats()["size"] == 1
            cache.clear()
            assert cache.get("k") == (None, False)
        finally:
            cache.close()


class TestCreateCache:
    def test_disabled(self):
        assert isinstance(create_cache(AnalyzerConfig(cache_enabled=False)), NullCache)

    def test_memory_default(self):
        assert isinstance(create_cache(AnalyzerConfig()), MemoryCache)

    def test_disk_backend(self, tmp_path):
        cache = create_cache(AnalyzerConfig(cache_backend="disk", cache_dir=str(tmp_path / "c")))
        try:
            assert isinstance(cache, DiskCache)
        finally:
            cache.close()
