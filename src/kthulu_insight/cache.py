"""
Per-file analysis caches for Kthulu Insight.

Entries map a fingerprint of (path, mtime) to serialized FileAnalysis bytes.
Three implementations share one contract (get/set/delete/clear/stats):

- NullCache: always misses, for deterministic runs
- MemoryCache: bounded in-memory cache with TTL (the default)
- DiskCache: persistent cache backed by diskcache
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Callable, Optional, Tuple

from diskcache import Cache

from .config import AnalyzerConfig
from .locks import ReadWriteLock
from .logging_config import get_logger

logger = get_logger(__name__)

CacheResult = Tuple[Optional[bytes], bool]


def fingerprint(path: str, mtime: float) -> str:
    """Cache key for a file version: sha256 of path and modification time."""
    key_data = f"{path}:{int(mtime * 1_000_000_000)}"
    return hashlib.sha256(key_data.encode()).hexdigest()


class FileCache:
    """Interface shared by all cache implementations."""

    def get(self, key: str) -> CacheResult:
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def stats(self) -> dict:
        return {}

    def close(self) -> None:
        pass


class NullCache(FileCache):
    """Cache that never stores anything."""

    def get(self, key: str) -> CacheResult:
        return None, False

    def set(self, key: str, value: bytes) -> None:
        pass

    def delete(self, key: str) -> None:
        pass

    def clear(self) -> None:
        pass

    def stats(self) -> dict:
        return {"enabled": False}


class MemoryCache(FileCache):
    """
    Bounded in-memory cache with TTL expiry.

    Features:
    - Concurrent lookups, one insertion at a time (readers-writer lock)
    - When full, expired entries are evicted first, then the oldest
    - Injectable clock for deterministic expiry in tests
    """

    def __init__(
        self,
        max_entries: int = 10000,
        ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[bytes, float]] = OrderedDict()
        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> CacheResult:
        with self._lock.read():
            entry = self._entries.get(key)
            now = self._clock()

        hit = entry is not None and entry[1] > now
        with self._stats_lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1
        if not hit:
            return None, False
        return entry[0], True

    def set(self, key: str, value: bytes) -> None:
        with self._lock.write():
            now = self._clock()
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                self._evict(now)
            self._entries[key] = (value, now + self.ttl)

    def _evict(self, now: float) -> None:
        """Drop expired entries, then the oldest, until one slot is free."""
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        evicted = len(expired)
        while len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        with self._stats_lock:
            self.evictions += evicted
        logger.debug(f"Cache evicted {evicted} entries ({len(expired)} expired)")

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def stats(self) -> dict:
        size = len(self)
        with self._stats_lock:
            return {
                "enabled": True,
                "backend": "memory",
                "size": size,
                "max_entries": self.max_entries,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }


class DiskCache(FileCache):
    """
    SQLite-based persistent cache (diskcache).

    Expiry is delegated to diskcache's per-entry ``expire``.
    """

    def __init__(self, cache_dir: str = ".kthulu-cache", ttl: float = 3600.0):
        self.ttl = ttl
        self.cache = Cache(cache_dir)
        logger.debug(f"Cache initialized at {cache_dir} with TTL={ttl}s")

    def get(self, key: str) -> CacheResult:
        try:
            value = self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None, False
        if value is None:
            return None, False
        logger.debug(f"Cache hit: {key[:16]}...")
        return value, True

    def set(self, key: str, value: bytes) -> None:
        try:
            self.cache.set(key, value, expire=self.ttl)
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def delete(self, key: str) -> None:
        self.cache.delete(key)

    def clear(self) -> None:
        self.cache.clear()
        logger.info("Cache cleared")

    def stats(self) -> dict:
        return {
            "enabled": True,
            "backend": "disk",
            "size": len(self.cache),
            "directory": self.cache.directory,
            "volume": self.cache.volume(),
        }

    def close(self) -> None:
        self.cache.close()


def create_cache(config: AnalyzerConfig) -> FileCache:
    """Build the cache selected by configuration."""
    if not config.cache_enabled:
        return NullCache()
    if config.cache_backend == "disk":
        return DiskCache(str(Path(config.cache_dir)), ttl=config.cache_ttl)
    return MemoryCache(max_entries=config.cache_max_entries, ttl=config.cache_ttl)
