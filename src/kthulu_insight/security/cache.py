"""DecisionCache: bounded TTL cache of authorization results."""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Hashable, Optional

from .models import AccessResult


@dataclass
class _Decision:
    result: AccessResult
    expires_at: float
    hits: int = 0


class DecisionCache:
    """Maps ``(subject, resource, action, sorted roles)`` to an AccessResult.

    At capacity, expired entries are evicted first, then the oldest insert.
    Guarded by its own lock, independent of the policy store lock.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, _Decision] = OrderedDict()
        self._lock = Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> Optional[AccessResult]:
        with self._lock:
            decision = self._entries.get(key)
            if decision is None:
                self.misses += 1
                return None
            if decision.expires_at <= self._clock():
                del self._entries[key]
                self.misses += 1
                return None
            decision.hits += 1
            self._entries.move_to_end(key)
            self.hits += 1
            return decision.result

    def set(self, key: Hashable, result: AccessResult) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                self._evict()
            self._entries[key] = _Decision(result, self._clock() + self.ttl)

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, d in self._entries.items() if d.expires_at <= now]
        for key in expired:
            del self._entries[key]
        self.evictions += len(expired)
        while len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
            self.evictions += 1

    def invalidate(self, predicate: Callable[[Hashable, AccessResult], bool]) -> int:
        """Drop every entry for which ``predicate(key, result)`` holds."""
        with self._lock:
            doomed = [k for k, d in self._entries.items() if predicate(k, d.result)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }
