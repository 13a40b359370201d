# medsearch/infra/cache/lru_cache.py
from __future__ import annotations

import copy
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from medsearch.domain.ports import CachePort


@dataclass
class _Entry:
    value: Dict[str, Any]
    inserted_at: float


class SearchCache(CachePort):
    """
    In-process LRU cache with a per-instance TTL.

    - get() refreshes recency, drops the entry if it outlived `ttl_seconds`
    - put() evicts the least recently used entry once `max_entries` is exceeded
    - values are deep-copied on the way in and out; callers never share state

    Every operation touches the OrderedDict (reads move the key to the end),
    so a single lock guards the O(1) critical sections.
    """

    def __init__(self, max_entries: int = 500, ttl_seconds: float = 30.0,
                 clock: Callable[[], float] = time.monotonic):
        self.max_entries = max(int(max_entries), 1)
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._store: "OrderedDict[str, _Entry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.inserted_at >= self.ttl_seconds

    def get_sync(self, key: str) -> Optional[Dict[str, Any]]:
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self._expired(entry, now):
                del self._store[key]
                self.misses += 1
                return None
            self._store.move_to_end(key)
            self.hits += 1
            value = entry.value
        return copy.deepcopy(value)

    def put_sync(self, key: str, value: Dict[str, Any]) -> None:
        entry = _Entry(value=copy.deepcopy(value), inserted_at=self._clock())
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            self._store[key] = entry
            while len(self._store) > self.max_entries:
                self._store.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and not self._expired(entry, self._clock())

    # ------- CachePort -------
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self.get_sync(key)

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        self.put_sync(key, value)

    async def clear(self) -> None:
        with self._lock:
            self._store.clear()

    async def ping(self) -> bool:
        return True
