# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

from cryptodash.shared.logging import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True)
class CacheEntry(Generic[V]):  # noqa: UP046
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache(Generic[K, V]):  # noqa: UP046
    """Bounded time-to-live cache for upstream responses.

    A ``ttl_seconds`` of zero disables caching; ``factory`` runs every time.
    Failed factories are not cached.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max(1, max_entries)
        self._clock = clock
        self._lock = Lock()
        self._store: OrderedDict[K, CacheEntry[V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: K) -> V | None:
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                self._store.pop(key, None)
                return None
            self._store.move_to_end(key)
            return entry.value

    def set(self, key: K, value: V) -> None:
        if self._ttl <= 0:
            return
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + self._ttl)
            self._store.move_to_end(key)
            while len(self._store) > self._max_entries:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"cache: evict key={evicted}")

    def get_or_set(self, key: K, factory: Callable[[], V]) -> V:
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"cache: hit key={key}")
            return cached

        logger.debug(f"cache: miss key={key}")
        value = factory()
        self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            logger.debug("cache: clear all keys")
            self._store.clear()


__all__ = ["TTLCache"]
