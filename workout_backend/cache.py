# -*- coding: utf-8 -*-
"""Bounded in-memory TTL cache.

One instance per concern (verified tokens, recently written plans), built in
``create_app`` and handed to whoever needs it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TTLCache(Generic[V]):
    def __init__(
        self,
        *,
        name: str,
        maxsize: int,
        ttl: float,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.name = name
        self.maxsize = maxsize
        self.ttl = ttl
        self._timer = timer
        self._items: "OrderedDict[Hashable, Tuple[float, V]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Optional[V] = None) -> Optional[V]:
        now = self._timer()
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                self.misses += 1
                return default
            expires_at, value = entry
            if expires_at <= now:
                del self._items[key]
                self.misses += 1
                return default
            self.hits += 1
            return value

    def set(self, key: Hashable, value: V, ttl: float | None = None) -> None:
        expires_at = self._timer() + (ttl if ttl is not None else self.ttl)
        with self._lock:
            if key in self._items:
                del self._items[key]
            self._items[key] = (expires_at, value)
            self._evict_locked()

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def _evict_locked(self) -> None:
        now = self._timer()
        expired = [k for k, (exp, _) in self._items.items() if exp <= now]
        for k in expired:
            del self._items[k]
        while len(self._items) > self.maxsize:
            # Oldest insertion goes first.
            self._items.popitem(last=False)
            logger.debug("cache %s full; evicted oldest entry", self.name)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        now = self._timer()
        with self._lock:
            return sum(1 for exp, _ in self._items.values() if exp > now)
