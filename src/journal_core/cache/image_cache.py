"""Bounded in-memory image cache with LRU eviction."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
import threading
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field

from journal_core.utils.constants import IMAGE_CACHE_BYTES_LIMIT, IMAGE_CACHE_COUNT_LIMIT

logger = Logger(UTC=True)


class CacheEntry(BaseModel):
    """A cached payload and the byte cost charged against the cache budget."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(..., description="Opaque identity, typically a resource URL")
    payload: Any = Field(..., description="Raw bytes or a decoded image")
    size_cost: int = Field(..., ge=0, description="Bytes charged against the budget")


class ImageCache:
    """Key → image cache bounded by entry count and aggregate byte cost.

    Entries are kept in recency order (least recently used first). After
    every mutation ``len(cache) <= capacity_count`` and
    ``total_cost <= capacity_bytes`` hold.

    All public methods are protected by a lock so the cache can be read
    from the UI context while background workers fill it. A ``put``
    racing a ``get`` on the same key returns either the old or the new
    payload, never a mix.

    The cache never raises for missing keys or oversized payloads.
    """

    def __init__(
        self,
        *,
        capacity_count: int = IMAGE_CACHE_COUNT_LIMIT,
        capacity_bytes: int = IMAGE_CACHE_BYTES_LIMIT,
    ) -> None:
        if capacity_count < 1:
            raise ValueError("capacity_count must be at least 1")
        if capacity_bytes < 0:
            raise ValueError("capacity_bytes must be zero or positive")

        self.capacity_count = capacity_count
        self.capacity_bytes = capacity_bytes

        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._total_cost = 0
        self._lock = threading.Lock()
        self._eviction_listeners: list[Callable[[str], None]] = []

    def get(self, key: str) -> Any | None:
        """Return the payload for *key* and mark it most recently used."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry.payload

    def put(self, key: str, payload: Any, size_cost: int) -> None:
        """Insert or replace *key*, evicting least recently used entries as needed.

        A payload larger than the whole byte budget is not stored; any
        previous entry under the same key is dropped instead.
        """
        size_cost = max(0, int(size_cost))
        removed: list[str] = []

        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._total_cost -= previous.size_cost

            if size_cost > self.capacity_bytes:
                logger.warning(
                    "Payload exceeds cache byte budget, not cached",
                    extra={"key": key, "size_cost": size_cost, "capacity": self.capacity_bytes},
                )
                if previous is not None:
                    removed.append(key)
            else:
                self._entries[key] = CacheEntry(key=key, payload=payload, size_cost=size_cost)
                self._total_cost += size_cost
                removed.extend(self._evict_locked(protected=key))

        self._notify_removed(removed)

    def remove(self, key: str) -> None:
        """Drop *key* from the cache if present."""
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is not None:
                self._total_cost -= entry.size_cost

        if entry is not None:
            self._notify_removed([key])

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            keys = list(self._entries)
            self._entries.clear()
            self._total_cost = 0

        if keys:
            logger.info("Image cache cleared", extra={"count": len(keys)})
        self._notify_removed(keys)

    def add_eviction_listener(self, listener: Callable[[str], None]) -> None:
        """Call *listener* with every key that leaves the cache.

        Replacing a key with a new payload is not a removal.
        """
        self._eviction_listeners.append(listener)

    def keys(self) -> list[str]:
        """Return keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    @property
    def total_cost(self) -> int:
        with self._lock:
            return self._total_cost

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def _evict_locked(self, *, protected: str) -> list[str]:
        evicted: list[str] = []

        while len(self._entries) > self.capacity_count or self._total_cost > self.capacity_bytes:
            oldest_key = next(iter(self._entries))
            if oldest_key == protected:
                break
            entry = self._entries.pop(oldest_key)
            self._total_cost -= entry.size_cost
            evicted.append(oldest_key)

        if evicted:
            logger.debug(
                "Evicted least recently used images",
                extra={"evicted": len(evicted), "total_cost": self._total_cost},
            )

        return evicted

    def _notify_removed(self, keys: list[str]) -> None:
        for key in keys:
            for listener in list(self._eviction_listeners):
                try:
                    listener(key)
                except Exception:
                    logger.exception("Eviction listener failed", extra={"key": key})


_shared_cache: ImageCache | None = None
_shared_lock = threading.Lock()


def get_shared_image_cache() -> ImageCache:
    """Return the process-wide cache, creating it on first use."""
    global _shared_cache

    with _shared_lock:
        if _shared_cache is None:
            _shared_cache = ImageCache()
        return _shared_cache
