"""In-memory TTL cache for catalog results.

Entries are ``{data, timestamp, ttl}``; an entry is valid while
``now - timestamp < ttl``. Expired entries are evicted lazily on the next
read, never swept in the background.

The clock is injectable so tests can move time forward without sleeping.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the moment it was written.

    Attributes:
        data: Cached value.
        timestamp: Clock reading when the entry was written (seconds).
        ttl: Lifetime in seconds.
    """

    data: Any
    timestamp: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return (now - self.timestamp) < self.ttl


@dataclass
class TTLCache:
    """Keyed in-memory cache with per-entry TTL.

    No locking: reads and writes happen synchronously between event-loop
    suspension points. Two concurrent misses on the same key both recompute.
    """

    default_ttl: float = 300.0
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self.clock()):
            del self._entries[key]
            logger.debug("Cache entry expired: key=%s", key)
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        self._entries[key] = CacheEntry(
            data=data,
            timestamp=self.clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def invalidate(self, predicate: Callable[[str], bool]) -> list[str]:
        """Delete every key matching ``predicate``; return the deleted keys."""
        doomed = [k for k in self._entries if predicate(k)]
        for key in doomed:
            del self._entries[key]
        return doomed

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> Iterable[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> dict[str, Any]:
        """Size, keys and summed entry age (seconds), expired entries included."""
        now = self.clock()
        return {
            "size": len(self._entries),
            "keys": list(self._entries.keys()),
            "total_age": sum(now - e.timestamp for e in self._entries.values()),
        }


__all__ = ["CacheEntry", "TTLCache"]
