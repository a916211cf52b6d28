"""
Time-expiring key/value cache for pricing and availability lookups.

Entries expire lazily: a lookup past an entry's expiry evicts it and
reports a miss. There is no size bound; entries that are never read
again stay until the process ends or clear() is called.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its storage and expiry times."""

    data: Any
    stored_at: float
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now <= self.expires_at


class TTLCache:
    """
    In-memory TTL cache.

    Values are returned as stored; callers must treat them as immutable
    snapshots. Safe for interleaved asyncio use because every mutation
    is a single dict operation.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            default_ttl: TTL in seconds used when set() is given none
            clock: Source of the current time in seconds
        """
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        now = self._clock()
        ttl = self._default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(data=value, stored_at=now, expires_at=now + ttl)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            # lazy eviction
            del self._entries[key]
            return None
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        return len(self._entries)
