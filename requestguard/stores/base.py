"""Store abstraction for the rate limiter.

Stores map an opaque key to an integer with a per-entry expiry. The
in-memory implementations share ``ExpiringStore``; any other backend only
has to implement ``RateLimiterStore``.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from requestguard.core.config import settings
from requestguard.core.utils import Clock, now_ms


@dataclass
class _StoreEntry:
    """Internal store entry with TTL tracking."""

    value: int
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the entry has expired."""
        return now >= self.expires_at


class RateLimiterStore(ABC):
    """Abstract base class for rate limiter stores.

    Custom stores (e.g. shared between processes) must inherit from this
    class, or provide the same two coroutines.
    """

    @abstractmethod
    async def add(self, key: str, ttl: int) -> int:
        """Record a hit for ``key``.

        Args:
            key: The counter key.
            ttl: Window length in milliseconds.

        Returns:
            The value now stored for the key.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove all entries, regardless of remaining TTL."""
        pass


class ExpiringStore(RateLimiterStore):
    """In-memory base with per-entry expiry and optional size cap.

    Uses an OrderedDict ordered by write time so that, when ``max_items``
    is exceeded, the least recently set entry is evicted first. Expiry is
    fixed when an entry is created; later writes keep it. Expired entries
    are swept when a new key is inserted, at most once per
    ``sweep_interval`` milliseconds.

    Note: This store is not distributed and data is lost when the
    process restarts.
    """

    def __init__(
        self,
        max_items: Optional[int] = None,
        clock: Clock = now_ms,
        sweep_interval: Optional[int] = None,
    ) -> None:
        """Initialize the store.

        Args:
            max_items: Maximum number of live entries (None = unbounded)
            clock: Function returning the current time in milliseconds
            sweep_interval: Minimum milliseconds between sweeps of expired
                entries (defaults to settings.store_sweep_interval)
        """
        if max_items is not None and max_items < 1:
            raise ValueError("max_items must be at least 1")
        if sweep_interval is None:
            sweep_interval = settings.store_sweep_interval
        if sweep_interval < 1:
            raise ValueError("sweep_interval must be at least 1")
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()
        self._max_items = max_items
        self._clock = clock
        self._data: OrderedDict[str, _StoreEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def _get(self, key: str, now: float) -> Optional[_StoreEntry]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            del self._data[key]
            return None
        return entry

    def _set(self, key: str, value: int, ttl: int, now: float) -> None:
        entry = self._get(key, now)
        if entry is None:
            if now - self._last_sweep >= self._sweep_interval:
                self._purge_expired(now)
            self._data[key] = _StoreEntry(value=value, expires_at=now + ttl)
        else:
            entry.value = value
            self._data.move_to_end(key)
        self._enforce_max_items()

    def _purge_expired(self, now: float) -> int:
        self._last_sweep = now
        expired_keys = [
            key for key, entry in self._data.items() if entry.is_expired(now)
        ]
        for key in expired_keys:
            del self._data[key]
        return len(expired_keys)

    def _enforce_max_items(self) -> None:
        if self._max_items is None:
            return
        while len(self._data) > self._max_items:
            self._data.popitem(last=False)

    async def clear(self) -> None:
        """Clear all entries from the store."""
        async with self._lock:
            self._data.clear()

    async def cleanup_expired(self) -> int:
        """Remove all expired entries from the store.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            return self._purge_expired(self._clock())
