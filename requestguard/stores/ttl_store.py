"""In-memory time-windowed counter store."""

from requestguard.stores.base import ExpiringStore


class TTLStore(ExpiringStore):
    """Hit counter per key, reset when the key's window elapses.

    The window starts at the first hit. Hits inside the window increment
    the counter without postponing its expiry.
    """

    async def add(self, key: str, ttl: int) -> int:
        async with self._lock:
            now = self._clock()
            entry = self._get(key, now)
            count = (entry.value if entry else 0) + 1
            self._set(key, count, ttl, now)
            return count
