"""In-memory store of retry-after timestamps."""

from requestguard.stores.base import ExpiringStore


class RetryAfterStore(ExpiringStore):
    """Remembers when a limited key may retry.

    ``add`` returns an absolute timestamp in epoch milliseconds. The first
    call in a window fixes it to ``now + ttl``; later calls in the same
    window return the same value, so a caller sees a countdown instead of
    a window that restarts on every rejected attempt.
    """

    async def add(self, key: str, ttl: int) -> int:
        async with self._lock:
            now = self._clock()
            entry = self._get(key, now)
            if entry is not None:
                return entry.value

            retry_after = now + ttl
            self._set(key, retry_after, ttl, now)
            return retry_after
