"""Rate limiter that also reports how long a limited client should wait."""

import math
from dataclasses import dataclass
from typing import Any, Optional

from requestguard.core.utils import Clock, maybe_await, now_ms
from requestguard.events import RequestEvent
from requestguard.rate_limiter import RateLimiter, Reason
from requestguard.stores.base import RateLimiterStore
from requestguard.stores.retry_after_store import RetryAfterStore


@dataclass
class RetryAfterStatus:
    """Result of ``RetryAfterRateLimiter.check``.

    ``retry_after`` is in whole seconds, suitable for a Retry-After header,
    and 0 when the request is not limited.
    """
    limited: bool
    retry_after: int = 0
    reason: Optional[Reason] = None


class RetryAfterRateLimiter(RateLimiter):
    """``RateLimiter`` whose ``check`` includes a Retry-After value.

    Repeated rejections inside the same window report a countdown to the
    end of that window, not a fresh full window each time.
    """

    def __init__(
        self,
        retry_after_store: Optional[RateLimiterStore] = None,
        clock: Clock = now_ms,
        **options: Any,
    ):
        """Initialize the rate limiter.

        Args:
            retry_after_store: Store of retry timestamps (defaults to an
                in-memory ``RetryAfterStore``)
            clock: Millisecond clock shared by the default stores
            **options: ``RateLimiter`` options
        """
        super().__init__(clock=clock, **options)
        self._clock = clock
        if retry_after_store is None:
            retry_after_store = RetryAfterStore(clock=clock)
        self._retry_after = retry_after_store

    @staticmethod
    def _to_seconds(ms: float) -> int:
        return max(0, math.floor(ms / 1000))

    async def clear(self) -> None:
        """Clear all rate limits and retry timestamps."""
        await maybe_await(self._retry_after.clear())
        await super().clear()

    async def check(self, event: RequestEvent, extra: Any = None) -> RetryAfterStatus:
        """Check a request and compute its Retry-After seconds."""
        result = await self.evaluate(event, extra)

        if not result.limited:
            return RetryAfterStatus(limited=False, retry_after=0)

        if result.key is None:
            return RetryAfterStatus(
                limited=True,
                retry_after=math.ceil(result.ttl / 1000),
                reason=result.reason,
            )

        # Read before add so a clock tick in between cannot lose a second
        now = self._clock()
        retry_at = await maybe_await(self._retry_after.add(result.key, result.ttl))
        return RetryAfterStatus(
            limited=True,
            retry_after=min(
                self._to_seconds(retry_at - now), math.ceil(result.ttl / 1000)
            ),
            reason=result.reason,
        )
