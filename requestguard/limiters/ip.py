from typing import Any

from requestguard.events import RequestEvent
from requestguard.limiters.base import Identity, RateLimiterPlugin


class IPRateLimiter(RateLimiterPlugin):
    """Counts requests per client address."""

    reason = "IP"

    async def hash(self, event: RequestEvent, extra: Any = None) -> Identity:
        return Identity.of(event.get_client_address())
