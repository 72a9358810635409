from typing import Any

from requestguard.events import RequestEvent
from requestguard.limiters.base import Identity, RateLimiterPlugin


class IPUserAgentRateLimiter(RateLimiterPlugin):
    """Counts requests per client address and User-Agent.

    Requests without a User-Agent header are rejected.
    """

    reason = "IPUA"

    async def hash(self, event: RequestEvent, extra: Any = None) -> Identity:
        user_agent = event.headers.get("user-agent")
        if not user_agent:
            return Identity.DENY
        return Identity.of(event.get_client_address() + user_agent)
