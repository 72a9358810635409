"""Plugins for applications served behind Cloudflare.

Cloudflare passes the real client address in the ``cf-connecting-ip``
header. Only use these plugins when every request comes through the
proxy, otherwise clients can pick their own address.
"""

from typing import Any, Optional

from requestguard.core.config import settings
from requestguard.events import RequestEvent
from requestguard.limiters.base import Identity, RateLimiterPlugin
from requestguard.rate import Rates


class CloudflareIPRateLimiter(RateLimiterPlugin):
    """Counts requests per client address reported by the proxy."""

    reason = "IP"

    def __init__(self, rate: Rates, header: Optional[str] = None):
        super().__init__(rate)
        self.header = (header or settings.trusted_ip_header).lower()

    def client_address(self, event: RequestEvent) -> str:
        return event.headers.get(self.header) or event.get_client_address()

    async def hash(self, event: RequestEvent, extra: Any = None) -> Identity:
        return Identity.of(self.client_address(event))


class CloudflareIPUARateLimiter(RateLimiterPlugin):
    """Counts requests per proxied client address and User-Agent.

    Requests without a User-Agent header are rejected.
    """

    reason = "IPUA"

    def __init__(self, rate: Rates, header: Optional[str] = None):
        super().__init__(rate)
        self._ip = CloudflareIPRateLimiter(rate, header)

    async def hash(self, event: RequestEvent, extra: Any = None) -> Identity:
        user_agent = event.headers.get("user-agent")
        if not user_agent:
            return Identity.DENY
        return Identity.of(self._ip.client_address(event) + user_agent)
