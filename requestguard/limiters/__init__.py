"""Identity plugins for the rate limiter."""

from requestguard.limiters.base import Identity, IdentityKind, RateLimiterPlugin
from requestguard.limiters.cloudflare import CloudflareIPRateLimiter, CloudflareIPUARateLimiter
from requestguard.limiters.cookie import CookieRateLimiter, CookieRateLimiterOptions
from requestguard.limiters.ip import IPRateLimiter
from requestguard.limiters.ip_ua import IPUserAgentRateLimiter

__all__ = [
    "Identity",
    "IdentityKind",
    "RateLimiterPlugin",
    "IPRateLimiter",
    "IPUserAgentRateLimiter",
    "CloudflareIPRateLimiter",
    "CloudflareIPUARateLimiter",
    "CookieRateLimiter",
    "CookieRateLimiterOptions",
]
