"""Modular request rate limiter.

Combines independent identity plugins (client address, address and
User-Agent, signed cookie, or custom logic) into one limited / not
limited decision per request.
"""

__version__ = "0.1.0"

from requestguard.events import RequestEvent, StarletteRequestEvent
from requestguard.exceptions import (
    ConfigurationError,
    EmptyIdentityError,
    InvalidRateError,
    RateLimitExceededError,
    RateLimiterException,
)
from requestguard.limiters import (
    CloudflareIPRateLimiter,
    CloudflareIPUARateLimiter,
    CookieRateLimiter,
    CookieRateLimiterOptions,
    Identity,
    IdentityKind,
    IPRateLimiter,
    IPUserAgentRateLimiter,
    RateLimiterPlugin,
)
from requestguard.rate import RATE_UNITS, Rate, ttl_time
from requestguard.rate_limiter import LimitResult, RateLimiter, RateLimitStatus
from requestguard.retry_after import RetryAfterRateLimiter, RetryAfterStatus
from requestguard.stores import RateLimiterStore, RetryAfterStore, TTLStore

__all__ = [
    # Limiters
    "RateLimiter",
    "RetryAfterRateLimiter",
    "LimitResult",
    "RateLimitStatus",
    "RetryAfterStatus",
    # Rates
    "Rate",
    "RATE_UNITS",
    "ttl_time",
    # Plugins
    "Identity",
    "IdentityKind",
    "RateLimiterPlugin",
    "IPRateLimiter",
    "IPUserAgentRateLimiter",
    "CloudflareIPRateLimiter",
    "CloudflareIPUARateLimiter",
    "CookieRateLimiter",
    "CookieRateLimiterOptions",
    # Stores
    "RateLimiterStore",
    "TTLStore",
    "RetryAfterStore",
    # Requests
    "RequestEvent",
    "StarletteRequestEvent",
    # Exceptions
    "RateLimiterException",
    "ConfigurationError",
    "InvalidRateError",
    "EmptyIdentityError",
    "RateLimitExceededError",
]
