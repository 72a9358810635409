"""Stores backing the rate limiter counters."""

from requestguard.stores.base import ExpiringStore, RateLimiterStore
from requestguard.stores.retry_after_store import RetryAfterStore
from requestguard.stores.ttl_store import TTLStore

__all__ = [
    "RateLimiterStore",
    "ExpiringStore",
    "TTLStore",
    "RetryAfterStore",
]
