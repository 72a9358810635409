"""Core utilities for the rate limiter."""

from requestguard.core.config import Settings, settings
from requestguard.core.hashing import HashFunction, make_hash_function, sha256_hex
from requestguard.core.logging import get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "HashFunction",
    "make_hash_function",
    "sha256_hex",
    "get_logger",
    "setup_logging",
]
