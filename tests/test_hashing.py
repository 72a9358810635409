"""Tests for hash functions and exceptions."""

import hashlib

import pytest

from requestguard.core.hashing import make_hash_function, resolve_hash, sha256_hex
from requestguard.exceptions import (
    ConfigurationError,
    EmptyIdentityError,
    RateLimitExceededError,
)


class TestHashFunctions:
    """Tests for digest helpers."""

    def test_sha256_hex(self):
        """Test SHA256 hex digest of a string."""
        assert sha256_hex("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_default_algorithm_is_sha256(self):
        """Test that sha256 maps to the built-in helper."""
        assert make_hash_function("SHA256") is sha256_hex

    def test_other_algorithm(self):
        """Test building a hash function for another hashlib algorithm."""
        blake = make_hash_function("blake2b")
        assert blake("abc") == hashlib.blake2b(b"abc").hexdigest()

    @pytest.mark.parametrize("algorithm", ["nope", "shake_128"])
    def test_unsupported_algorithm(self, algorithm):
        """Test that unknown and variable length algorithms are rejected."""
        with pytest.raises(ConfigurationError):
            make_hash_function(algorithm)

    @pytest.mark.asyncio
    async def test_resolve_sync_and_async(self):
        """Test that resolve_hash handles sync and async functions."""
        async def digest(data: str) -> str:
            return data.upper()

        assert await resolve_hash(sha256_hex, "abc") == sha256_hex("abc")
        assert await resolve_hash(digest, "abc") == "ABC"


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_rate_limit_exceeded_with_retry_after(self):
        """Test the 429 error with a Retry-After value."""
        exc = RateLimitExceededError(reason="IP", retry_after=30)

        assert exc.status_code == 429
        assert exc.headers == {"Retry-After": "30"}
        body = exc.to_response()
        assert body["error"] == "rate_limit_exceeded"
        assert body["reason"] == "IP"
        assert body["retry_after"] == 30
        assert "30 seconds" in body["message"]

    def test_rate_limit_exceeded_without_retry_after(self):
        """Test the 429 error without a Retry-After value."""
        exc = RateLimitExceededError(reason=0)
        assert exc.headers == {}
        assert exc.to_response()["reason"] == 0

    def test_empty_identity_message(self):
        """Test the empty identity error message."""
        exc = EmptyIdentityError("IPRateLimiter")
        assert isinstance(exc, ConfigurationError)
        assert str(exc) == "Empty hash returned from rate limiter IPRateLimiter"
