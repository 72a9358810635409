"""Custom exceptions for the rate limiter."""

from typing import Optional, Union


class RateLimiterException(Exception):
    """Base class for rate limiter exceptions with HTTP status code.

    All custom exceptions inherit from this class and define their
    specific status_code so callers can translate them consistently.
    """
    status_code: int = 500

    def __init__(self, message: str = "Rate limiter error"):
        self.message = message
        super().__init__(message)


class ConfigurationError(RateLimiterException):
    """Raised when the rate limiter is set up incorrectly.

    Never a rate decision: a misconfigured limiter aborts construction
    or the current evaluation.
    """


class InvalidRateError(ConfigurationError):
    """Raised when a rate has an unknown unit or a non-positive limit."""

    def __init__(self, rate: object, detail: Optional[str] = None):
        self.rate = rate
        super().__init__(detail or f"Invalid rate: {rate!r}")


class EmptyIdentityError(ConfigurationError):
    """Raised when a plugin produces an empty identity token."""

    def __init__(self, plugin_name: str):
        self.plugin_name = plugin_name
        super().__init__(f"Empty hash returned from rate limiter {plugin_name}")


class RateLimitExceededError(RateLimiterException):
    """Raised by applications to turn a limited verdict into a response.

    The evaluator never raises this itself. Maps to HTTP 429 Too Many
    Requests; ``headers`` carries Retry-After when it is known.
    """
    status_code = 429

    def __init__(
        self,
        reason: Union[str, int, None] = None,
        retry_after: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.reason = reason
        self.retry_after = retry_after
        message = detail or "Rate limit exceeded. Please try again later."
        if retry_after:
            message += f" Retry after {retry_after} seconds."
        super().__init__(message)

    @property
    def headers(self) -> dict:
        if self.retry_after is None:
            return {}
        return {"Retry-After": str(self.retry_after)}

    def to_response(self) -> dict:
        """Convert to an API error body."""
        return {
            "error": "rate_limit_exceeded",
            "message": self.message,
            "reason": self.reason,
            "retry_after": self.retry_after,
        }
