"""Signed cookie plugin.

Identifies anonymous clients by a random identifier stored in a cookie as
``<id>;<signature>``, where the signature is ``hash(secret + id)``.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional

from requestguard.core.config import settings
from requestguard.core.hashing import HashFunction, make_hash_function, resolve_hash
from requestguard.core.logging import get_logger
from requestguard.events import RequestEvent
from requestguard.limiters.base import Identity, RateLimiterPlugin
from requestguard.rate import Rates

logger = get_logger(__name__)


@dataclass
class CookieRateLimiterOptions:
    """Options of the cookie plugin.

    Attributes:
        name: Cookie name
        secret: Secret mixed into the cookie signature
        rate: One rate or a list of rates
        preflight: If True, ``preflight`` must be called before a counted
            request; requests without a valid cookie are rejected. If False,
            a new cookie is issued whenever it is missing or invalid.
        serialize_options: Overrides for the cookie attributes, using
            Starlette's ``set_cookie`` argument names
        hash_function: Signature hash (defaults to the limiter's)
    """
    name: str
    secret: str
    rate: Rates
    preflight: bool
    serialize_options: Optional[Dict[str, Any]] = None
    hash_function: Optional[HashFunction] = None


class CookieRateLimiter(RateLimiterPlugin):
    """Counts requests per signed cookie identifier."""

    reason = "cookie"

    def __init__(self, options: CookieRateLimiterOptions):
        super().__init__(options.rate)
        self.cookie_id = options.name
        self.require_preflight = options.preflight
        self._secret = options.secret
        self._hash_function = options.hash_function or make_hash_function(
            settings.hash_algorithm
        )
        self.cookie_options: Dict[str, Any] = {
            "path": settings.cookie_path,
            "httponly": settings.cookie_http_only,
            "max_age": settings.cookie_max_age,
            "samesite": settings.cookie_same_site,
            "secure": settings.cookie_secure,
            **(options.serialize_options or {}),
        }

    async def hash(self, event: RequestEvent, extra: Any = None) -> Identity:
        user_id = await self._user_id_from_cookie(event.cookies.get(self.cookie_id), event)
        return Identity.of(user_id) if user_id else Identity.DENY

    async def preflight(self, event: RequestEvent) -> str:
        """Make sure the client holds a valid cookie.

        Must be called (and awaited) before the counted request when the
        plugin requires preflight, typically when the form is rendered.

        Returns:
            The identifier of the existing valid cookie, or of a newly set one
        """
        data = event.cookies.get(self.cookie_id)
        if data:
            user_id = await self._verify(data)
            if user_id:
                return user_id

        user_id = secrets.token_urlsafe(settings.cookie_id_bytes)
        signature = await resolve_hash(self._hash_function, self._secret + user_id)
        event.cookies.set(self.cookie_id, f"{user_id};{signature}", **self.cookie_options)
        logger.debug(f"Issued rate limit cookie {self.cookie_id}")
        return user_id

    async def _user_id_from_cookie(
        self, cookie: Optional[str], event: RequestEvent
    ) -> Optional[str]:
        user_id = await self._verify(cookie) if cookie else None
        if user_id:
            return user_id
        if self.require_preflight:
            return None
        return await self.preflight(event)

    async def _verify(self, cookie: str) -> Optional[str]:
        """Return the identifier of a well-formed, correctly signed cookie."""
        user_id, _, signature = cookie.partition(";")
        if not user_id or not signature:
            return None
        expected = await resolve_hash(self._hash_function, self._secret + user_id)
        if not secrets.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            return None
        return user_id
