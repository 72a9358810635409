"""Plugin interface and identity results.

A plugin derives an identity from a request. The identity is either a
token to count the request under, or a verdict that stops the chain.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, ClassVar, Optional, Union

from requestguard.events import RequestEvent
from requestguard.rate import Rates


class IdentityKind(str, Enum):
    """What a plugin decided about a request."""
    TOKEN = "token"
    ALLOW = "allow"
    DENY = "deny"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class Identity:
    """Result of a plugin's ``hash``.

    Use ``Identity.of(token)`` to count the request under ``token``, or one
    of the ``ALLOW``, ``DENY`` and ``INDETERMINATE`` constants.
    """
    kind: IdentityKind
    token: Optional[str] = None

    ALLOW: ClassVar["Identity"]
    DENY: ClassVar["Identity"]
    INDETERMINATE: ClassVar["Identity"]

    @classmethod
    def of(cls, token: str) -> "Identity":
        return cls(IdentityKind.TOKEN, token)

    @classmethod
    def coerce(cls, value: "IdentityLike") -> "Identity":
        """Convert a raw plugin result to an ``Identity``.

        ``True`` allows, ``False`` denies, ``None`` abstains and a string is
        a token. An empty string stays an empty token; the evaluator
        rejects it.
        """
        if isinstance(value, Identity):
            return value
        if value is True:
            return cls.ALLOW
        if value is False:
            return cls.DENY
        if value is None:
            return cls.INDETERMINATE
        if isinstance(value, str):
            return cls.of(value)
        raise TypeError(f"Invalid identity returned by plugin: {value!r}")


Identity.ALLOW = Identity(IdentityKind.ALLOW)
Identity.DENY = Identity(IdentityKind.DENY)
Identity.INDETERMINATE = Identity(IdentityKind.INDETERMINATE)

IdentityLike = Union[Identity, str, bool, None]


class RateLimiterPlugin(ABC):
    """Abstract base class for identity plugins.

    Subclasses set ``rate`` (one rate or a list of rates) and implement
    ``hash``. Objects that do not inherit from this class are accepted by
    the rate limiter as long as they provide both.

    Attributes:
        reason: Label reported when this plugin limits a request. None
            reports the slot index instead.
    """

    reason: ClassVar[Optional[str]] = None

    def __init__(self, rate: Rates):
        self._rate = rate

    @property
    def rate(self) -> Rates:
        return self._rate

    @abstractmethod
    def hash(
        self, event: RequestEvent, extra: Any = None
    ) -> Union[IdentityLike, Awaitable[IdentityLike]]:
        """Derive the identity of a request.

        Args:
            event: The request
            extra: Application data passed to the limiter with the request

        Returns:
            An ``Identity`` or a raw str / bool / None, possibly awaitable
        """
        pass
