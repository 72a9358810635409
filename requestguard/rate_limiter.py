"""Plugin chain rate limiter.

Each configured plugin is flattened into one slot per rate. Slots are
evaluated from the shortest window to the longest, so the strictest checks
run first and a rejection stops the chain before broader counters are
touched.
"""

from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from requestguard.core.config import settings
from requestguard.core.hashing import HashFunction, make_hash_function, resolve_hash
from requestguard.core.logging import get_log_context, get_logger
from requestguard.core.utils import Clock, maybe_await, now_ms
from requestguard.events import RequestEvent
from requestguard.exceptions import ConfigurationError, EmptyIdentityError
from requestguard.limiters.base import Identity, IdentityKind
from requestguard.limiters.cookie import CookieRateLimiter, CookieRateLimiterOptions
from requestguard.limiters.ip import IPRateLimiter
from requestguard.limiters.ip_ua import IPUserAgentRateLimiter
from requestguard.rate import Rates, normalize_rates
from requestguard.stores.base import RateLimiterStore
from requestguard.stores.ttl_store import TTLStore

logger = get_logger(__name__)

Reason = Union[str, int]
OnLimited = Callable[[RequestEvent, str], Union[Optional[bool], Awaitable[Optional[bool]]]]


@dataclass(frozen=True)
class _Slot:
    """One rate of one plugin."""
    plugin: Any
    limit: int
    ttl: int
    index: int

    @property
    def reason(self) -> Reason:
        reason = getattr(self.plugin, "reason", None)
        return reason if reason is not None else self.index

    @property
    def plugin_name(self) -> str:
        return type(self.plugin).__name__


@dataclass
class LimitResult:
    """Full outcome of an evaluation.

    ``key`` is the counter key of the slot that limited the request, or None
    when no counter was involved (rejection, or no plugin produced a token).
    ``ttl`` is the window of the deciding slot in milliseconds.
    """
    limited: bool
    key: Optional[str]
    ttl: int
    reason: Optional[Reason] = None
    slot: Optional[int] = None


@dataclass
class RateLimitStatus:
    """Result of ``RateLimiter.check``."""
    limited: bool
    reason: Optional[Reason] = None


def _coerce_cookie_options(
    options: Union[CookieRateLimiterOptions, Dict[str, Any]]
) -> CookieRateLimiterOptions:
    if isinstance(options, CookieRateLimiterOptions):
        return options
    try:
        return CookieRateLimiterOptions(**options)
    except TypeError as e:
        raise ConfigurationError(f"Invalid cookie options: {e}") from e


class RateLimiter:
    """Decides whether a request is rate limited.

    Example:
        >>> limiter = RateLimiter(
        ...     ip=(10, "h"),
        ...     ip_ua=[(5, "m"), (1, "s")],
        ...     cookie={"name": "limiterid", "secret": "SECRET",
        ...             "rate": (2, "m"), "preflight": True},
        ... )
        >>> if await limiter.is_limited(StarletteRequestEvent(request, response)):
        ...     raise HTTPException(status_code=429)
    """

    def __init__(
        self,
        *,
        ip: Optional[Rates] = None,
        ip_ua: Optional[Rates] = None,
        cookie: Union[CookieRateLimiterOptions, Dict[str, Any], None] = None,
        plugins: Optional[Sequence[Any]] = None,
        store: Optional[RateLimiterStore] = None,
        max_items: Optional[int] = None,
        hash_function: Optional[HashFunction] = None,
        on_limited: Optional[OnLimited] = None,
        rates: Optional[Dict[str, Any]] = None,
        clock: Clock = now_ms,
    ):
        """Initialize the rate limiter.

        Args:
            ip: Rate(s) per client address
            ip_ua: Rate(s) per client address and User-Agent
            cookie: Options of the signed cookie plugin
            plugins: Custom plugins, evaluated together with the built-ins
            store: Counter store (defaults to an in-memory ``TTLStore``)
            max_items: Cap on entries of the default store
            hash_function: Digest for counter keys and cookie signatures
            on_limited: Called with ``(event, "rate" | "rejected")`` when a
                request is about to be limited; returning True lets it through
            rates: Deprecated; dict with "IP", "IPUA" and "cookie" keys
            clock: Millisecond clock for the default store

        Raises:
            ConfigurationError: If no plugin is configured or a rate is invalid
        """
        self._on_limited = on_limited
        self._hash_function = hash_function or make_hash_function(settings.hash_algorithm)
        if not callable(self._hash_function):
            raise ConfigurationError("hash_function must be callable")

        rates = rates or {}
        if rates:
            logger.warning("The 'rates' option is deprecated, pass ip, ip_ua and cookie directly")

        configured: List[Any] = list(plugins or [])

        ip_rates = ip if ip is not None else rates.get("IP")
        if ip_rates is not None:
            configured.append(IPRateLimiter(ip_rates))

        ip_ua_rates = ip_ua if ip_ua is not None else rates.get("IPUA")
        if ip_ua_rates is not None:
            configured.append(IPUserAgentRateLimiter(ip_ua_rates))

        self.cookie_limiter: Optional[CookieRateLimiter] = None
        cookie_options = cookie if cookie is not None else rates.get("cookie")
        if cookie_options is not None:
            cookie_options = _coerce_cookie_options(cookie_options)
            if cookie_options.hash_function is None:
                cookie_options = replace(cookie_options, hash_function=self._hash_function)
            self.cookie_limiter = CookieRateLimiter(cookie_options)
            configured.append(self.cookie_limiter)

        self._slots = self._build_slots(configured)
        max_ttl = max(slot.ttl for slot in self._slots)

        if store is None:
            store = TTLStore(
                max_items=max_items if max_items is not None else settings.store_max_items,
                clock=clock,
            )
        self._store: RateLimiterStore = store
        logger.debug(
            f"RateLimiter configured with {len(self._slots)} slots, "
            f"longest window {max_ttl} ms"
        )

    @staticmethod
    def _build_slots(plugins: List[Any]) -> Tuple[_Slot, ...]:
        if not plugins:
            raise ConfigurationError("No plugins set for RateLimiter!")

        unsorted = []
        for plugin in plugins:
            name = type(plugin).__name__
            if not callable(getattr(plugin, "hash", None)) or not hasattr(plugin, "rate"):
                raise ConfigurationError(f"{name} is not a rate limiter plugin")
            plugin_rates = normalize_rates(plugin.rate)
            if not plugin_rates:
                raise ConfigurationError(f"Empty rate for limiter {name}")
            for rate in plugin_rates:
                if rate.unit == "ms":
                    logger.warning(
                        f"RateLimiter: The 'ms' unit is not reliable due to OS timing issues ({name})."
                    )
                unsorted.append((plugin, rate.limit, rate.ttl))

        # Shortest window first, then lowest limit; sort is stable
        unsorted.sort(key=lambda item: (item[2], item[1]))
        return tuple(
            _Slot(plugin=plugin, limit=limit, ttl=ttl, index=index)
            for index, (plugin, limit, ttl) in enumerate(unsorted)
        )

    @property
    def slots(self) -> Tuple[_Slot, ...]:
        """Evaluation slots in evaluation order."""
        return self._slots

    @property
    def store(self) -> RateLimiterStore:
        return self._store

    async def is_limited(self, event: RequestEvent, extra: Any = None) -> bool:
        """Check if a request is rate limited.

        Args:
            event: The request
            extra: Application data made available to plugins

        Returns:
            True if the request is limited, False otherwise
        """
        return (await self.evaluate(event, extra)).limited

    async def check(self, event: RequestEvent, extra: Any = None) -> RateLimitStatus:
        """Check a request and report which plugin limited it.

        The reason is "IP", "IPUA", "cookie", or the slot index for
        custom plugins. The Cloudflare plugins report "IP" and "IPUA" like
        the built-in address plugins they replace.
        """
        result = await self.evaluate(event, extra)
        if not result.limited:
            return RateLimitStatus(limited=False)
        return RateLimitStatus(limited=True, reason=result.reason)

    async def clear(self) -> None:
        """Clear all rate limits."""
        await maybe_await(self._store.clear())

    async def evaluate(self, event: RequestEvent, extra: Any = None) -> LimitResult:
        """Run the plugin chain for a request.

        Raises:
            EmptyIdentityError: If a plugin returns an empty token
        """
        limited: Optional[bool] = None

        for slot in self._slots:
            identity = Identity.coerce(await maybe_await(slot.plugin.hash(event, extra)))

            if identity.kind is IdentityKind.DENY:
                if await self._override(event, "rejected", slot):
                    return LimitResult(limited=False, key=None, ttl=slot.ttl)
                return self._limited(slot, key=None)

            if identity.kind is IdentityKind.INDETERMINATE:
                if limited is None:
                    limited = True
                continue

            if identity.kind is IdentityKind.ALLOW:
                return LimitResult(limited=False, key=None, ttl=slot.ttl)

            if not identity.token:
                logger.error(
                    "Empty identity token",
                    extra=get_log_context(slot=slot.index, plugin=slot.plugin_name),
                )
                raise EmptyIdentityError(slot.plugin_name)

            limited = False

            # The slot index keeps identical tokens of different slots apart
            key = str(slot.index) + await resolve_hash(self._hash_function, identity.token)
            count = await maybe_await(self._store.add(key, slot.ttl))

            if count > slot.limit:
                if await self._override(event, "rate", slot):
                    return LimitResult(limited=False, key=key, ttl=slot.ttl)
                return self._limited(slot, key=key)

        last = self._slots[-1]
        if limited:
            return self._limited(last, key=None)
        return LimitResult(limited=False, key=None, ttl=last.ttl)

    async def _override(self, event: RequestEvent, reason: str, slot: _Slot) -> bool:
        if self._on_limited is None:
            return False
        status = await maybe_await(self._on_limited(event, reason))
        if status is True:
            logger.info(
                "on_limited callback let a limited request through",
                extra=get_log_context(slot=slot.index, reason=slot.reason),
            )
            return True
        return False

    def _limited(self, slot: _Slot, key: Optional[str]) -> LimitResult:
        logger.info(
            "Request limited",
            extra=get_log_context(
                slot=slot.index,
                reason=slot.reason,
                plugin=slot.plugin_name,
                window_ms=slot.ttl,
                limit=slot.limit,
            ),
        )
        return LimitResult(
            limited=True, key=key, ttl=slot.ttl, reason=slot.reason, slot=slot.index
        )
