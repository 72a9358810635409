"""Request adapters.

The limiter reads everything it needs about a request through the
``RequestEvent`` protocol: the client address, the headers and a cookie
jar. ``StarletteRequestEvent`` adapts a Starlette/FastAPI request.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from starlette.requests import Request
from starlette.responses import Response


class Cookies(Protocol):
    """Cookie jar of a single request."""

    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str, **options: Any) -> None:
        ...

    def delete(self, name: str, **options: Any) -> None:
        ...


class RequestEvent(Protocol):
    """What the rate limiter needs to know about a request."""

    headers: Mapping[str, str]
    cookies: Cookies

    def get_client_address(self) -> str:
        ...


class StarletteCookies:
    """Cookie jar backed by a Starlette request and response.

    Reads come from the request's Cookie header, overlaid with cookies
    written during this request. Writes go to ``response`` when one is
    attached; otherwise they are queued until ``apply`` is called.
    """

    def __init__(self, request: Request, response: Optional[Response] = None) -> None:
        self._request = request
        self._response = response
        self._written: Dict[str, Optional[str]] = {}
        self._pending: List[Tuple[str, str, Optional[str], Dict[str, Any]]] = []

    def get(self, name: str) -> Optional[str]:
        if name in self._written:
            return self._written[name]
        return self._request.cookies.get(name)

    def set(self, name: str, value: str, **options: Any) -> None:
        self._written[name] = value
        self._emit("set", name, value, options)

    def delete(self, name: str, **options: Any) -> None:
        self._written[name] = None
        self._emit("delete", name, None, options)

    def apply(self, response: Response) -> Response:
        """Write queued cookies to ``response`` and attach it for later writes."""
        self._response = response
        pending, self._pending = self._pending, []
        for action, name, value, options in pending:
            self._write(action, name, value, options)
        return response

    def _emit(self, action: str, name: str, value: Optional[str], options: Dict[str, Any]) -> None:
        if self._response is None:
            self._pending.append((action, name, value, options))
        else:
            self._write(action, name, value, options)

    def _write(self, action: str, name: str, value: Optional[str], options: Dict[str, Any]) -> None:
        if action == "set":
            self._response.set_cookie(name, value, **options)
        else:
            # delete_cookie only accepts the attributes identifying the cookie
            allowed = ("path", "domain", "secure", "httponly", "samesite")
            self._response.delete_cookie(
                name, **{k: v for k, v in options.items() if k in allowed}
            )


class StarletteRequestEvent:
    """``RequestEvent`` for Starlette and FastAPI handlers.

    Example:
        >>> @app.post("/register")
        ... async def register(request: Request, response: Response):
        ...     event = StarletteRequestEvent(request, response)
        ...     if await limiter.is_limited(event):
        ...         raise HTTPException(status_code=429)
    """

    def __init__(self, request: Request, response: Optional[Response] = None) -> None:
        self.request = request
        self.cookies = StarletteCookies(request, response)

    @property
    def headers(self) -> Mapping[str, str]:
        return self.request.headers

    def get_client_address(self) -> str:
        return self.request.client.host if self.request.client else "unknown"

    def apply_cookies(self, response: Response) -> Response:
        """Copy cookies set during evaluation onto ``response``."""
        return self.cookies.apply(response)
