"""Tests for the Starlette request adapter."""

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from requestguard import RateLimiter, RetryAfterRateLimiter, StarletteRequestEvent
from requestguard.exceptions import RateLimitExceededError


def make_request(headers=None, client=("10.1.2.3", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestStarletteRequestEvent:
    """Unit tests for the adapter."""

    def test_client_address(self):
        """Test that the client host is used as the address."""
        event = StarletteRequestEvent(make_request())
        assert event.get_client_address() == "10.1.2.3"

    def test_unknown_client(self):
        """Test that a request without client reports "unknown"."""
        event = StarletteRequestEvent(make_request(client=None))
        assert event.get_client_address() == "unknown"

    def test_headers_case_insensitive(self):
        """Test that header lookups ignore case."""
        event = StarletteRequestEvent(make_request({"User-Agent": "Firefox"}))
        assert event.headers.get("user-agent") == "Firefox"

    def test_reads_request_cookie(self):
        """Test that quoted request cookies are unquoted."""
        event = StarletteRequestEvent(make_request({"Cookie": 'rl="abc\\073sig"'}))
        assert event.cookies.get("rl") == "abc;sig"

    def test_set_cookie_writes_to_response(self):
        """Test that set writes a Set-Cookie header and is readable."""
        response = Response()
        event = StarletteRequestEvent(make_request(), response)
        event.cookies.set("rl", "abc;sig", path="/", httponly=True, samesite="strict")

        header = response.headers["set-cookie"]
        assert header.startswith('rl="abc\\073sig"')
        assert "HttpOnly" in header
        assert event.cookies.get("rl") == "abc;sig"

    def test_pending_cookies_applied_later(self):
        """Test that cookies are queued until apply_cookies is called."""
        event = StarletteRequestEvent(make_request())
        event.cookies.set("rl", "value", path="/")
        response = Response()

        assert "set-cookie" not in response.headers
        assert event.apply_cookies(response) is response
        assert response.headers["set-cookie"].startswith("rl=value")

    def test_delete_cookie(self):
        """Test that delete expires the cookie on the response."""
        response = Response()
        event = StarletteRequestEvent(make_request({"Cookie": "rl=value"}), response)
        event.cookies.delete("rl", path="/", max_age=10)

        assert event.cookies.get("rl") is None
        assert "Max-Age=0" in response.headers["set-cookie"]


@pytest.fixture
def app():
    limiter = RateLimiter(
        ip=(100, "h"),
        cookie={
            "name": "preflight-required",
            "secret": "VERY_SECRET",
            "rate": (2, "15s"),
            "preflight": True,
        },
    )
    retry_limiter = RetryAfterRateLimiter(ip_ua=(1, "m"))
    app = FastAPI()

    @app.exception_handler(RateLimitExceededError)
    async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
        return JSONResponse(exc.to_response(), status_code=exc.status_code, headers=exc.headers)

    @app.get("/preflight")
    async def preflight(request: Request, response: Response):
        await limiter.cookie_limiter.preflight(StarletteRequestEvent(request, response))
        return {"message": "Preflight"}

    @app.post("/submit")
    async def submit(request: Request, response: Response):
        status = await limiter.check(StarletteRequestEvent(request, response))
        if status.limited:
            raise RateLimitExceededError(reason=status.reason)
        return {"message": "Not limited"}

    @app.post("/retry")
    async def retry(request: Request):
        status = await retry_limiter.check(StarletteRequestEvent(request))
        if status.limited:
            raise RateLimitExceededError(reason=status.reason, retry_after=status.retry_after)
        return {"retry_after": 0}

    return app


class TestFastAPIIntegration:
    """End-to-end flows through a FastAPI app."""

    def test_submit_without_preflight_is_limited(self, app):
        """Test that a form post without preflight cookie gets 429."""
        client = TestClient(app)
        response = client.post("/submit")

        assert response.status_code == 429
        assert response.json()["reason"] == "cookie"

    def test_preflight_then_limit(self, app):
        """Test that a preflighted client is limited after two posts."""
        client = TestClient(app)
        preflight = client.get("/preflight")
        assert preflight.status_code == 200
        assert "preflight-required" in preflight.headers["set-cookie"]

        assert client.post("/submit").status_code == 200
        assert client.post("/submit").status_code == 200
        assert client.post("/submit").status_code == 429

    def test_preflight_keeps_existing_cookie(self, app):
        """Test that a second preflight does not replace a valid cookie."""
        client = TestClient(app)
        client.get("/preflight")
        second = client.get("/preflight")
        assert "set-cookie" not in second.headers

    def test_retry_after_header(self, app):
        """Test that the 429 response carries Retry-After."""
        client = TestClient(app, headers={"User-Agent": "pytest"})
        assert client.post("/retry").status_code == 200

        response = client.post("/retry")
        assert response.status_code == 429
        assert response.json()["reason"] == "IPUA"
        assert 0 < int(response.headers["Retry-After"]) <= 60
