"""Shared fixtures for the rate limiter tests."""

from typing import Any, Dict, Optional

import pytest
from starlette.datastructures import MutableHeaders

from requestguard.rate import Rates


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class MockCookies:
    """In-memory cookie jar recording the options of the last write."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.options: Dict[str, Dict[str, Any]] = {}

    def get(self, name: str) -> Optional[str]:
        return self.store.get(name)

    def set(self, name: str, value: str, **options: Any) -> None:
        self.store[name] = value
        self.options[name] = options

    def delete(self, name: str, **options: Any) -> None:
        self.store.pop(name, None)


class MockEvent:
    """Request event with a fixed client address and mutable headers."""

    def __init__(self, address: str = "345.456.789.0", user_agent: Optional[str] = "Chrome"):
        self.address = address
        self.headers = MutableHeaders()
        if user_agent is not None:
            self.headers["user-agent"] = user_agent
        self.cookies = MockCookies()

    def get_client_address(self) -> str:
        return self.address


class ShortCircuitPlugin:
    """Plugin returning the same raw value for every request."""

    def __init__(self, value, rate: Rates):
        self.rate = rate
        self.value = value
        self.calls = 0

    async def hash(self, event, extra=None):
        self.calls += 1
        return self.value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def event():
    return MockEvent()
