"""Utility functions shared by the stores and limiters."""

import inspect
import time
from typing import Any, Callable

Clock = Callable[[], float]


def now_ms() -> int:
    """Current wall-clock time in whole epoch milliseconds."""
    return time.time_ns() // 1_000_000


async def maybe_await(value: Any) -> Any:
    """Return ``value``, awaiting it first if it is awaitable.

    Plugins, callbacks and stores supplied by applications may be either
    plain functions or coroutines.
    """
    if inspect.isawaitable(value):
        return await value
    return value
