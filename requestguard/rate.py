"""Rates and time units.

A rate is a ``(limit, unit)`` pair such as ``(5, "m")``: at most five
requests per minute. Units map to exact millisecond windows.
"""

from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

from requestguard.exceptions import InvalidRateError

_SECOND = 1000
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

# The "ms" unit is unreliable due to OS timer resolution.
RATE_UNITS: Dict[str, int] = {
    "ms": 1,
    "100ms": 100,
    "250ms": 250,
    "500ms": 500,
    "s": _SECOND,
    "2s": 2 * _SECOND,
    "5s": 5 * _SECOND,
    "10s": 10 * _SECOND,
    "15s": 15 * _SECOND,
    "30s": 30 * _SECOND,
    "45s": 45 * _SECOND,
    "m": _MINUTE,
    "2m": 2 * _MINUTE,
    "5m": 5 * _MINUTE,
    "10m": 10 * _MINUTE,
    "15m": 15 * _MINUTE,
    "30m": 30 * _MINUTE,
    "45m": 45 * _MINUTE,
    "h": _HOUR,
    "2h": 2 * _HOUR,
    "6h": 6 * _HOUR,
    "12h": 12 * _HOUR,
    "d": 24 * _HOUR,
}


class Rate(NamedTuple):
    """A limit of ``limit`` requests per ``unit``."""
    limit: int
    unit: str

    @property
    def ttl(self) -> int:
        """Window length in milliseconds."""
        return ttl_time(self.unit)


RateLike = Union[Rate, Tuple[int, str]]
Rates = Union[RateLike, Sequence[RateLike]]


def ttl_time(unit: str) -> int:
    """Convert a rate unit to milliseconds.

    Raises:
        InvalidRateError: If the unit is unknown
    """
    try:
        return RATE_UNITS[unit]
    except (KeyError, TypeError):
        raise InvalidRateError(unit, f"Invalid unit for ttl_time: {unit!r}") from None


def _is_single_rate(value: object) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and isinstance(value[1], str)
    )


def normalize_rates(rates: Rates) -> List[Rate]:
    """Turn a single rate or a list of rates into a list of ``Rate``.

    Raises:
        InvalidRateError: If a rate is malformed, has an unknown unit
            or a limit below one
    """
    if _is_single_rate(rates):
        rates = [rates]

    normalized = []
    for rate in rates:
        if not _is_single_rate(rate):
            raise InvalidRateError(rate)
        limit, unit = rate
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidRateError(rate, f"Rate limit must be a positive integer: {rate!r}")
        ttl_time(unit)
        normalized.append(Rate(limit, unit))
    return normalized
