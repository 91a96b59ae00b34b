"""
vaultcache — TTL Parser

Normalizes TTL values into a timedelta or whole seconds.

Accepted inputs:
- None: no TTL given (the backend applies its default)
- int: seconds
- timedelta: passed through
- str: relative offset with a leading plus sign, e.g. "+1 minute",
  "+2 hours", "+1 day -30 minutes"; resolved against the wall clock at
  parse time so calendar units (months, years) are exact for "now"
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from dateutil.relativedelta import relativedelta

from ..errors import InvalidTtlError

TtlValue = int | timedelta | str | None

_UNITS: dict[str, tuple[str, int]] = {
    "s": ("seconds", 1),
    "sec": ("seconds", 1),
    "secs": ("seconds", 1),
    "second": ("seconds", 1),
    "seconds": ("seconds", 1),
    "min": ("minutes", 1),
    "mins": ("minutes", 1),
    "minute": ("minutes", 1),
    "minutes": ("minutes", 1),
    "hour": ("hours", 1),
    "hours": ("hours", 1),
    "day": ("days", 1),
    "days": ("days", 1),
    "week": ("weeks", 1),
    "weeks": ("weeks", 1),
    "fortnight": ("weeks", 2),
    "fortnights": ("weeks", 2),
    "month": ("months", 1),
    "months": ("months", 1),
    "year": ("years", 1),
    "years": ("years", 1),
}

_TERM = r"\s*([+-]?)\s*(\d+)\s*([a-zA-Z]+)"
_TERM_RE = re.compile(_TERM)
_EXPRESSION_RE = re.compile(rf"(?:{_TERM})+\s*")


class TtlParser:
    """
    Converts TTL values into timedelta objects or integer seconds.

    Strings without a leading "+" are rejected unconditionally, which also
    rules out negative offsets such as "-1 minute". An expression that nets
    to a point in the past ("+1 hour -2 hours") is rejected as well.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        """
        Initialize the parser.

        Args:
            clock: Returns the current instant; defaults to UTC wall clock
        """
        self._clock = clock or (lambda: datetime.now(UTC))

    def to_duration(self, ttl: TtlValue) -> timedelta | None:
        """
        Parse a TTL value into a timedelta.

        Args:
            ttl: TTL value to parse

        Returns:
            The parsed timedelta, or None if no TTL was provided

        Raises:
            InvalidTtlError: If the value is malformed or negative
        """
        if ttl is None:
            return None

        if isinstance(ttl, timedelta):
            if ttl < timedelta(0):
                raise InvalidTtlError("Duration must not be negative", ttl)
            return ttl

        if isinstance(ttl, bool):
            raise InvalidTtlError("Boolean is not a TTL", ttl)

        if isinstance(ttl, int):
            if ttl < 0:
                raise InvalidTtlError("Seconds must not be negative", ttl)
            return timedelta(seconds=ttl)

        if isinstance(ttl, str):
            return timedelta(seconds=self._relative_seconds(ttl))

        raise InvalidTtlError(f"Unsupported TTL type {type(ttl).__name__}", ttl)

    def to_seconds(self, ttl: TtlValue) -> int | None:
        """
        Parse a TTL value into whole seconds.

        Integers pass through without a timedelta round trip.
        """
        if isinstance(ttl, int) and not isinstance(ttl, bool):
            if ttl < 0:
                raise InvalidTtlError("Seconds must not be negative", ttl)
            return ttl

        duration = self.to_duration(ttl)
        if duration is None:
            return None
        return int(duration.total_seconds())

    def _relative_seconds(self, ttl: str) -> int:
        if not ttl.startswith("+"):
            raise InvalidTtlError("Must start with +", ttl)

        try:
            offset = self._parse_offset(ttl)
            now = self._clock()
            modified = now + offset
        except (ValueError, OverflowError) as e:
            raise InvalidTtlError(str(e), ttl) from e

        seconds = int((modified - now).total_seconds())
        if seconds < 0:
            raise InvalidTtlError("Calculated negative TTL from relative offset", ttl)
        return seconds

    @staticmethod
    def _parse_offset(expression: str) -> relativedelta:
        if not _EXPRESSION_RE.fullmatch(expression):
            raise ValueError(f"Failed to parse relative time expression: {expression!r}")

        offset = relativedelta()
        for sign, amount, unit in _TERM_RE.findall(expression):
            try:
                field, factor = _UNITS[unit.lower()]
            except KeyError:
                raise ValueError(f"Unknown time unit: {unit!r}") from None
            value = int(amount) * factor
            if sign == "-":
                value = -value
            offset += relativedelta(**{field: value})
        return offset
