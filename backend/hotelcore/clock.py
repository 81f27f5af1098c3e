"""
Clock abstraction: wall-clock source injected into the lifecycle jobs

Persisted instants are naive UTC datetimes, so every clock hands out naive UTC.
"""
from datetime import datetime, timedelta, UTC
from typing import Protocol


class Clock(Protocol):
    """Anything with a ``now()`` returning a naive UTC datetime."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Real wall clock"""

    def now(self) -> datetime:
        return datetime.now(UTC).replace(tzinfo=None)


class FixedClock:
    """Clock frozen at a given instant (tests, manual replays)"""

    def __init__(self, instant: datetime):
        self._instant = to_naive_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta) -> None:
        self._instant = self._instant + timedelta(**delta)


def to_naive_utc(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
