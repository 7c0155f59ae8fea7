"""
Clock -- injectable source of "now" for the payroll services.

Approval timestamps, overdue flags on compliance deadlines and the "days
until the next pay date" figure all read time through a Clock, so a test can
pin them to a known instant.  Engines never read time; callers pass dates in.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

DEFAULT_TEST_INSTANT = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware instants."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)

    def today(self) -> date:
        """Calendar date of ``now()`` in UTC; deadlines compare against it."""
        return self.now_utc().date()


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at a given instant until moved explicitly.

    Naive instants are read as UTC.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = self._aware(fixed_time or DEFAULT_TEST_INSTANT)

    @staticmethod
    def _aware(value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = self._aware(time)

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)
