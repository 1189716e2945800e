"""
Clock sources for the schedule rule.

The resolver asks for the local time once per call; production uses the
system clock converted to the business timezone, tests use a fixed clock.
"""
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config.settings import DEFAULT_TIMEZONE
from .models import LocalTime


class ClockSource(Protocol):
    def now(self) -> LocalTime: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ZoneClock:
    """
    System clock converted to one named timezone (DST aware).

    Raises ValueError when the timezone is unknown instead of quietly
    using UTC.
    """

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE, now_fn: Optional[Callable[[], datetime]] = None):
        try:
            self.tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{tz_name}': {e}") from e
        self.tz_name = tz_name
        self._now_fn = now_fn or _utc_now

    def now_datetime(self) -> datetime:
        """Current instant as an aware datetime in the business timezone."""
        current = self._now_fn()
        if current.tzinfo is None:
            raise ValueError("now_fn must return a timezone-aware datetime")
        return current.astimezone(self.tz)

    def now(self) -> LocalTime:
        # Single read so weekday, hour and minute come from the same instant
        return LocalTime.from_datetime(self.now_datetime())


class FixedClock:
    """Clock frozen at one weekday/hour/minute."""

    def __init__(self, weekday: int, hour: int = 0, minute: int = 0):
        self.local_time = LocalTime(weekday=weekday, hour=hour, minute=minute)

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'FixedClock':
        local = LocalTime.from_datetime(dt)
        return cls(local.weekday, local.hour, local.minute)

    def now(self) -> LocalTime:
        return self.local_time
