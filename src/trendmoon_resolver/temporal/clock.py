"""Injectable clocks; cache freshness is always measured through one."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

from trendmoon_resolver.core.utils import utc_now


class Clock(ABC):
    """Abstract clock interface."""

    @abstractmethod
    def now(self) -> datetime:
        """Get current time (timezone-aware UTC)."""
        ...

    def timestamp(self) -> float:
        """Current time as unix seconds."""
        return self.now().timestamp()

    def seconds_since(self, moment: datetime) -> float:
        return (self.now() - moment).total_seconds()


class SystemClock(Clock):
    """Real system time."""

    def now(self) -> datetime:
        return utc_now()


class FakeClock(Clock):
    """Controllable clock for testing."""

    def __init__(self, initial: datetime | None = None) -> None:
        self._now = _as_utc(initial) if initial else utc_now()

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: int | float = 0, **kwargs: int) -> None:
        """Advance time by specified duration.

        Args:
            seconds: Number of seconds to advance
            **kwargs: Additional timedelta arguments (minutes, hours, days, etc.)
        """
        self._now = self._now + timedelta(seconds=seconds, **kwargs)

    def set(self, time: datetime) -> None:
        """Set clock to specific time."""
        self._now = _as_utc(time)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
