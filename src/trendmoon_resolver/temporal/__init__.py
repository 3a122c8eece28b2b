"""Time handling: injectable clocks and timeframe parsing."""

from trendmoon_resolver.temporal.clock import Clock, FakeClock, SystemClock
from trendmoon_resolver.temporal.timeframe import TimeframeResult, parse_timeframe

__all__ = [
    "Clock",
    "FakeClock",
    "SystemClock",
    "TimeframeResult",
    "parse_timeframe",
]
