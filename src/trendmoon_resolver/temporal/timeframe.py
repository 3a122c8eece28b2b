"""Shorthand timeframe parsing ("7d", "2w", "1m", "24h", "last week").

Units:
  d  days
  w  weeks
  m  months, approximated as 30 days (not calendar months)
  h  hours
  y  calendar years

The end of every range is "now"; the start is "now" minus the quantity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from trendmoon_resolver.core.utils import utc_now

_TIMEFRAME_RE = re.compile(r"^(\d+)\s*(d|w|m|h|y)")

DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class TimeframeResult:
    """Absolute date range produced by ``parse_timeframe``."""

    start_date: datetime
    end_date: datetime

    @property
    def span(self) -> timedelta:
        return self.end_date - self.start_date

    def as_iso(self) -> dict[str, str]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


def parse_timeframe(
    expr: str | None, now: datetime | None = None
) -> TimeframeResult | None:
    """Turn a shorthand duration into a ``TimeframeResult``.

    Returns None for empty input and for anything unrecognized. Phrases
    containing "week" or "month" fall back to 7 and 30 days.
    """
    if not expr:
        return None
    now = now or utc_now()
    text = expr.strip().lower()

    match = _TIMEFRAME_RE.match(text)
    if match is None:
        if "week" in text:
            return parse_timeframe("7d", now)
        if "month" in text:
            return parse_timeframe("30d", now)
        return None

    quantity = int(match.group(1))
    unit = match.group(2)
    try:
        start = _subtract(now, quantity, unit)
    except OverflowError:
        return None
    return TimeframeResult(start_date=start, end_date=now)


def _subtract(now: datetime, quantity: int, unit: str) -> datetime:
    if unit == "d":
        return now - timedelta(days=quantity)
    if unit == "w":
        return now - timedelta(weeks=quantity)
    if unit == "m":
        return now - timedelta(days=quantity * DAYS_PER_MONTH)
    if unit == "h":
        return now - timedelta(hours=quantity)
    # "y": calendar years; 29 February lands on 28 February
    year = now.year - quantity
    if year < datetime.min.year:
        raise OverflowError("year out of range")
    try:
        return now.replace(year=year)
    except ValueError:
        return now.replace(year=year, day=28)
