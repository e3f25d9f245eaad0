"""Date-time helpers for period bookkeeping."""

import math
from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive timestamp, matching stored columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_utc(now: datetime | None = None) -> date:
    """Return the calendar date for the provided timestamp (UTC)."""

    current = now.astimezone(timezone.utc) if now else datetime.now(timezone.utc)
    return current.date()


def weeks_between(start: date, end: date) -> int:
    """Return the number of started weeks between two dates, inclusive of the start week."""

    days = (end - start).days
    if days <= 0:
        return 0
    return math.ceil(days / 7)


def week_index(start: date, on: date, total_weeks: int | None = None) -> int:
    """Return the 1-based week number of ``on`` within a window beginning at ``start``.

    Dates before the start yield 0. When ``total_weeks`` is positive the
    index never exceeds it.
    """

    if on < start:
        return 0
    index = (on - start).days // 7 + 1
    if total_weeks:
        index = min(index, total_weeks)
    return index
