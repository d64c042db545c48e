"""Calendar bucket boundaries with DST awareness.

Compute UTC boundaries of local day, week and month buckets.
A local "day" may be 23, 24 or 25 hours long in UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytz

from ..core.time import ensure_timezone
from .models import AggregationPeriod, TimeRange

__all__ = [
    "ChartCalendar",
    "compute_boundaries_utc",
    "compute_day_boundaries_utc",
    "compute_month_boundaries_utc",
    "compute_week_boundaries_utc",
    "get_week_start",
    "make_buckets",
]


def get_week_start(day: date, start_on: int = 0) -> date:
    """Get start of week for a date.

    Parameters
    ----------
    day
        Date to get week start for
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    date
        First day of the week containing ``day``
    """
    days_since_start = (day.weekday() - start_on) % 7
    return day - timedelta(days=days_since_start)


def _local_midnight_utc(tz: pytz.BaseTzInfo, day: date) -> datetime:
    local_midnight = tz.localize(datetime(day.year, day.month, day.day, 0, 0, 0))
    return local_midnight.astimezone(pytz.UTC)


def compute_day_boundaries_utc(
    local_date: date,
    timezone_str: str = "UTC",
) -> tuple[datetime, datetime]:
    """Compute UTC boundaries for a local day.

    Parameters
    ----------
    local_date
        Date in local timezone
    timezone_str
        Timezone name (e.g., "America/New_York")

    Returns
    -------
    tuple[datetime, datetime]
        (start_utc, end_utc)

    Examples
    --------
    >>> # DST transition day (spring forward: 23 hours)
    >>> start, end = compute_day_boundaries_utc(date(2025, 3, 9), "America/New_York")
    >>> (end - start).total_seconds() / 3600
    23.0
    """
    tz = pytz.timezone(timezone_str)
    return (
        _local_midnight_utc(tz, local_date),
        _local_midnight_utc(tz, local_date + timedelta(days=1)),
    )


def compute_week_boundaries_utc(
    local_date: date,
    timezone_str: str = "UTC",
    start_on: int = 0,
) -> tuple[datetime, datetime]:
    """Compute UTC boundaries for the local week containing a date.

    Parameters
    ----------
    local_date
        Any date in the week
    timezone_str
        Timezone name
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    tuple[datetime, datetime]
        (start_utc, end_utc)
    """
    tz = pytz.timezone(timezone_str)
    week_start = get_week_start(local_date, start_on=start_on)
    return (
        _local_midnight_utc(tz, week_start),
        _local_midnight_utc(tz, week_start + timedelta(days=7)),
    )


def compute_month_boundaries_utc(
    local_date: date,
    timezone_str: str = "UTC",
) -> tuple[datetime, datetime]:
    """Compute UTC boundaries for the local month containing a date."""
    tz = pytz.timezone(timezone_str)

    month_start = date(local_date.year, local_date.month, 1)
    if local_date.month == 12:
        next_month = date(local_date.year + 1, 1, 1)
    else:
        next_month = date(local_date.year, local_date.month + 1, 1)

    return (
        _local_midnight_utc(tz, month_start),
        _local_midnight_utc(tz, next_month),
    )


def compute_boundaries_utc(
    local_date: date,
    period: AggregationPeriod,
    timezone_str: str = "UTC",
    week_start_on: int = 0,
) -> tuple[datetime, datetime]:
    """Compute UTC boundaries for any period.

    Dispatches to the period-specific functions.
    """
    if period is AggregationPeriod.DAY:
        return compute_day_boundaries_utc(local_date, timezone_str)
    elif period is AggregationPeriod.WEEK:
        return compute_week_boundaries_utc(local_date, timezone_str, week_start_on)
    elif period is AggregationPeriod.MONTH:
        return compute_month_boundaries_utc(local_date, timezone_str)
    else:
        raise ValueError(f"Unknown period: {period}")


class ChartCalendar:
    """Calendar context used to align chart buckets.

    Wraps an IANA timezone and the first day of the week. The aggregator
    only ever calls :meth:`bucket_interval`, so any object providing it can
    stand in for this class.

    Example
    -------
    >>> calendar = ChartCalendar("Europe/Brussels", week_start_on=0)
    >>> bucket = calendar.bucket_interval(datetime(2025, 3, 30, 12, tzinfo=pytz.UTC), AggregationPeriod.DAY)
    >>> (bucket.end - bucket.start).total_seconds() / 3600
    23.0
    """

    def __init__(self, timezone_str: str = "UTC", week_start_on: int = 0) -> None:
        if not 0 <= week_start_on <= 6:
            raise ValueError(f"week_start_on must be between 0 and 6, got: {week_start_on}")

        self.timezone_str = timezone_str
        self.week_start_on = week_start_on
        self._tz = pytz.timezone(timezone_str)

    def __repr__(self) -> str:
        return f"ChartCalendar({self.timezone_str!r}, week_start_on={self.week_start_on})"

    def local_date(self, instant: datetime) -> date:
        """Local calendar date of an instant."""
        return ensure_timezone(instant).astimezone(self._tz).date()

    def start_of_day(self, day: date) -> datetime:
        """UTC instant of local midnight on ``day``."""
        return _local_midnight_utc(self._tz, day)

    def bucket_interval(self, instant: datetime, period: AggregationPeriod) -> TimeRange:
        """Bucket of ``period`` containing ``instant``."""
        start, end = compute_boundaries_utc(
            self.local_date(instant),
            period,
            self.timezone_str,
            self.week_start_on,
        )
        return TimeRange(start, end)


def make_buckets(
    time_range: TimeRange,
    period: AggregationPeriod,
    calendar: ChartCalendar,
) -> list[TimeRange]:
    """Ordered buckets covering a range.

    The first bucket starts at the aligned boundary at or before
    ``time_range.start``; the last bucket's end is clipped to
    ``time_range.end``.

    Parameters
    ----------
    time_range
        Range to cover
    period
        Bucket width
    calendar
        Calendar used for alignment

    Returns
    -------
    list[TimeRange]
        Contiguous buckets in ascending order (empty for an empty range)
    """
    buckets: list[TimeRange] = []
    cursor = time_range.start

    while cursor < time_range.end:
        bucket = calendar.bucket_interval(cursor, period)
        if bucket.end <= cursor:
            raise ValueError(f"Calendar produced a non-advancing bucket at {cursor.isoformat()}")
        start = bucket.start if not buckets else cursor
        buckets.append(TimeRange(start, min(bucket.end, time_range.end)))
        cursor = bucket.end

    return buckets
