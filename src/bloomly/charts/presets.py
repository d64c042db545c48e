"""Quick-select date ranges for chart screens."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from ..core.time import get_current_utc
from .models import AggregationPeriod, TimeRange
from .time_windows import ChartCalendar

__all__ = [
    "DateRangePreset",
    "resolve_preset",
]


class DateRangePreset(Enum):
    """Predefined date ranges, all ending at the end of the local day."""

    LAST_7_DAYS = "last_7_days"
    LAST_14_DAYS = "last_14_days"
    LAST_30_DAYS = "last_30_days"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


_TRAILING_DAYS = {
    DateRangePreset.LAST_7_DAYS: 7,
    DateRangePreset.LAST_14_DAYS: 14,
    DateRangePreset.LAST_30_DAYS: 30,
}


def resolve_preset(
    preset: DateRangePreset,
    calendar: ChartCalendar,
    now: datetime | None = None,
) -> TimeRange:
    """Turn a preset into a concrete range.

    The range always ends at the next local midnight after ``now``. Trailing
    presets start N local days earlier (so "last 7 days" covers today and
    the six days before it); ``this_week`` and ``this_month`` start at the
    calendar-aligned start of the current week or month.

    Parameters
    ----------
    preset
        Preset to resolve
    calendar
        Calendar providing the timezone and first weekday
    now
        Reference instant (default: current UTC time)

    Returns
    -------
    TimeRange
        Resolved range
    """
    now = now or get_current_utc()
    today = calendar.local_date(now)
    end = calendar.start_of_day(today + timedelta(days=1))

    if preset in _TRAILING_DAYS:
        start = calendar.start_of_day(today + timedelta(days=1 - _TRAILING_DAYS[preset]))
    elif preset is DateRangePreset.THIS_WEEK:
        start = calendar.bucket_interval(now, AggregationPeriod.WEEK).start
    elif preset is DateRangePreset.THIS_MONTH:
        start = calendar.bucket_interval(now, AggregationPeriod.MONTH).start
    else:
        raise ValueError(f"Unknown preset: {preset}")

    return TimeRange(start, end)
