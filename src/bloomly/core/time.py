"""Time and timezone utilities for Bloomly.

UTC discipline for everything the chart engine touches:
- all instants are timezone-aware and compared in UTC
- naive datetimes coming from event files are read as UTC
- ISO-8601 is the only textual format
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

__all__ = [
    "ensure_timezone",
    "format_utc_iso8601",
    "get_current_utc",
    "localize_utc_to_tz",
    "parse_utc_iso8601",
]


def get_current_utc() -> datetime:
    """Get current time in UTC.

    Returns
    -------
    datetime
        Current time in UTC with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_timezone(dt: datetime, tz: str | ZoneInfo | None = None) -> datetime:
    """Ensure datetime has timezone information.

    Parameters
    ----------
    dt
        Datetime (may be naive)
    tz
        Timezone to assume if dt is naive (default: UTC)

    Returns
    -------
    datetime
        Timezone-aware datetime
    """
    if dt.tzinfo is not None:
        return dt

    if tz is None:
        tz_obj: tzinfo = timezone.utc
    elif isinstance(tz, str):
        tz_obj = ZoneInfo(tz)
    else:
        tz_obj = tz

    return dt.replace(tzinfo=tz_obj)


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string.

    Example
    -------
    >>> from datetime import datetime, timezone
    >>> format_utc_iso8601(datetime(2024, 3, 1, 22, 0, tzinfo=timezone.utc))
    '2024-03-01T22:00:00+00:00'
    """
    return ensure_timezone(dt).astimezone(timezone.utc).isoformat()


def parse_utc_iso8601(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 value to a UTC datetime.

    YAML loaders hand back ``datetime`` or ``date`` objects for unquoted
    timestamps, so those are accepted as well as strings.

    Parameters
    ----------
    value
        ISO-8601 string, datetime or date

    Returns
    -------
    datetime
        Datetime in UTC

    Raises
    ------
    ValueError
        If the value is not valid ISO-8601

    Example
    -------
    >>> parse_utc_iso8601("2024-03-01T23:30:00+02:00").hour
    21
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        # Handle 'Z' suffix (Zulu time = UTC)
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Cannot parse datetime from {type(value).__name__}: {value!r}")

    return ensure_timezone(dt).astimezone(timezone.utc)


def localize_utc_to_tz(utc_dt: datetime, tz: str | ZoneInfo) -> datetime:
    """Convert UTC datetime to a specific timezone for display."""
    if isinstance(tz, str):
        tz = ZoneInfo(tz)

    return ensure_timezone(utc_dt).astimezone(tz)
