"""Common CLI utilities: stable exit codes, range parsing and output."""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import IntEnum
from typing import Any

import click

from ..charts import (
    ChartCalendar,
    ChartSeries,
    DateRangePreset,
    InvalidRange,
    SourceUnavailable,
    TimeRange,
    resolve_preset,
)
from ..core.time import ensure_timezone, localize_utc_to_tz

__all__ = [
    "ExitCode",
    "echo_json",
    "echo_series",
    "exit_code_for",
    "parse_range",
]


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0
    USAGE_ERROR = 2  # Invalid range or arguments
    SOURCE_ERROR = 5  # Event source unavailable
    CONFIG_ERROR = 6  # Configuration error
    UNKNOWN_ERROR = 7  # Unexpected error


def exit_code_for(exc: Exception) -> ExitCode:
    """Map an exception raised while loading charts to an exit code."""
    if isinstance(exc, InvalidRange):
        return ExitCode.USAGE_ERROR
    if isinstance(exc, SourceUnavailable):
        return ExitCode.SOURCE_ERROR
    return ExitCode.UNKNOWN_ERROR


def _parse_bound(value: str, calendar: ChartCalendar) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise click.BadParameter(f"'{value}' is not an ISO-8601 date or datetime") from exc

    # Bare dates mean local midnight in the chart timezone
    if len(value.strip()) == 10:
        return calendar.start_of_day(date(parsed.year, parsed.month, parsed.day))
    return ensure_timezone(parsed, calendar.timezone_str)


def parse_range(
    calendar: ChartCalendar,
    preset: str | None,
    start: str | None,
    end: str | None,
) -> TimeRange:
    """Resolve CLI range options into a TimeRange.

    Either ``preset`` or both ``start`` and ``end`` must be given.
    """
    if preset:
        if start or end:
            raise click.UsageError("Use either --preset or --start/--end, not both")
        return resolve_preset(DateRangePreset(preset), calendar)

    if not (start and end):
        raise click.UsageError("Provide --preset or both --start and --end")

    return TimeRange(_parse_bound(start, calendar), _parse_bound(end, calendar))


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2))


def echo_series(series: ChartSeries, calendar: ChartCalendar) -> None:
    """Print a series as a human-readable table."""
    unit = series.unit.value
    click.echo(f"📊 {series.metric.value} by {series.period.value} ({unit})")

    if series.is_empty:
        click.echo("   No data in range")
        return

    for point in series.points:
        local_start = localize_utc_to_tz(point.interval.start, calendar.timezone_str)
        click.echo(f"   {local_start:%Y-%m-%d}  {point.value:8.2f}  ({point.sample_count} events)")

    stats = series.statistics
    click.echo(
        f"   total={stats.total:.2f} average={stats.average:.2f} "
        f"min={stats.minimum:.2f} max={stats.maximum:.2f} events={stats.sample_count}"
    )
