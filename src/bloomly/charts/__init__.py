"""Time-series chart aggregation with a TTL cache."""

from .aggregator import compute, compute_statistics, validate_range
from .cache import ChartDataCache
from .errors import ChartError, InvalidRange, SourceUnavailable
from .models import (
    AggregationKind,
    AggregationPeriod,
    ChartMetric,
    ChartPoint,
    ChartSeries,
    ChartStatistics,
    ChartUnit,
    Event,
    EventKind,
    TimeRange,
)
from .presets import DateRangePreset, resolve_preset
from .sources import EventSource, FileEventSource, InMemoryEventSource, parse_event
from .time_windows import (
    ChartCalendar,
    compute_boundaries_utc,
    compute_day_boundaries_utc,
    compute_month_boundaries_utc,
    compute_week_boundaries_utc,
    get_week_start,
    make_buckets,
)

__all__ = [
    # Model
    "AggregationKind",
    "AggregationPeriod",
    "ChartMetric",
    "ChartPoint",
    "ChartSeries",
    "ChartStatistics",
    "ChartUnit",
    "Event",
    "EventKind",
    "TimeRange",
    # Errors
    "ChartError",
    "InvalidRange",
    "SourceUnavailable",
    # Calendar
    "ChartCalendar",
    "compute_boundaries_utc",
    "compute_day_boundaries_utc",
    "compute_week_boundaries_utc",
    "compute_month_boundaries_utc",
    "get_week_start",
    "make_buckets",
    # Aggregation
    "compute",
    "compute_statistics",
    "validate_range",
    # Cache
    "ChartDataCache",
    # Sources
    "EventSource",
    "FileEventSource",
    "InMemoryEventSource",
    "parse_event",
    # Presets
    "DateRangePreset",
    "resolve_preset",
]
