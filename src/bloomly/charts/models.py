"""Chart data model: events, metrics, buckets and series.

All types are immutable so a cached series can be shared with callers
without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from ..core.time import ensure_timezone, format_utc_iso8601

__all__ = [
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
]


class EventKind(Enum):
    """Kinds of caregiving events."""

    SLEEP = "sleep"
    FEED = "feed"
    DIAPER = "diaper"
    PUMPING = "pumping"

    @classmethod
    def coerce(cls, value: EventKind | str) -> EventKind | str:
        """Map a kind name onto the enum, case-insensitively.

        Unknown names are returned unchanged as plain strings.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return str(value)


class AggregationPeriod(Enum):
    """Bucket width used when grouping events."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class ChartUnit(Enum):
    """Display unit of a metric's values."""

    HOURS = "hours"
    MINUTES = "minutes"
    COUNT = "count"


class AggregationKind(Enum):
    """How a metric folds events into a bucket value."""

    SUM = "sum"
    COUNT = "count"
    PER_EVENT_AVERAGE = "per_event_average"


class ChartMetric(Enum):
    """Logical metric plotted on a chart.

    Each metric carries the event kind it reads, its aggregation kind and
    its display unit.
    """

    SLEEP_TOTAL = "sleep_total"
    FEED_AVERAGE_DURATION = "feed_average_duration"
    FEED_FREQUENCY = "feed_frequency"
    DIAPER_FREQUENCY = "diaper_frequency"

    @property
    def event_kind(self) -> EventKind:
        return _METRIC_BINDINGS[self][0]

    @property
    def aggregation(self) -> AggregationKind:
        return _METRIC_BINDINGS[self][1]

    @property
    def unit(self) -> ChartUnit:
        return _METRIC_BINDINGS[self][2]


_METRIC_BINDINGS: dict[ChartMetric, tuple[EventKind, AggregationKind, ChartUnit]] = {
    ChartMetric.SLEEP_TOTAL: (EventKind.SLEEP, AggregationKind.SUM, ChartUnit.HOURS),
    ChartMetric.FEED_AVERAGE_DURATION: (EventKind.FEED, AggregationKind.PER_EVENT_AVERAGE, ChartUnit.MINUTES),
    ChartMetric.FEED_FREQUENCY: (EventKind.FEED, AggregationKind.COUNT, ChartUnit.COUNT),
    ChartMetric.DIAPER_FREQUENCY: (EventKind.DIAPER, AggregationKind.COUNT, ChartUnit.COUNT),
}


@dataclass(frozen=True)
class TimeRange:
    """Half-open time interval [start, end).

    Naive datetimes are read as UTC. An empty or inverted range can be
    constructed; the aggregator is the one that rejects it.

    Attributes
    ----------
    start : datetime
        Inclusive start
    end : datetime
        Exclusive end
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_timezone(self.start))
        object.__setattr__(self, "end", ensure_timezone(self.end))

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        """Check whether instant falls in [start, end)."""
        return self.start <= instant < self.end


@dataclass(frozen=True)
class Event:
    """Timestamped caregiving event, consumed read-only.

    Known kind names ("sleep", "Feed", ...) become :class:`EventKind`
    members; kinds charting does not know about stay raw strings.
    """

    kind: EventKind | str
    start: datetime
    end: datetime | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EventKind.coerce(self.kind))
        object.__setattr__(self, "start", ensure_timezone(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", ensure_timezone(self.end))

    @property
    def is_ongoing(self) -> bool:
        return self.end is None


@dataclass(frozen=True)
class ChartPoint:
    """Single point on a chart.

    Attributes
    ----------
    interval : TimeRange
        Bucket covered by the point
    value : float
        Aggregated value in the metric's unit
    sample_count : int
        Number of events contributing to this bucket
    """

    interval: TimeRange
    value: float
    sample_count: int


@dataclass(frozen=True)
class ChartStatistics:
    """Summary statistics over a whole series."""

    total: float = 0.0
    average: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    sample_count: int = 0


@dataclass(frozen=True)
class ChartSeries:
    """Chart series: ordered non-empty buckets plus statistics."""

    metric: ChartMetric
    period: AggregationPeriod
    points: tuple[ChartPoint, ...] = ()
    statistics: ChartStatistics = field(default_factory=ChartStatistics)

    @property
    def unit(self) -> ChartUnit:
        return self.metric.unit

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "metric": self.metric.value,
            "period": self.period.value,
            "unit": self.unit.value,
            "points": [
                {
                    "start": format_utc_iso8601(point.interval.start),
                    "end": format_utc_iso8601(point.interval.end),
                    "value": point.value,
                    "sample_count": point.sample_count,
                }
                for point in self.points
            ],
            "statistics": {
                "total": self.statistics.total,
                "average": self.statistics.average,
                "minimum": self.statistics.minimum,
                "maximum": self.statistics.maximum,
                "sample_count": self.statistics.sample_count,
            },
        }
