"""Bucketed chart aggregation.

Turn an unordered collection of events into a :class:`ChartSeries`:
split sleep intervals at bucket boundaries, count events per bucket,
or average feed durations per bucket.
"""

from __future__ import annotations

import bisect
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from ..core.time import ensure_timezone, get_current_utc
from .errors import InvalidRange
from .models import (
    AggregationKind,
    AggregationPeriod,
    ChartMetric,
    ChartPoint,
    ChartSeries,
    ChartStatistics,
    Event,
    TimeRange,
)
from .time_windows import make_buckets

if TYPE_CHECKING:
    from .time_windows import ChartCalendar

__all__ = [
    "BucketAccumulator",
    "compute",
    "compute_statistics",
    "validate_range",
]

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_MINUTE = 60.0


def validate_range(time_range: TimeRange) -> None:
    """Raise :class:`InvalidRange` unless start < end."""
    if time_range.is_empty:
        raise InvalidRange(time_range.start, time_range.end)


class BucketAccumulator:
    """Per-bucket running totals and contributor counts.

    Attributes
    ----------
    buckets : list[TimeRange]
        Ordered, contiguous buckets
    totals : list[float]
        Accumulated quantity per bucket (hours, minutes or count)
    counts : list[int]
        Contributing events per bucket
    """

    def __init__(self, buckets: list[TimeRange]) -> None:
        self.buckets = buckets
        self.totals = [0.0] * len(buckets)
        self.counts = [0] * len(buckets)
        self._starts = [bucket.start for bucket in buckets]

    def index_of(self, instant: datetime) -> int | None:
        """Index of the bucket containing instant, or None."""
        index = bisect.bisect_right(self._starts, instant) - 1
        if index < 0 or not self.buckets[index].contains(instant):
            return None
        return index

    def add(self, index: int, amount: float) -> None:
        self.totals[index] += amount
        self.counts[index] += 1

    def split(self, start: datetime, end: datetime) -> bool:
        """Attribute the hours of [start, end) to every bucket it overlaps.

        Returns True if any bucket received a positive share.
        """
        first = self.index_of(start)
        if first is None:
            return False

        contributed = False
        for index in range(first, len(self.buckets)):
            bucket = self.buckets[index]
            if bucket.start >= end:
                break
            segment_start = max(start, bucket.start)
            segment_end = min(end, bucket.end)
            if segment_end <= segment_start:
                continue
            self.add(index, (segment_end - segment_start).total_seconds() / SECONDS_PER_HOUR)
            contributed = True

        return contributed


def _duration_seconds(event: Event) -> float:
    if event.is_ongoing:
        return 0.0
    return max(0.0, (event.end - event.start).total_seconds())


def compute_statistics(
    metric: ChartMetric,
    points: list[ChartPoint],
    total: float,
    sample_count: int,
) -> ChartStatistics:
    """Summary statistics for a series.

    Sum and count metrics average over buckets with data; per-event
    averages divide by the number of events.
    """
    values = [point.value for point in points]

    if metric.aggregation is AggregationKind.PER_EVENT_AVERAGE:
        divisor = sample_count
    else:
        divisor = len(points)

    return ChartStatistics(
        total=total,
        average=total / divisor if divisor > 0 else 0.0,
        minimum=min(values) if values else 0.0,
        maximum=max(values) if values else 0.0,
        sample_count=sample_count,
    )


def compute(
    events: Iterable[Event],
    metric: ChartMetric,
    time_range: TimeRange,
    period: AggregationPeriod,
    calendar: ChartCalendar,
    now: datetime | None = None,
) -> ChartSeries:
    """Aggregate events into a chart series.

    Parameters
    ----------
    events
        Events in any order; other kinds are ignored
    metric
        Metric to compute
    time_range
        Requested range; only events starting inside it are considered
    period
        Bucket width
    calendar
        Calendar used to align buckets
    now
        Effective end for ongoing sleep (default: current UTC time)

    Returns
    -------
    ChartSeries
        Points for buckets with data, ascending by start

    Raises
    ------
    InvalidRange
        If ``time_range.start >= time_range.end``
    """
    validate_range(time_range)

    buckets = make_buckets(time_range, period, calendar)
    accumulator = BucketAccumulator(buckets)
    aggregation = metric.aggregation
    effective_now = ensure_timezone(now) if now is not None else get_current_utc()
    sample_count = 0

    for event in sorted(
        (e for e in events if e.kind == metric.event_kind and time_range.contains(e.start)),
        key=lambda e: e.start,
    ):
        if aggregation is AggregationKind.SUM:
            end = effective_now if event.is_ongoing else event.end
            if accumulator.split(event.start, min(end, time_range.end)):
                sample_count += 1
            continue

        index = accumulator.index_of(event.start)
        if index is None:
            continue

        if aggregation is AggregationKind.COUNT:
            accumulator.add(index, 1.0)
        else:
            accumulator.add(index, _duration_seconds(event) / SECONDS_PER_MINUTE)
        sample_count += 1

    points: list[ChartPoint] = []
    for bucket, bucket_total, count in zip(accumulator.buckets, accumulator.totals, accumulator.counts):
        if count == 0:
            continue
        value = bucket_total / count if aggregation is AggregationKind.PER_EVENT_AVERAGE else bucket_total
        points.append(ChartPoint(interval=bucket, value=value, sample_count=count))

    return ChartSeries(
        metric=metric,
        period=period,
        points=tuple(points),
        statistics=compute_statistics(metric, points, sum(accumulator.totals), sample_count),
    )
