"""TTL cache in front of the chart aggregator.

The cache owns a single map of ``(metric, range, period)`` to computed
series. Every read and write of that map happens under one lock; fetching
events and computing the series run outside it, and the result is stored
with a single insert once both have succeeded.

Entry lifecycle: absent -> fresh -> stale (expired, still stored) -> evicted.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, NamedTuple

from ..core.time import get_current_utc
from ..observability import get_logger, timing_context
from .aggregator import compute, validate_range
from .models import AggregationPeriod, ChartMetric, ChartSeries, TimeRange
from .time_windows import ChartCalendar

if TYPE_CHECKING:
    from .sources import EventSource

__all__ = [
    "CacheKey",
    "ChartDataCache",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_MAX_CACHE_ENTRIES",
]

DEFAULT_CACHE_TTL_SECONDS = 120.0
DEFAULT_MAX_CACHE_ENTRIES = 20

logger = get_logger("cache")


class CacheKey(NamedTuple):
    """Exact-match cache key."""

    metric: ChartMetric
    start: datetime
    end: datetime
    period: AggregationPeriod

    @classmethod
    def of(cls, metric: ChartMetric, time_range: TimeRange, period: AggregationPeriod) -> CacheKey:
        return cls(metric, time_range.start, time_range.end, period)


@dataclass(frozen=True)
class _CacheEntry:
    series: ChartSeries
    expires_at: datetime


class ChartDataCache:
    """Chart series provider with a TTL cache.

    Features:
    - Exact-match memoization by (metric, range, period)
    - TTL expiry; ``ttl_seconds <= 0`` disables caching
    - LRU eviction above ``max_entries``
    - Per-metric and full invalidation
    - Concurrent multi-metric loads

    Example:
        >>> cache = ChartDataCache(InMemoryEventSource(events), ChartCalendar("Europe/Brussels"))
        >>> series = cache.series(ChartMetric.SLEEP_TOTAL, time_range, AggregationPeriod.DAY)
        >>> cache.invalidate(ChartMetric.SLEEP_TOTAL)
    """

    def __init__(
        self,
        source: EventSource,
        calendar: ChartCalendar | None = None,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_CACHE_ENTRIES,
        clock: Callable[[], datetime] = get_current_utc,
    ) -> None:
        """Initialize cache.

        Parameters
        ----------
        source
            Event source to read from on a miss
        calendar
            Calendar used to align buckets (default: UTC, weeks start Monday)
        ttl_seconds
            Lifetime of an entry in seconds
        max_entries
            Maximum number of stored entries
        clock
            Returns the current UTC time; used for expiry and ongoing events
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got: {max_entries}")

        self.source = source
        self.calendar = calendar or ChartCalendar()
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, _CacheEntry] = OrderedDict()
        self._generations: dict[ChartMetric, int] = dict.fromkeys(ChartMetric, 0)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def series(
        self,
        metric: ChartMetric,
        time_range: TimeRange,
        period: AggregationPeriod,
    ) -> ChartSeries:
        """Return the chart series for a metric over a range.

        Parameters
        ----------
        metric
            Metric to chart
        time_range
            Requested range
        period
            Bucket width

        Returns
        -------
        ChartSeries
            Cached series if a live entry exists, otherwise a fresh one

        Raises
        ------
        InvalidRange
            If the range is empty or inverted (no fetch is made)
        SourceUnavailable
            If the event source fails (nothing is cached)
        """
        validate_range(time_range)
        key = CacheKey.of(metric, time_range, period)

        cached, generation = self._lookup(key)
        if cached is not None:
            return cached

        with timing_context("chart_series", component="cache", metric=metric.value, period=period.value) as ctx:
            try:
                events = self.source.fetch_events(time_range, metric.event_kind)
            except Exception as exc:
                logger.warning("Event fetch failed", metric=metric.value, error=str(exc))
                raise

            series = compute(events, metric, time_range, period, self.calendar, now=self._clock())
            ctx["events"] = len(events)
            ctx["points"] = len(series.points)

        self._store(key, series, generation)
        return series

    def invalidate(self, metric: ChartMetric | None = None) -> int:
        """Drop cached entries.

        Series still being computed for an invalidated metric are not
        stored when they complete.

        Parameters
        ----------
        metric
            Metric whose entries to drop (None = all entries)

        Returns
        -------
        int
            Number of entries removed
        """
        with self._lock:
            if metric is None:
                removed = len(self._entries)
                self._entries.clear()
                for known in self._generations:
                    self._generations[known] += 1
            else:
                keys = [key for key in self._entries if key.metric is metric]
                for key in keys:
                    del self._entries[key]
                removed = len(keys)
                self._generations[metric] += 1

        logger.debug("Cache invalidated", metric=metric.value if metric else None, removed=removed)
        return removed

    def load_all(
        self,
        time_range: TimeRange,
        period: AggregationPeriod,
        metrics: Iterable[ChartMetric] | None = None,
        *,
        max_workers: int | None = None,
        return_exceptions: bool = False,
    ) -> dict[ChartMetric, ChartSeries | Exception]:
        """Load several metrics concurrently.

        Parameters
        ----------
        time_range
            Requested range
        period
            Bucket width
        metrics
            Metrics to load (default: all)
        max_workers
            Thread pool size (default: one thread per metric)
        return_exceptions
            Put a metric's exception in the result instead of raising, so
            one failing metric does not hide the others

        Returns
        -------
        dict[ChartMetric, ChartSeries | Exception]
            Series keyed by metric, in request order. Values are exceptions
            only for failed metrics and only with ``return_exceptions``.

        Raises
        ------
        InvalidRange
            If the range is empty or inverted (nothing is fetched)
        SourceUnavailable
            The first failure in request order, unless ``return_exceptions``
        """
        selected = list(dict.fromkeys(metrics if metrics is not None else ChartMetric))
        if not selected:
            return {}

        validate_range(time_range)

        with ThreadPoolExecutor(max_workers=max_workers or len(selected)) as executor:
            futures = {metric: executor.submit(self.series, metric, time_range, period) for metric in selected}

        if not return_exceptions:
            return {metric: future.result() for metric, future in futures.items()}

        results: dict[ChartMetric, ChartSeries | Exception] = {}
        for metric, future in futures.items():
            error = future.exception()
            results[metric] = error if error is not None else future.result()
            if error is not None:
                logger.warning("Metric failed to load", metric=metric.value, error=str(error))
        return results

    def _lookup(self, key: CacheKey) -> tuple[ChartSeries | None, int]:
        """Return the live series for key (or None) and the metric's generation."""
        with self._lock:
            generation = self._generations[key.metric]
            if not self.enabled:
                return None, generation

            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss", metric=key.metric.value, period=key.period.value)
                return None, generation

            if self._clock() > entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired", metric=key.metric.value, period=key.period.value)
                return None, generation

            self._entries.move_to_end(key)
            logger.debug("Cache hit", metric=key.metric.value, period=key.period.value)
            return entry.series, generation

    def _store(self, key: CacheKey, series: ChartSeries, generation: int) -> None:
        if not self.enabled:
            return

        entry = _CacheEntry(series=series, expires_at=self._clock() + timedelta(seconds=self.ttl_seconds))

        with self._lock:
            if self._generations[key.metric] != generation:
                logger.debug("Discarding series computed before invalidation", metric=key.metric.value)
                return

            self._entries[key] = entry
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache entry evicted", metric=evicted.metric.value, period=evicted.period.value)
