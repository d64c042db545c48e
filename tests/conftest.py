"""Shared pytest configuration for the test suite."""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from bloomly.charts import ChartCalendar, Event, EventKind, SourceUnavailable, TimeRange  # noqa: E402


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Build a UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


class CountingEventSource:
    """In-memory event source that records every fetch."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self.events = list(events or [])
        self.calls: list[tuple[TimeRange | None, EventKind | None]] = []
        self.fail_with: Exception | None = None
        self.failing_kinds: set[EventKind] = set()
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def fetch_events(self, time_range=None, kind=None):
        with self._lock:
            self.calls.append((time_range, kind))
        if self.fail_with is not None and (not self.failing_kinds or kind in self.failing_kinds):
            raise self.fail_with
        return [
            event
            for event in self.events
            if (kind is None or event.kind == kind) and (time_range is None or time_range.contains(event.start))
        ]


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def calendar() -> ChartCalendar:
    """UTC calendar with weeks starting on Monday."""
    return ChartCalendar("UTC", week_start_on=0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2024, 6, 1, 12))


@pytest.fixture
def source_unavailable() -> SourceUnavailable:
    return SourceUnavailable("event store offline")
