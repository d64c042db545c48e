"""Errors raised by the chart engine."""

from __future__ import annotations

__all__ = [
    "ChartError",
    "InvalidRange",
    "SourceUnavailable",
]


class ChartError(Exception):
    """Base class for chart engine errors."""

    pass


class InvalidRange(ChartError, ValueError):
    """Raised when a time range is empty or inverted (start >= end)."""

    def __init__(self, start, end) -> None:
        self.start = start
        self.end = end
        super().__init__(f"Invalid range: start {start.isoformat()} is not before end {end.isoformat()}")


class SourceUnavailable(ChartError):
    """Raised by event sources when events cannot be read.

    The underlying exception is chained as ``__cause__``.
    """

    pass
