"""Event sources feeding the chart engine.

An event source exposes a single read operation,
``fetch_events(time_range=None, kind=None)``, returning events whose start
falls in the half-open range, optionally filtered by kind.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

import yaml

from ..core.time import parse_utc_iso8601
from ..observability import get_logger
from .errors import SourceUnavailable
from .models import Event, EventKind, TimeRange

__all__ = [
    "EventSource",
    "FileEventSource",
    "InMemoryEventSource",
    "parse_event",
]

logger = get_logger("sources")


class EventSource(Protocol):
    """Read-only event store consumed by the chart cache."""

    def fetch_events(
        self,
        time_range: TimeRange | None = None,
        kind: EventKind | None = None,
    ) -> list[Event]:
        """Fetch events starting in ``time_range`` (None = all time) of ``kind`` (None = all kinds).

        Raises
        ------
        SourceUnavailable
            If the underlying store cannot be read
        """
        ...


def _select(events: Iterable[Event], time_range: TimeRange | None, kind: EventKind | None) -> list[Event]:
    return [
        event
        for event in events
        if (kind is None or event.kind == kind) and (time_range is None or time_range.contains(event.start))
    ]


class InMemoryEventSource:
    """Event source backed by a list held in memory."""

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events = list(events)

    def __len__(self) -> int:
        return len(self._events)

    def fetch_events(
        self,
        time_range: TimeRange | None = None,
        kind: EventKind | None = None,
    ) -> list[Event]:
        return _select(self._events, time_range, kind)


def parse_event(data: dict[str, Any]) -> Event:
    """Build an event from a mapping.

    Expected keys: ``kind``, ``start``, optional ``end`` and ``notes``.
    Unknown kinds are kept as plain strings.

    Raises
    ------
    ValueError
        If ``kind`` or ``start`` is missing or a timestamp is malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Event must be a mapping, got {type(data).__name__}")

    raw_kind = data.get("kind")
    if not raw_kind:
        raise ValueError("Event is missing 'kind'")
    if data.get("start") is None:
        raise ValueError("Event is missing 'start'")

    end = data.get("end")
    notes = data.get("notes")
    return Event(
        kind=raw_kind,
        start=parse_utc_iso8601(data["start"]),
        end=parse_utc_iso8601(end) if end is not None else None,
        notes=str(notes) if notes is not None else None,
    )


class FileEventSource:
    """Event source reading a YAML (or JSON) document from disk.

    The document is either a list of events or a mapping with an
    ``events`` list. The file is re-read on every fetch so edits are picked
    up once the chart cache is invalidated.

    Example
    -------
    >>> source = FileEventSource(Path("events.yaml"))
    >>> sleeps = source.fetch_events(kind=EventKind.SLEEP)
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"FileEventSource({str(self.path)!r})"

    def load(self) -> list[Event]:
        """Read and parse every event in the file.

        Raises
        ------
        SourceUnavailable
            If the file is missing, unreadable or malformed
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except OSError as exc:
            raise SourceUnavailable(f"Cannot read events file {self.path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise SourceUnavailable(f"Cannot parse events file {self.path}: {exc}") from exc

        if document is None:
            return []
        if isinstance(document, dict):
            document = document.get("events") or []
        if not isinstance(document, list):
            raise SourceUnavailable(f"Events file {self.path} must contain a list of events")

        events: list[Event] = []
        for position, item in enumerate(document):
            try:
                event = parse_event(item)
            except ValueError as exc:
                raise SourceUnavailable(f"Invalid event #{position} in {self.path}: {exc}") from exc

            if not isinstance(event.kind, EventKind):
                logger.debug("Keeping event of unknown kind", kind=event.kind, position=position)
            events.append(event)

        return events

    def fetch_events(
        self,
        time_range: TimeRange | None = None,
        kind: EventKind | None = None,
    ) -> list[Event]:
        events = _select(self.load(), time_range, kind)
        logger.debug("Fetched events from file", path=str(self.path), kind=kind.value if kind else None, count=len(events))
        return events
