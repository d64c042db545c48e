"""Core utilities shared across Bloomly components."""

from .time import (
    ensure_timezone,
    format_utc_iso8601,
    get_current_utc,
    localize_utc_to_tz,
    parse_utc_iso8601,
)

__all__ = [
    "ensure_timezone",
    "format_utc_iso8601",
    "get_current_utc",
    "localize_utc_to_tz",
    "parse_utc_iso8601",
]
