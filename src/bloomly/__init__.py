"""Bloomly: chart aggregation for baby-care events."""

__version__ = "0.1.0"
