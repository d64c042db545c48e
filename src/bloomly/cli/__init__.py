"""Command-line tools for Bloomly charts."""

from .bloomly_charts import cli

__all__ = ["cli"]
