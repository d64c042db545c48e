"""Loguru configuration for Bloomly.

Centralized loguru setup with:
- Colored console output
- Optional structured JSON log file
- Component-bound loggers
- Context manager for timing operations
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "configure_loguru",
    "get_logger",
    "timing_context",
]


def configure_loguru(
    *,
    level: str = "INFO",
    log_dir: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_dir
        Directory for the JSON log file (None = console only)
    rotation
        Log rotation policy (e.g., "10 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable console output on stderr

    Example
    -------
    >>> configure_loguru(level="DEBUG", log_dir=Path("logs"))
    """
    logger.remove()

    if enable_console:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<level>{message}</level>",
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "bloomly.jsonl",
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.bind(component="bloomly").info(
        "Loguru configured", log_dir=str(log_dir) if log_dir else None, level=level
    )


# Console format references extra[component]; make sure it always exists.
logger.configure(extra={"component": "bloomly"})


def get_logger(component: str = "bloomly") -> Any:
    """Get logger instance bound to a component.

    Parameters
    ----------
    component
        Component name (charts, cache, sources, cli)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "bloomly",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Time an operation and log its duration at DEBUG.

    Parameters
    ----------
    operation
        Name of the operation being timed
    component
        Component name for filtering logs
    **metadata
        Additional metadata to log

    Yields
    ------
    dict
        Context dictionary that can be updated with additional data

    Example
    -------
    >>> with timing_context("chart_compute", component="cache", metric="sleep_total") as ctx:
    ...     series = compute(...)
    ...     ctx["points"] = len(series.points)
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = {**metadata}

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        logger.bind(component=component, timing=True, operation=operation).debug(
            f"{operation} took {duration_ms:.2f} ms",
            duration_ms=duration_ms,
            **context,
        )
