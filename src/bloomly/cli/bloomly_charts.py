"""CLI commands for inspecting chart series from an events file."""

from __future__ import annotations

from pathlib import Path

import click
import pytz

from ..charts import (
    AggregationPeriod,
    ChartCalendar,
    ChartDataCache,
    ChartMetric,
    DateRangePreset,
    FileEventSource,
    InvalidRange,
)
from ..config import ConfigError, Settings, get_settings
from ..observability import configure_loguru, get_logger
from .cli_common import ExitCode, echo_json, echo_series, exit_code_for, parse_range

__all__ = ["cli"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

logger = get_logger("cli")


def _build_cache(settings: Settings, events: Path | None, tz: str | None) -> ChartDataCache:
    events_file = events or settings.events_file
    if events_file is None:
        raise click.UsageError("No events file: pass --events or set BLOOMLY_EVENTS_FILE")

    try:
        calendar = ChartCalendar(tz or settings.timezone, week_start_on=settings.week_start_on)
    except pytz.UnknownTimeZoneError as exc:
        raise click.BadParameter(f"Unknown timezone: {exc}", param_hint="--tz") from exc

    return ChartDataCache(
        FileEventSource(events_file),
        calendar,
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )


def _range_options(func):
    func = click.option("--end", help="Range end (ISO date or datetime, exclusive)")(func)
    func = click.option("--start", help="Range start (ISO date or datetime)")(func)
    func = click.option(
        "--preset",
        type=click.Choice([p.value for p in DateRangePreset]),
        help="Predefined range",
    )(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS, help="Bloomly chart aggregation tools")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Root command: load settings and configure logging."""
    try:
        settings = get_settings()
    except ConfigError as exc:
        click.echo(f"❌ {exc}", err=True)
        ctx.exit(int(ExitCode.CONFIG_ERROR))

    configure_loguru(level=settings.log_level, log_dir=settings.log_dir, enable_console=settings.log_console)
    ctx.obj = settings


@cli.command("series", context_settings=CONTEXT_SETTINGS)
@click.option("--events", type=click.Path(path_type=Path), help="YAML/JSON events file")
@click.option(
    "--metric",
    type=click.Choice([m.value for m in ChartMetric]),
    required=True,
    help="Metric to chart",
)
@click.option(
    "--period",
    type=click.Choice([p.value for p in AggregationPeriod]),
    default=AggregationPeriod.DAY.value,
    show_default=True,
    help="Bucket width",
)
@_range_options
@click.option("--tz", help="Timezone override (IANA name)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def series_command(
    ctx: click.Context,
    events: Path | None,
    metric: str,
    period: str,
    preset: str | None,
    start: str | None,
    end: str | None,
    tz: str | None,
    json_output: bool,
) -> None:
    """Show one metric as a bucketed series."""
    cache = _build_cache(ctx.obj, events, tz)
    time_range = parse_range(cache.calendar, preset, start, end)

    try:
        series = cache.series(ChartMetric(metric), time_range, AggregationPeriod(period))
    except Exception as exc:
        exit_code = exit_code_for(exc)
        if exit_code is ExitCode.UNKNOWN_ERROR:
            logger.exception("Unexpected error while computing series", metric=metric)
        click.echo(f"❌ {exc}", err=True)
        ctx.exit(int(exit_code))

    if json_output:
        echo_json(series.to_dict())
    else:
        echo_series(series, cache.calendar)


@cli.command("summary", context_settings=CONTEXT_SETTINGS)
@click.option("--events", type=click.Path(path_type=Path), help="YAML/JSON events file")
@click.option(
    "--period",
    type=click.Choice([p.value for p in AggregationPeriod]),
    default=AggregationPeriod.DAY.value,
    show_default=True,
    help="Bucket width",
)
@_range_options
@click.option("--tz", help="Timezone override (IANA name)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def summary_command(
    ctx: click.Context,
    events: Path | None,
    period: str,
    preset: str | None,
    start: str | None,
    end: str | None,
    tz: str | None,
    json_output: bool,
) -> None:
    """Show every metric, loaded in parallel."""
    cache = _build_cache(ctx.obj, events, tz)
    time_range = parse_range(cache.calendar, preset, start, end)

    try:
        results = cache.load_all(time_range, AggregationPeriod(period), return_exceptions=True)
    except InvalidRange as exc:
        click.echo(f"❌ {exc}", err=True)
        ctx.exit(int(ExitCode.USAGE_ERROR))

    failures = {metric: result for metric, result in results.items() if isinstance(result, Exception)}
    logger.debug("Summary loaded", metrics=len(results) - len(failures), failed=len(failures))

    if json_output:
        echo_json(
            {
                metric.value: {"error": str(result)} if metric in failures else result.to_dict()
                for metric, result in results.items()
            }
        )
    else:
        for metric, result in results.items():
            if metric in failures:
                click.echo(f"❌ {metric.value}: {result}", err=True)
            else:
                echo_series(result, cache.calendar)

    # Loaded metrics are still printed; the exit code reports the first failure
    if failures:
        ctx.exit(int(exit_code_for(next(iter(failures.values())))))
