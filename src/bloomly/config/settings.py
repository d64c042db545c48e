"""Centralized configuration for Bloomly charts.

Loads configuration from a .env file and the environment and provides
typed access to settings.

- A fresh checkout runs with no configuration at all (UTC, 120 s cache)
- Invalid values produce clear errors
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import pytz

__all__ = [
    "ConfigError",
    "Settings",
    "get_settings",
    "load_env_file",
    "load_settings",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings for the chart engine and its CLI.

    Attributes
    ----------
    timezone : str
        IANA timezone used to align buckets
    week_start_on : int
        First day of the week (0=Monday, 6=Sunday)
    cache_ttl_seconds : float
        Lifetime of cached series; 0 disables caching
    cache_max_entries : int
        Maximum number of cached series
    events_file : Path | None
        Default events file for the CLI
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for the JSON log file (None = console only)
    log_console : bool
        Enable console logging
    """

    timezone: str = "UTC"
    week_start_on: int = 0
    cache_ttl_seconds: float = 120.0
    cache_max_entries: int = 20
    events_file: Path | None = None
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_console: bool = True

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.events_file and isinstance(self.events_file, str):
            self.events_file = Path(self.events_file)
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        if self.timezone not in pytz.all_timezones_set:
            raise ConfigError(
                f"BLOOMLY_TIMEZONE has unknown timezone '{self.timezone}'. "
                "Use an IANA name such as UTC or Europe/Brussels"
            )

        if not 0 <= self.week_start_on <= 6:
            raise ConfigError(
                f"BLOOMLY_WEEK_START must be between 0 (Monday) and 6 (Sunday), got {self.week_start_on}"
            )

        if self.cache_max_entries < 1:
            raise ConfigError(f"BLOOMLY_CACHE_MAX_ENTRIES must be positive, got {self.cache_max_entries}")

        self.log_level = self.log_level.upper()
        if self.log_level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError(f"BLOOMLY_LOG_LEVEL has unknown level '{self.log_level}'")

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, then reads os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Returns
        -------
        Settings
            Loaded settings

        Raises
        ------
        ConfigError
            If a setting is invalid
        """
        if env_file is None:
            env_file = Path(".env")
        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                timezone=os.environ.get("BLOOMLY_TIMEZONE", "UTC"),
                week_start_on=int(os.environ.get("BLOOMLY_WEEK_START", "0")),
                cache_ttl_seconds=float(os.environ.get("BLOOMLY_CACHE_TTL", "120")),
                cache_max_entries=int(os.environ.get("BLOOMLY_CACHE_MAX_ENTRIES", "20")),
                events_file=Path(os.environ["BLOOMLY_EVENTS_FILE"]) if os.environ.get("BLOOMLY_EVENTS_FILE") else None,
                log_level=os.environ.get("BLOOMLY_LOG_LEVEL", "INFO"),
                log_dir=Path(os.environ["BLOOMLY_LOG_DIR"]) if os.environ.get("BLOOMLY_LOG_DIR") else None,
                log_console=os.environ.get("BLOOMLY_LOG_CONSOLE", "true").lower() in _TRUE_VALUES,
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Variables already present in the environment are not overridden.

    Parameters
    ----------
    env_file
        Path to .env file
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                # Remove quotes
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ.setdefault(key, value)


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and keep them as the current instance."""
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
