"""Tests for configuration management."""

import os
from pathlib import Path

import pytest

from bloomly.config.settings import (
    ConfigError,
    Settings,
    get_settings,
    load_env_file,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env():
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for var in [k for k in os.environ if k.startswith("BLOOMLY_")]:
        del os.environ[var]

    import bloomly.config.settings as settings_module

    settings_module._settings = None

    yield

    os.environ.clear()
    os.environ.update(original_env)
    settings_module._settings = None


def test_settings_defaults():
    """A fresh checkout runs without any configuration."""
    settings = Settings()

    assert settings.timezone == "UTC"
    assert settings.week_start_on == 0
    assert settings.cache_ttl_seconds == 120.0
    assert settings.cache_max_entries == 20
    assert settings.events_file is None
    assert settings.log_level == "INFO"
    assert settings.log_dir is None


def test_settings_with_string_paths():
    settings = Settings(events_file="events.yaml", log_dir="logs")

    assert settings.events_file == Path("events.yaml")
    assert settings.log_dir == Path("logs")


def test_settings_normalizes_log_level():
    assert Settings(log_level="debug").log_level == "DEBUG"


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"timezone": "Mars/Olympus"}, "unknown timezone"),
        ({"week_start_on": 7}, "BLOOMLY_WEEK_START"),
        ({"cache_max_entries": 0}, "BLOOMLY_CACHE_MAX_ENTRIES"),
        ({"log_level": "LOUD"}, "BLOOMLY_LOG_LEVEL"),
    ],
)
def test_settings_validation(kwargs, message):
    """Invalid config produces clear errors."""
    with pytest.raises(ConfigError, match=message):
        Settings(**kwargs)


def test_load_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        """
# Chart settings
BLOOMLY_TIMEZONE="Europe/Brussels"
BLOOMLY_LOG_LEVEL='DEBUG'

BLOOMLY_CACHE_TTL=30
"""
    )

    load_env_file(env_file)

    assert os.environ["BLOOMLY_TIMEZONE"] == "Europe/Brussels"
    assert os.environ["BLOOMLY_LOG_LEVEL"] == "DEBUG"
    assert os.environ["BLOOMLY_CACHE_TTL"] == "30"


def test_load_env_file_keeps_existing_environment(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("BLOOMLY_TIMEZONE=Europe/Brussels\n")
    os.environ["BLOOMLY_TIMEZONE"] = "America/New_York"

    load_env_file(env_file)

    assert os.environ["BLOOMLY_TIMEZONE"] == "America/New_York"


def test_settings_from_env(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        """
BLOOMLY_TIMEZONE=America/New_York
BLOOMLY_WEEK_START=6
BLOOMLY_CACHE_TTL=0
BLOOMLY_CACHE_MAX_ENTRIES=5
BLOOMLY_EVENTS_FILE=data/events.yaml
BLOOMLY_LOG_DIR=logs
BLOOMLY_LOG_CONSOLE=false
"""
    )

    settings = Settings.from_env(env_file)

    assert settings.timezone == "America/New_York"
    assert settings.week_start_on == 6
    assert settings.cache_ttl_seconds == 0.0
    assert settings.cache_max_entries == 5
    assert settings.events_file == Path("data/events.yaml")
    assert settings.log_dir == Path("logs")
    assert settings.log_console is False


def test_settings_from_env_without_file(tmp_path):
    settings = Settings.from_env(tmp_path / "missing.env")

    assert settings == Settings()


def test_settings_from_env_invalid_number(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("BLOOMLY_CACHE_TTL=soon\n")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        Settings.from_env(env_file)


def test_load_and_get_settings(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("BLOOMLY_WEEK_START=3\n")

    loaded = load_settings(env_file)

    assert get_settings() is loaded
    assert loaded.week_start_on == 3


def test_get_settings_loads_lazily(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    os.environ["BLOOMLY_TIMEZONE"] = "Europe/Brussels"

    assert get_settings().timezone == "Europe/Brussels"
