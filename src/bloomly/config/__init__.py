"""Configuration for Bloomly."""

from .settings import ConfigError, Settings, get_settings, load_env_file, load_settings

__all__ = [
    "ConfigError",
    "Settings",
    "get_settings",
    "load_env_file",
    "load_settings",
]
