"""Configuration module for the loopback redirect listener."""

from loopback_redirect.exceptions import ConfigurationError

from .settings import ListenerSettings, LoggingSettings, Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "ListenerSettings",
    "LoggingSettings",
    "ConfigurationError",
]
