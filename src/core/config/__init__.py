"""Configuration management for codeparse."""

from src.core.config.loader import ConfigLoader
from src.core.config.settings import (
    LoggingSettings,
    ParserSettings,
    Settings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "LoggingSettings",
    "ParserSettings",
    "Settings",
    "get_settings",
]
