"""Logging system with Rich support.

Log records always go to stderr so that parse output on stdout stays
machine-readable.
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from src.core.config.settings import LoggingSettings, get_settings

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console: Console | None = None
_loggers: dict[str, logging.Logger] = {}


def _console_handler(settings: LoggingSettings) -> logging.Handler:
    if not settings.use_rich:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(settings.format))
        return handler

    # Source text and paths end up in messages; never treat them as markup
    return RichHandler(
        console=get_console(),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def _file_handler(settings: LoggingSettings, level: int) -> logging.Handler:
    settings.file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(settings.file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    settings: LoggingSettings | None = None,
    level: str | None = None,
) -> None:
    """Configure the root logger, replacing any handlers it already has.

    Args:
        settings: Logging settings. Uses global settings if not provided.
        level: Overrides the configured level (e.g. "DEBUG" for --verbose).
    """
    if settings is None:
        settings = get_settings().logging
    effective_level = getattr(logging, (level or settings.level).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(effective_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(settings))
    if settings.file:
        root_logger.addHandler(_file_handler(settings, effective_level))


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger by name.

    The root logger is configured from settings on first use if nothing
    configured it before.

    Args:
        name: Logger name (typically __name__).
    """
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
        if not logging.getLogger().handlers:
            setup_logging()

    return _loggers[name]


def get_console() -> Console:
    """Get the shared stderr Rich console."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console
