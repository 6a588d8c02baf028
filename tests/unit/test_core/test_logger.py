"""Tests for logging setup."""

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from src.core.config.settings import LoggingSettings
from src.core.logger import get_console, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test setup_logging."""

    def test_rich_handler(self) -> None:
        """Test Rich console handler."""
        setup_logging(LoggingSettings(level="INFO", use_rich=True))
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert any(isinstance(h, RichHandler) for h in root.handlers)

    def test_plain_handler(self) -> None:
        """Test plain stream handler."""
        setup_logging(LoggingSettings(use_rich=False))
        root = logging.getLogger()
        assert not any(isinstance(h, RichHandler) for h in root.handlers)
        assert len(root.handlers) == 1

    def test_level_override(self) -> None:
        """An explicit level wins over settings."""
        setup_logging(LoggingSettings(level="ERROR"), level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_file_handler(self, tmp_path: Path) -> None:
        """Test log file output."""
        log_file = tmp_path / "logs" / "codeparse.log"
        setup_logging(LoggingSettings(file=str(log_file), use_rich=False))
        logging.getLogger("codeparse.test").warning("written to file")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text(encoding="utf-8")


class TestGetLogger:
    """Test get_logger and get_console."""

    def test_cached(self) -> None:
        """Same name returns the same logger."""
        assert get_logger("codeparse.a") is get_logger("codeparse.a")
        assert get_logger("codeparse.a").name == "codeparse.a"

    def test_console_is_stderr(self) -> None:
        """Log output never goes to stdout."""
        assert get_console().stderr is True
