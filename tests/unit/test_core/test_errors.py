"""Tests for custom exceptions."""

import pytest

from src.core.exceptions import (
    CodeParseError,
    ConfigurationError,
    DuplicateTypeError,
    MalformedSourceError,
    UnsupportedLanguageError,
)


class TestCodeParseError:
    """Test the base exception."""

    def test_message_only(self) -> None:
        """Test string form without details."""
        error = CodeParseError("Something failed")
        assert str(error) == "Something failed"
        assert error.details == {}

    def test_with_details(self) -> None:
        """Test string form with details."""
        error = CodeParseError("Something failed", details={"path": "a.java"})
        assert str(error) == "Something failed - Details: {'path': 'a.java'}"

    @pytest.mark.parametrize(
        "error",
        [
            MalformedSourceError("bad"),
            UnsupportedLanguageError("bad"),
            DuplicateTypeError("bad"),
            ConfigurationError("bad"),
        ],
    )
    def test_hierarchy(self, error: CodeParseError) -> None:
        """Every error can be caught as CodeParseError."""
        assert isinstance(error, CodeParseError)


class TestSpecificErrors:
    """Test the attributes of each error type."""

    def test_malformed_source(self) -> None:
        """Test language and line."""
        error = MalformedSourceError("Invalid java source", language="java", line=3)
        assert error.language == "java"
        assert error.line == 3
        assert error.details == {"language": "java", "line": 3}

    def test_unsupported_language(self) -> None:
        """Test extension detail."""
        error = UnsupportedLanguageError("No handler", extension=".rb")
        assert error.details == {"extension": ".rb"}

    def test_duplicate_type(self) -> None:
        """Test qualified name detail."""
        error = DuplicateTypeError("Conflict", qualified_name="a.B")
        assert error.details["qualified_name"] == "a.B"

    def test_configuration(self) -> None:
        """Test config key detail."""
        error = ConfigurationError("Bad", config_key="parser.max_source_bytes")
        assert error.details["config_key"] == "parser.max_source_bytes"
