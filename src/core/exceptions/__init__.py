"""Exception definitions module."""

from src.core.exceptions.errors import (
    CodeParseError,
    ConfigurationError,
    DuplicateTypeError,
    MalformedSourceError,
    UnsupportedLanguageError,
)

__all__ = [
    "CodeParseError",
    "ConfigurationError",
    "DuplicateTypeError",
    "MalformedSourceError",
    "UnsupportedLanguageError",
]
