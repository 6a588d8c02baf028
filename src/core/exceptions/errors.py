"""Exception hierarchy for codeparse.

Every error carries a human-readable ``message`` and a ``details`` dict with
the structured context (language, line, path...) that the CLI prints.
"""

from typing import Any


def _with_context(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Merge non-empty context values into a details dict."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class CodeParseError(Exception):
    """Base exception for all codeparse errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class MalformedSourceError(CodeParseError):
    """Source text is not valid for the handler's language.

    Attributes:
        language: Language of the handler that rejected the source.
        line: 1-based line of the first syntax error, if known.
    """

    def __init__(
        self,
        message: str,
        language: str | None = None,
        line: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, _with_context(details, language=language, line=line))
        self.language = language
        self.line = line


class UnsupportedLanguageError(CodeParseError):
    """No handler is registered for the requested language or file extension."""

    def __init__(
        self,
        message: str,
        language: str | None = None,
        extension: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, _with_context(details, language=language, extension=extension)
        )


class DuplicateTypeError(CodeParseError):
    """Two different declarations share one qualified name."""

    def __init__(
        self,
        message: str,
        qualified_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, _with_context(details, qualified_name=qualified_name))


class ConfigurationError(CodeParseError):
    """A configuration file or section could not be used."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, _with_context(details, config_key=config_key))
