"""Selection of language handlers by language name or file extension."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from src.core.exceptions.errors import UnsupportedLanguageError

from .base import CodeParser, LanguageHandler
from .models import ParsedCodeFile

logger = logging.getLogger(__name__)

HandlerFactory = Callable[..., LanguageHandler]


class HandlerRegistry:
    """Maps language names and file extensions to handler factories.

    Every lookup builds a fresh handler, so parsers obtained from the
    registry never share parsing state.
    """

    def __init__(self, with_builtins: bool = True) -> None:
        """Initialize the registry.

        Args:
            with_builtins: Register the bundled Java and Python handlers.
        """
        self._factories: dict[str, HandlerFactory] = {}
        self._extensions: dict[str, str] = {}
        if with_builtins:
            self._register_builtins()

    def _register_builtins(self) -> None:
        """Register the bundled tree-sitter handlers."""
        from .languages.java_handler import JavaHandler
        from .languages.python_handler import PythonHandler

        for handler_cls in (JavaHandler, PythonHandler):
            self.register(handler_cls.language_name, handler_cls, handler_cls.extensions)

    def register(
        self,
        language: str,
        factory: HandlerFactory,
        extensions: list[str] | tuple[str, ...] = (),
    ) -> None:
        """Register (or replace) the handler factory for a language.

        Args:
            language: Language name, matched case-insensitively.
            factory: Callable returning a new handler; keyword options given
                to :meth:`get_handler` are passed through.
            extensions: File extensions served by this language (".java").
        """
        language = language.lower()
        self._factories[language] = factory
        for ext in extensions:
            self._extensions[_normalize_extension(ext)] = language
        logger.debug(f"Registered handler for {language}: {list(extensions)}")

    def get_handler(self, language: str, **options: Any) -> LanguageHandler:
        """Build a handler for a language.

        Raises:
            UnsupportedLanguageError: If no handler is registered for it.
        """
        factory = self._factories.get(language.lower())
        if factory is None:
            raise UnsupportedLanguageError(
                f"No handler registered for language '{language}'",
                language=language,
                details={"available": self.languages()},
            )
        return factory(**options)

    def language_for_path(self, path: Path | str) -> str:
        """Language name registered for a file's extension.

        Raises:
            UnsupportedLanguageError: If the extension is unknown.
        """
        ext = Path(path).suffix.lower()
        language = self._extensions.get(ext)
        if language is None:
            raise UnsupportedLanguageError(
                f"No handler registered for extension '{ext or '<none>'}'",
                extension=ext or None,
                details={"available": self.extensions()},
            )
        return language

    def handler_for_path(self, path: Path | str, **options: Any) -> LanguageHandler:
        """Build the handler registered for a file's extension."""
        return self.get_handler(self.language_for_path(path), **options)

    def can_handle(self, path: Path | str) -> bool:
        return Path(path).suffix.lower() in self._extensions

    def languages(self) -> list[str]:
        return sorted(self._factories)

    def extensions(self, language: str | None = None) -> list[str]:
        """All registered extensions, or only those of one language."""
        if language is None:
            return sorted(self._extensions)
        return sorted(ext for ext, lang in self._extensions.items() if lang == language.lower())


def _normalize_extension(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith(".") else f".{ext}"


_default_registry: HandlerRegistry | None = None


def get_registry() -> HandlerRegistry:
    """Shared registry holding the bundled handlers."""
    global _default_registry
    if _default_registry is None:
        _default_registry = HandlerRegistry()
    return _default_registry


def create_parser(
    language: str | None = None,
    path: Path | str | None = None,
    registry: HandlerRegistry | None = None,
    **options: Any,
) -> CodeParser:
    """Build a CodeParser for a language, or for the language of a file path.

    Args:
        language: Language name; takes precedence over ``path``.
        path: File whose extension selects the language.
        registry: Registry to use. Defaults to the shared one.
        **options: Passed to the handler factory (e.g. ``module_name``).

    Raises:
        UnsupportedLanguageError: If neither argument selects a handler.
    """
    registry = registry or get_registry()
    if language:
        handler = registry.get_handler(language, **options)
    elif path is not None:
        handler = registry.handler_for_path(path, **options)
    else:
        raise UnsupportedLanguageError("Either a language or a file path is required")
    return CodeParser(handler)


def parse_source(
    code: str,
    language: str | None = None,
    path: Path | str | None = None,
    **options: Any,
) -> ParsedCodeFile:
    """Convenience function to parse source text in one call."""
    return create_parser(language=language, path=path, **options).parse_code(code)
