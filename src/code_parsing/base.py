"""Language handler contract and the code parser façade."""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import Import, ParsedCodeFile, Type

logger = logging.getLogger(__name__)


@runtime_checkable
class LanguageHandler(Protocol):
    """Per-language extraction of imports and types from source text.

    Implementations decide how malformed source is treated, but must be
    deterministic and must not raise for syntactically valid files of their
    language.
    """

    def parse_imports(self, code: str) -> Sequence[Import]:
        """Return every import of the file, in source order."""
        ...

    def parse_types(self, code: str) -> Sequence[Type]:
        """Return every type declaration of the file, in declaration order."""
        ...


class CodeParser:
    """Parses whole source files with a single language handler.

    The handler is fixed at construction; build one parser per language.
    """

    def __init__(self, language_handler: LanguageHandler) -> None:
        self._language_handler = language_handler

    @property
    def language_handler(self) -> LanguageHandler:
        return self._language_handler

    def parse_code(self, code: str) -> ParsedCodeFile:
        """Parse the provided code.

        Imports are requested before types. Whatever the handler returns is
        passed through unmodified and in the same order, and anything it
        raises reaches the caller unchanged.

        Args:
            code: The entire source text of one file.

        Returns:
            The imports and types of the file.
        """
        imports = tuple(self._language_handler.parse_imports(code))
        types = tuple(self._language_handler.parse_types(code))

        logger.debug(
            "%s: %d imports, %d types",
            type(self._language_handler).__name__,
            len(imports),
            len(types),
        )

        return ParsedCodeFile(imports=imports, types=types)
