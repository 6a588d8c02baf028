"""Language-agnostic model of parsed source code.

A ``CodeParser`` is bound to one ``LanguageHandler`` and turns the text of a
source file into a ``ParsedCodeFile`` (imports plus type declarations).

Example usage:
    from src.code_parsing import CodeParser
    from src.code_parsing.languages import JavaHandler

    parsed = CodeParser(JavaHandler()).parse_code(source)
    print([imp.value for imp in parsed.imports])
    print([t.qualified_name for t in parsed.types])

    # Or let the registry pick the handler from a file name
    from src.code_parsing import create_parser
    parsed = create_parser(path="Main.java").parse_code(source)
"""

from .base import CodeParser, LanguageHandler
from .models import (
    Field,
    Import,
    Method,
    Modifiers,
    Package,
    Parameter,
    ParsedCodeFile,
    Type,
    TypeDetails,
    TypeKind,
    TypeMember,
    TypeRegistry,
    Visibility,
)
from .registry import HandlerRegistry, create_parser, get_registry, parse_source

__all__ = [
    # Data models
    "Field",
    "Import",
    "Method",
    "Modifiers",
    "Package",
    "Parameter",
    "ParsedCodeFile",
    "Type",
    "TypeDetails",
    "TypeKind",
    "TypeMember",
    "TypeRegistry",
    "Visibility",
    # Parsing
    "CodeParser",
    "LanguageHandler",
    "HandlerRegistry",
    # Convenience functions
    "create_parser",
    "get_registry",
    "parse_source",
]
