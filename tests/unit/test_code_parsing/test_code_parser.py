"""Tests for the CodeParser façade."""

import logging
from unittest.mock import MagicMock, call

import pytest

from src.code_parsing.base import CodeParser, LanguageHandler
from src.code_parsing.languages import JavaHandler, PythonHandler
from src.code_parsing.models import (
    Import,
    Package,
    ParsedCodeFile,
    Type,
    TypeKind,
)
from src.core.exceptions.errors import MalformedSourceError
from tests.conftest import StubHandler


class TestParseCode:
    """Tests for CodeParser.parse_code."""

    def test_single_import_no_types(self, stub_handler):
        """A handler's imports and types come back as a ParsedCodeFile."""
        parsed = CodeParser(stub_handler).parse_code("X")

        assert parsed == ParsedCodeFile(imports=(Import(value="a.b.C"),), types=())
        assert [imp.value for imp in parsed.imports] == ["a.b.C"]
        assert parsed.types == ()

    def test_output_equals_handler_output(self, class_and_interface):
        """The façade adds no transformation."""
        imports = [Import(value="java.util.List"), Import(value="java.io.*")]
        handler = StubHandler(imports=imports, types=class_and_interface)

        parsed = CodeParser(handler).parse_code("source text")

        assert list(parsed.imports) == handler.parse_imports("source text")
        assert list(parsed.types) == handler.parse_types("source text")
        assert parsed.imports[0] is imports[0]
        assert parsed.types[1] is class_and_interface[1]

    def test_preserves_type_order(self, class_and_interface):
        """Index 0 stays the class and index 1 the interface."""
        parser = CodeParser(StubHandler(types=class_and_interface))

        parsed = parser.parse_code("X")

        assert [t.type for t in parsed.types] == [TypeKind.CLASS, TypeKind.INTERFACE]
        assert [t.name for t in parsed.types] == ["Impl", "Api"]

    def test_empty_input(self):
        """Empty source with an empty handler gives an empty result."""
        parsed = CodeParser(StubHandler()).parse_code("")

        assert parsed == ParsedCodeFile(imports=(), types=())

    def test_enum_super_classes_surface_empty(self):
        """Enum types reach the caller with no super classes."""
        status = Type(
            package=Package(name="com.example"),
            name="Status",
            type=TypeKind.ENUM,
            interfaces=(Type.reference("com.example.Labeled", TypeKind.INTERFACE),),
        )
        parsed = CodeParser(StubHandler(types=[status])).parse_code("X")

        assert parsed.types[0].type is TypeKind.ENUM
        assert parsed.types[0].super_classes == ()

    def test_same_code_passed_to_both_calls(self, stub_handler):
        """Both handler calls receive the unmodified input, imports first."""
        CodeParser(stub_handler).parse_code("  code \n")

        assert stub_handler.calls == [
            ("parse_imports", "  code \n"),
            ("parse_types", "  code \n"),
        ]

    def test_handler_returning_iterators(self, caplog):
        """Handlers may return any iterable, including generators."""
        imp = Import(value="a.b.C")
        handler = MagicMock()
        handler.parse_imports.return_value = (i for i in [imp])
        handler.parse_types.return_value = iter([Type(name="X")])

        with caplog.at_level(logging.DEBUG, logger="src.code_parsing.base"):
            parsed = CodeParser(handler).parse_code("X")

        assert parsed.imports[0] is imp
        assert [t.name for t in parsed.types] == ["X"]
        assert "1 imports, 1 types" in caplog.text

    def test_no_caching_between_calls(self, stub_handler):
        """Every call reaches the handler."""
        parser = CodeParser(stub_handler)
        parser.parse_code("X")
        parser.parse_code("X")

        assert len(stub_handler.calls) == 4


class TestErrorPropagation:
    """Handler failures reach the caller unchanged."""

    def test_import_failure_propagates_without_parsing_types(self):
        """If parse_imports raises, parse_types is never called."""
        handler = MagicMock()
        error = ValueError("bad import")
        handler.parse_imports.side_effect = error

        with pytest.raises(ValueError) as exc_info:
            CodeParser(handler).parse_code("X")

        assert exc_info.value is error
        handler.parse_types.assert_not_called()

    def test_type_failure_propagates(self):
        """A failure in parse_types is not wrapped."""
        handler = MagicMock()
        handler.parse_imports.return_value = []
        handler.parse_types.side_effect = MalformedSourceError("broken", language="x")

        with pytest.raises(MalformedSourceError):
            CodeParser(handler).parse_code("X")

        assert handler.mock_calls == [call.parse_imports("X"), call.parse_types("X")]

    def test_real_handler_error_propagates(self, java_handler):
        """Malformed source raises the handler's own error type."""
        with pytest.raises(MalformedSourceError):
            CodeParser(java_handler).parse_code("public class {")


class TestLanguageHandlerProtocol:
    """Tests for the LanguageHandler protocol."""

    def test_bundled_handlers_conform(self):
        """The bundled handlers satisfy the protocol."""
        assert isinstance(JavaHandler(), LanguageHandler)
        assert isinstance(PythonHandler(), LanguageHandler)

    def test_stub_handler_conforms(self, stub_handler):
        """Any object with both methods is a handler."""
        assert isinstance(stub_handler, LanguageHandler)

    def test_object_without_methods_does_not_conform(self):
        """Objects missing the methods are rejected."""
        assert not isinstance(object(), LanguageHandler)

    def test_handler_fixed_at_construction(self, stub_handler):
        """The bound handler is exposed read-only."""
        parser = CodeParser(stub_handler)

        assert parser.language_handler is stub_handler
        with pytest.raises(AttributeError):
            parser.language_handler = StubHandler()  # type: ignore[misc]
