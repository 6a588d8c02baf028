"""Pytest configuration and shared fixtures."""

from collections.abc import Sequence
from pathlib import Path

import pytest

from src.code_parsing.languages.java_handler import JavaHandler
from src.code_parsing.languages.python_handler import PythonHandler
from src.code_parsing.models import Import, Package, Type, TypeKind


class StubHandler:
    """Language handler returning canned results and recording its calls."""

    def __init__(
        self,
        imports: Sequence[Import] = (),
        types: Sequence[Type] = (),
    ) -> None:
        self.imports = list(imports)
        self.types = list(types)
        self.calls: list[tuple[str, str]] = []

    def parse_imports(self, code: str) -> list[Import]:
        self.calls.append(("parse_imports", code))
        return self.imports

    def parse_types(self, code: str) -> list[Type]:
        self.calls.append(("parse_types", code))
        return self.types


SAMPLE_JAVA = """\
package com.example.service;

import java.util.List;
import java.io.*;

public class UserService extends BaseService implements Runnable {
    private final List<String> names;

    public UserService(List<String> names) {
        this.names = names;
    }

    public void run() {
    }
}
"""


@pytest.fixture
def stub_handler() -> StubHandler:
    """A handler that returns one import and no types."""
    return StubHandler(imports=[Import(value="a.b.C")])


@pytest.fixture
def class_and_interface() -> list[Type]:
    """A class followed by an interface, as a handler would return them."""
    package = Package(name="com.example")
    return [
        Type(package=package, name="Impl", type=TypeKind.CLASS),
        Type(package=package, name="Api", type=TypeKind.INTERFACE),
    ]


@pytest.fixture
def java_handler() -> JavaHandler:
    """Create a Java handler instance."""
    return JavaHandler()


@pytest.fixture
def python_handler() -> PythonHandler:
    """Create a Python handler bound to a module name."""
    return PythonHandler(module_name="geometry.shapes")


@pytest.fixture
def sample_java_file(tmp_path: Path) -> Path:
    """Write a small Java source file.

    Returns:
        Path to the file.
    """
    path = tmp_path / "UserService.java"
    path.write_text(SAMPLE_JAVA, encoding="utf-8")
    return path
