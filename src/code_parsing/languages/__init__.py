"""Bundled language handlers."""

from .base import TreeSitterHandler
from .java_handler import JavaHandler
from .python_handler import PythonHandler

__all__ = [
    "TreeSitterHandler",
    "JavaHandler",
    "PythonHandler",
]
