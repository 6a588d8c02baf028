"""Base class for tree-sitter backed language handlers."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from src.core.exceptions.errors import MalformedSourceError

from ..models import Import, Type, TypeDetails

logger = logging.getLogger(__name__)


class TreeSitterHandler(ABC):
    """Shared plumbing for handlers that walk a tree-sitter syntax tree.

    Malformed source fails the whole file: if the tree contains an ERROR or
    MISSING node, :class:`MalformedSourceError` is raised with the line of
    the first one.
    """

    # File extensions this handler serves
    extensions: list[str] = []
    language_name: str = ""

    def __init__(self) -> None:
        self._parser = None
        self._language = None

    @abstractmethod
    def _init_parser(self) -> None:
        """Create ``self._language`` and ``self._parser``."""

    @abstractmethod
    def _imports_from_tree(self, root: Any, content: bytes) -> list[Import]:
        """Extract imports from a parsed tree."""

    @abstractmethod
    def _details_from_tree(self, root: Any, content: bytes) -> list[TypeDetails]:
        """Extract every type declaration, with members, from a parsed tree."""

    def parse_imports(self, code: str) -> list[Import]:
        """Return every import of the file, in source order.

        Raises:
            MalformedSourceError: If the source has syntax errors.
        """
        root, content = self._parse_checked(code)
        imports = self._imports_from_tree(root, content)
        logger.debug(f"{self.language_name}: extracted {len(imports)} imports")
        return imports

    def parse_types(self, code: str) -> list[Type]:
        """Return every type declaration, nested ones right after their parent.

        Raises:
            MalformedSourceError: If the source has syntax errors.
        """
        return [details.type for details in self.parse_type_details(code)]

    def parse_type_details(self, code: str) -> list[TypeDetails]:
        """Return every type declaration together with its fields and methods.

        Raises:
            MalformedSourceError: If the source has syntax errors.
        """
        root, content = self._parse_checked(code)
        details = self._details_from_tree(root, content)
        logger.debug(f"{self.language_name}: extracted {len(details)} types")
        return details

    def _parse_checked(self, code: str) -> tuple[Any, bytes]:
        """Parse code and reject trees that contain syntax errors.

        Returns:
            Tuple of (root node, encoded source).
        """
        if self._parser is None:
            self._init_parser()

        content = code.encode("utf-8")
        tree = self._parser.parse(content)
        root = tree.root_node

        if root.has_error:
            bad = self._find_error_node(root)
            line = self._get_node_line(bad) if bad is not None else None
            logger.warning(f"{self.language_name}: syntax error at line {line}")
            raise MalformedSourceError(
                f"Invalid {self.language_name} source",
                language=self.language_name,
                line=line,
            )

        return root, content

    def _find_error_node(self, node: Any) -> Any | None:
        """Find the first ERROR or MISSING node in document order."""
        if node.type == "ERROR" or node.is_missing:
            return node
        for child in node.children:
            if child.has_error or child.is_missing:
                found = self._find_error_node(child)
                if found is not None:
                    return found
        return None

    def _get_node_text(self, content: bytes, node: Any) -> str:
        """Get text content of a node.

        Args:
            content: Full source code as bytes.
            node: Tree-sitter node.

        Returns:
            Text content of the node.
        """
        return content[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _get_node_line(self, node: Any) -> int:
        """Get the 1-based starting line number of a node."""
        return node.start_point[0] + 1

    def _field_text(self, content: bytes, node: Any, field: str) -> str | None:
        """Text of a named field child, or None if the field is absent."""
        child = node.child_by_field_name(field)
        if child is None:
            return None
        return self._get_node_text(content, child)
