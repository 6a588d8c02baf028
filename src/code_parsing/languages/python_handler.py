"""Python language handler using Tree-sitter."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import tree_sitter_python as tspython

from ..models import (
    Field,
    Import,
    Method,
    Modifiers,
    Package,
    Parameter,
    Type,
    TypeDetails,
    TypeKind,
    TypeMember,
    Visibility,
)
from .base import TreeSitterHandler

logger = logging.getLogger(__name__)

_ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
_IGNORED_BASES = {"object", "Generic"}
# Statements whose blocks declare names in the enclosing scope
_COMPOUND_STATEMENTS = {
    "if_statement", "elif_clause", "else_clause",
    "try_statement", "except_clause", "except_group_clause", "finally_clause",
    "with_statement", "block",
}
# Base class expressions that name a type; calls such as namedtuple(...) do not
_BASE_EXPRESSIONS = {"identifier", "attribute", "subscript"}
_BUILTINS = {
    "None", "bool", "bytes", "bytearray", "complex", "dict", "float", "frozenset",
    "int", "list", "memoryview", "object", "set", "str", "tuple", "type",
}

ANY = Type(package=Package(name="typing"), name="Any")


@dataclass
class _PythonFile:
    """Per-file lookup state used to qualify type references."""

    module: str
    imports: dict[str, str] = field(default_factory=dict)  # local name -> qualified
    declared: dict[str, str] = field(default_factory=dict)  # simple or nested name -> nested name


class PythonHandler(TreeSitterHandler):
    """Handler for Python source files.

    Python has no visibility keywords or packages inside the file, so:
    the package is the module name given at construction (default package
    if omitted); visibility follows naming conventions (``__x`` private,
    ``_x`` protected, otherwise public); decorators such as
    ``@staticmethod``, ``@abstractmethod`` and ``@final`` map to modifier
    flags. Subclasses of ``Enum`` become enums and subclasses of
    ``Protocol`` become interfaces.
    """

    extensions = [".py", ".pyi"]
    language_name = "python"

    def __init__(self, module_name: str | None = None) -> None:
        """Initialize the Python handler.

        Args:
            module_name: Dotted module name used as the package of every type.
        """
        super().__init__()
        self.module_name = module_name or ""

    def _init_parser(self) -> None:
        """Initialize the Tree-sitter Python parser."""
        from tree_sitter import Language, Parser

        self._language = Language(tspython.language())
        self._parser = Parser(self._language)

    # Imports

    def _imports_from_tree(self, root: Any, content: bytes) -> list[Import]:
        return [
            Import(value=value)
            for value, _, _ in self._walk_imports(root, content)
        ]

    def _walk_imports(self, node: Any, content: bytes) -> Iterator[tuple[str, str, str]]:
        """Yield (imported value, local name, name bound locally) in source order.

        Imports nested in functions or ``if TYPE_CHECKING:`` blocks are included.
        """
        for child in node.children:
            if child.type == "import_statement":
                yield from self._extract_import_statement(child, content)
            elif child.type in ("import_from_statement", "future_import_statement"):
                yield from self._extract_import_from_statement(child, content)
            elif child.named_child_count:
                yield from self._walk_imports(child, content)

    def _extract_import_statement(
        self, node: Any, content: bytes
    ) -> Iterator[tuple[str, str, str]]:
        """``import a.b`` binds ``a`` to ``a``; ``import a.b as c`` binds ``c`` to ``a.b``."""
        for name_node in node.children_by_field_name("name"):
            if name_node.type == "aliased_import":
                module = self._field_text(content, name_node, "name") or ""
                alias = self._field_text(content, name_node, "alias") or module
                yield module, alias, module
            else:
                module = self._get_node_text(content, name_node)
                head = module.split(".")[0]
                yield module, head, head

    def _extract_import_from_statement(
        self, node: Any, content: bytes
    ) -> Iterator[tuple[str, str, str]]:
        """``from m import a as b`` gives ``m.a``; relative prefixes are kept."""
        if node.type == "future_import_statement":
            module = "__future__"
        else:
            module = "".join((self._field_text(content, node, "module_name") or "").split())

        def qualify(name: str) -> str:
            if not module:
                return name
            return f"{module}{name}" if module.endswith(".") else f"{module}.{name}"

        for child in node.children:
            if child.type == "wildcard_import":
                yield qualify("*"), "*", qualify("*")

        for name_node in node.children_by_field_name("name"):
            if name_node.type == "aliased_import":
                name = self._field_text(content, name_node, "name") or ""
                alias = self._field_text(content, name_node, "alias") or name
            else:
                name = self._get_node_text(content, name_node)
                alias = name
            yield qualify(name), alias, qualify(name)

    # Types

    def _details_from_tree(self, root: Any, content: bytes) -> list[TypeDetails]:
        ctx = _PythonFile(module=self.module_name)
        for _, local, bound in self._walk_imports(root, content):
            if local != "*":
                ctx.imports[local] = bound

        declarations = list(self._class_nodes(root, content))
        for node, _ in declarations:
            self._register_declared(node, content, ctx, None)

        details: list[TypeDetails] = []
        for node, decorators in declarations:
            self._collect_class(node, decorators, content, ctx, None, details)
        return details

    def _class_nodes(self, block: Any, content: bytes) -> Iterator[tuple[Any, list[str]]]:
        """Yield (class_definition, decorator names) for classes declared in ``block``.

        Classes under ``if``/``try``/``with`` statements belong to the
        enclosing scope and are included in source order. Function bodies
        are not entered.
        """
        for child in block.children:
            if child.type == "class_definition":
                yield child, []
            elif child.type == "decorated_definition":
                definition = child.child_by_field_name("definition")
                if definition is not None and definition.type == "class_definition":
                    yield definition, self._decorator_names(child, content)
            elif child.type in _COMPOUND_STATEMENTS:
                yield from self._class_nodes(child, content)

    def _register_declared(
        self, node: Any, content: bytes, ctx: _PythonFile, outer: str | None
    ) -> None:
        name = self._field_text(content, node, "name")
        if not name:
            return
        nested_name = f"{outer}.{name}" if outer else name
        ctx.declared.setdefault(name, nested_name)
        ctx.declared[nested_name] = nested_name

        body = node.child_by_field_name("body")
        if body is not None:
            for child, _ in self._class_nodes(body, content):
                self._register_declared(child, content, ctx, nested_name)

    def _collect_class(
        self,
        node: Any,
        decorators: list[str],
        content: bytes,
        ctx: _PythonFile,
        outer: str | None,
        out: list[TypeDetails],
    ) -> None:
        """Append the class at ``node``, then the classes nested in its body."""
        name = self._field_text(content, node, "name")
        if not name:
            return
        nested_name = f"{outer}.{name}" if outer else name

        bases: list[str] = []
        metaclass = None
        superclasses = node.child_by_field_name("superclasses")
        if superclasses is not None:
            for arg in superclasses.named_children:
                if arg.type == "keyword_argument":
                    if self._field_text(content, arg, "name") == "metaclass":
                        metaclass = self._field_text(content, arg, "value")
                elif arg.type in _BASE_EXPRESSIONS:
                    bases.append(_strip_subscript(self._get_node_text(content, arg)))

        simple_bases = [_simple_name(b) for b in bases]
        is_abstract = "ABC" in simple_bases or (
            metaclass is not None and _simple_name(metaclass) == "ABCMeta"
        )

        super_classes: tuple[Type, ...] = ()
        interfaces: tuple[Type, ...] = ()
        if any(b in _ENUM_BASES for b in simple_bases):
            kind = TypeKind.ENUM
        elif "Protocol" in simple_bases:
            kind = TypeKind.INTERFACE
            is_abstract = True
            interfaces = tuple(
                self._reference(ctx, b, TypeKind.INTERFACE)
                for b, simple in zip(bases, simple_bases)
                if simple not in _IGNORED_BASES and simple != "Protocol"
            )
        else:
            kind = TypeKind.CLASS
            super_classes = tuple(
                self._reference(ctx, b)
                for b, simple in zip(bases, simple_bases)
                if simple not in _IGNORED_BASES
            )

        type_ = Type(
            package=Package(name=ctx.module),
            name=nested_name,
            modifiers=Modifiers(
                is_final="final" in decorators,
                is_abstract=is_abstract,
                visibility=_visibility(name),
            ),
            type=kind,
            super_classes=super_classes,
            interfaces=interfaces,
        )

        body = node.child_by_field_name("body")
        members = self._extract_members(body, content, ctx, type_) if body is not None else []
        out.append(TypeDetails(type=type_, type_members=frozenset(members)))
        logger.debug(f"python: {kind.value} {type_.qualified_name} ({len(members)} members)")

        if body is not None:
            for child, child_decorators in self._class_nodes(body, content):
                self._collect_class(child, child_decorators, content, ctx, nested_name, out)

    # Members

    def _extract_members(
        self, body: Any, content: bytes, ctx: _PythonFile, owner: Type
    ) -> list[TypeMember]:
        members: list[TypeMember] = []
        owner_ref = Type(package=owner.package, name=owner.name, type=owner.type)

        for child in body.children:
            if child.type == "expression_statement":
                for expr in child.named_children:
                    if expr.type == "assignment":
                        members.extend(self._extract_fields(expr, content, ctx, owner_ref))
            elif child.type == "function_definition":
                members.append(self._extract_method(child, [], content, ctx))
            elif child.type == "decorated_definition":
                definition = child.child_by_field_name("definition")
                if definition is not None and definition.type == "function_definition":
                    decorators = self._decorator_names(child, content)
                    members.append(self._extract_method(definition, decorators, content, ctx))

        return members

    def _extract_fields(
        self, node: Any, content: bytes, ctx: _PythonFile, owner: Type
    ) -> list[Field]:
        """Class attributes from ``x = ...``, ``x: T = ...``, ``x: T``,
        ``a = b = ...`` and ``x, y = ...``, in source order.
        """
        annotation = self._field_text(content, node, "type")
        names: list[str] = []
        current = node
        while current is not None and current.type == "assignment":
            left = current.child_by_field_name("left")
            if left is not None:
                names.extend(self._target_names(left, content))
            current = current.child_by_field_name("right")

        return [self._make_field(name, annotation, ctx, owner) for name in names]

    def _target_names(self, target: Any, content: bytes) -> list[str]:
        """Plain names bound by an assignment target; attributes and subscripts are skipped."""
        if target.type == "identifier":
            return [self._get_node_text(content, target)]
        if target.type in ("pattern_list", "tuple_pattern", "list_pattern"):
            names: list[str] = []
            for child in target.named_children:
                names.extend(self._target_names(child, content))
            return names
        return []

    def _make_field(
        self, name: str, annotation: str | None, ctx: _PythonFile, owner: Type
    ) -> Field:
        if owner.type is TypeKind.ENUM and annotation is None and not _is_dunder(name):
            return Field(
                name=name,
                type=owner,
                modifiers=Modifiers(is_static=True, is_final=True, visibility=Visibility.PUBLIC),
            )

        is_static = False
        is_final = name.isupper()
        field_type = ANY
        if annotation is not None:
            wrapper, inner = _split_subscript(annotation)
            if _simple_name(wrapper) == "ClassVar":
                is_static = True
                annotation = inner
                wrapper, inner = _split_subscript(annotation or "")
            if _simple_name(wrapper) == "Final":
                is_final = True
                annotation = inner
            if annotation:
                field_type = self._reference(ctx, annotation)

        return Field(
            name=name,
            type=field_type,
            modifiers=Modifiers(
                is_static=is_static, is_final=is_final, visibility=_visibility(name)
            ),
        )

    def _extract_method(
        self, node: Any, decorators: list[str], content: bytes, ctx: _PythonFile
    ) -> Method:
        name = self._field_text(content, node, "name") or ""
        is_static = "staticmethod" in decorators or "classmethod" in decorators

        parameters = self._extract_parameters(node.child_by_field_name("parameters"), content, ctx)
        if (
            "staticmethod" not in decorators
            and parameters
            and parameters[0][0] in ("self", "cls")
        ):
            parameters = parameters[1:]

        return_text = self._field_text(content, node, "return_type")

        return Method(
            name=name,
            modifiers=Modifiers(
                is_static=is_static,
                is_final="final" in decorators,
                is_abstract="abstractmethod" in decorators,
                visibility=_visibility(name),
            ),
            return_type=self._reference(ctx, return_text) if return_text else ANY,
            parameters=tuple(
                Parameter(name=p_name, type=self._reference(ctx, p_type) if p_type else ANY)
                for p_name, p_type in parameters
            ),
        )

    def _extract_parameters(
        self, params_node: Any, content: bytes, ctx: _PythonFile
    ) -> list[tuple[str, str | None]]:
        """(name, annotation text) pairs in declaration order; separators skipped."""
        if params_node is None:
            return []

        params: list[tuple[str, str | None]] = []
        for child in params_node.named_children:
            if child.type == "identifier":
                params.append((self._get_node_text(content, child), None))
            elif child.type in ("list_splat_pattern", "dictionary_splat_pattern"):
                params.append((self._splat_name(child, content), None))
            elif child.type == "typed_parameter":
                target = child.named_children[0]
                if target.type == "identifier":
                    p_name = self._get_node_text(content, target)
                else:
                    p_name = self._splat_name(target, content)
                params.append((p_name, self._field_text(content, child, "type")))
            elif child.type in ("default_parameter", "typed_default_parameter"):
                p_name = self._field_text(content, child, "name")
                if p_name:
                    params.append((p_name, self._field_text(content, child, "type")))
        return params

    # Helpers

    def _splat_name(self, node: Any, content: bytes) -> str:
        for child in node.named_children:
            if child.type == "identifier":
                return self._get_node_text(content, child)
        return self._get_node_text(content, node).lstrip("*")

    def _decorator_names(self, node: Any, content: bytes) -> list[str]:
        """Last dotted component of each decorator, call arguments dropped."""
        names: list[str] = []
        for child in node.children:
            if child.type != "decorator" or not child.named_children:
                continue
            expr = child.named_children[0]
            if expr.type == "call":
                expr = expr.child_by_field_name("function") or expr
            names.append(_simple_name(self._get_node_text(content, expr)))
        return names

    def _reference(self, ctx: _PythonFile, text: str, kind: TypeKind = TypeKind.CLASS) -> Type:
        """Build a stub for an annotation or base class expression."""
        base = "".join(_strip_subscript(text).split()).strip("'\"")

        if "|" in base:
            return Type(name=base, type=kind)

        package = ctx.module
        if base in ctx.declared:
            base = ctx.declared[base]
        elif base in ctx.imports:
            package, _, base = ctx.imports[base].rpartition(".")
        elif "." in base:
            head, _, rest = base.partition(".")
            if head in ctx.imports:
                package, _, base = f"{ctx.imports[head]}.{rest}".rpartition(".")
            else:
                package, _, base = base.rpartition(".")
        elif base in _BUILTINS:
            package = "builtins"

        return Type(package=Package(name=package), name=base, type=kind)


def _strip_subscript(text: str) -> str:
    """``Dict[str, List[int]]`` -> ``Dict``."""
    depth = 0
    kept: list[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(depth - 1, 0)
        elif depth == 0:
            kept.append(char)
    return "".join(kept)


def _split_subscript(text: str) -> tuple[str, str | None]:
    """``ClassVar[int]`` -> ``("ClassVar", "int")``; ``int`` -> ``("int", None)``."""
    text = text.strip()
    if text.endswith("]") and "[" in text:
        head, _, rest = text.partition("[")
        return head.strip(), rest[:-1].strip()
    return text, None


def _simple_name(dotted: str) -> str:
    return dotted.rsplit(".", 1)[-1]


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _visibility(name: str) -> Visibility:
    simple = _simple_name(name)
    if simple.startswith("__") and not _is_dunder(simple):
        return Visibility.PRIVATE
    if simple.startswith("_") and not _is_dunder(simple):
        return Visibility.PROTECTED
    return Visibility.PUBLIC
