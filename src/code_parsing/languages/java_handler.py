"""Java language handler using Tree-sitter."""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import tree_sitter_java as tsjava

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

_TYPE_DECLARATIONS = {
    "class_declaration": TypeKind.CLASS,
    "record_declaration": TypeKind.CLASS,
    "interface_declaration": TypeKind.INTERFACE,
    "enum_declaration": TypeKind.ENUM,
    "annotation_type_declaration": TypeKind.ANNOTATION,
}

_PRIMITIVES = {"byte", "short", "int", "long", "float", "double", "boolean", "char", "void"}

# Implicitly imported from java.lang
_JAVA_LANG = {
    "AutoCloseable", "Boolean", "Byte", "CharSequence", "Character", "Class",
    "Cloneable", "Comparable", "Deprecated", "Double", "Enum", "Error",
    "Exception", "Float", "FunctionalInterface", "IllegalArgumentException",
    "IllegalStateException", "Integer", "Iterable", "Long", "Math", "Number",
    "Object", "Override", "Record", "Runnable", "RuntimeException", "SafeVarargs",
    "Short", "String", "StringBuilder", "SuppressWarnings", "System", "Thread",
    "Throwable", "Void",
}

_TYPE_ANNOTATION = re.compile(r"@[\w.]+\s*")


@dataclass
class _JavaFile:
    """Per-file lookup state used to qualify type references."""

    package: str
    imports: dict[str, str] = field(default_factory=dict)  # simple name -> qualified
    declared: dict[str, str] = field(default_factory=dict)  # simple or nested name -> nested name
    type_variables: frozenset[str] = frozenset()  # generic parameters in scope


class JavaHandler(TreeSitterHandler):
    """Handler for Java source files.

    Extracts imports and class, interface, enum, annotation and record
    declarations. Nested types follow their enclosing type and are named
    ``Outer.Inner``. Supertypes and member types are stubs qualified through
    single-type imports, ``java.lang`` or the file's own package.
    """

    extensions = [".java"]
    language_name = "java"

    def _init_parser(self) -> None:
        """Initialize the Tree-sitter Java parser."""
        from tree_sitter import Language, Parser

        self._language = Language(tsjava.language())
        self._parser = Parser(self._language)

    # Imports

    def _imports_from_tree(self, root: Any, content: bytes) -> list[Import]:
        imports: list[Import] = []

        for child in root.children:
            if child.type == "import_declaration":
                imp = self._extract_import(child, content)
                if imp:
                    imports.append(imp)

        return imports

    def _extract_import(self, node: Any, content: bytes) -> Import | None:
        """Extract a single import declaration.

        ``import static a.B.c;`` yields ``a.B.c``; ``import a.b.*;`` yields ``a.b.*``.
        """
        name = None
        is_wildcard = False

        for child in node.children:
            if child.type in ("scoped_identifier", "identifier"):
                name = self._get_node_text(content, child)
            elif child.type == "asterisk":
                is_wildcard = True

        if not name:
            return None
        return Import(value=f"{name}.*" if is_wildcard else name)

    def _extract_package(self, root: Any, content: bytes) -> str:
        for child in root.children:
            if child.type == "package_declaration":
                for pkg_child in child.children:
                    if pkg_child.type in ("scoped_identifier", "identifier"):
                        return self._get_node_text(content, pkg_child)
        return ""

    # Types

    def _details_from_tree(self, root: Any, content: bytes) -> list[TypeDetails]:
        ctx = _JavaFile(package=self._extract_package(root, content))

        for imp in self._imports_from_tree(root, content):
            if not imp.is_wildcard:
                ctx.imports[imp.value.rsplit(".", 1)[-1]] = imp.value

        declarations = [c for c in root.children if c.type in _TYPE_DECLARATIONS]
        for node in declarations:
            self._register_declared(node, content, ctx, None)

        details: list[TypeDetails] = []
        for node in declarations:
            self._collect_type(node, content, ctx, None, details)
        return details

    def _register_declared(
        self, node: Any, content: bytes, ctx: _JavaFile, outer: str | None
    ) -> None:
        """Record every type declared in the file so references resolve locally."""
        name = self._field_text(content, node, "name")
        if not name:
            return
        nested_name = f"{outer}.{name}" if outer else name
        ctx.declared.setdefault(name, nested_name)
        ctx.declared[nested_name] = nested_name

        for member in self._body_members(node):
            if member.type in _TYPE_DECLARATIONS:
                self._register_declared(member, content, ctx, nested_name)

    def _collect_type(
        self,
        node: Any,
        content: bytes,
        ctx: _JavaFile,
        outer: tuple[str, TypeKind] | None,
        out: list[TypeDetails],
    ) -> None:
        """Append the declaration at ``node``, then its nested declarations."""
        name = self._field_text(content, node, "name")
        if not name:
            return

        kind = _TYPE_DECLARATIONS[node.type]
        nested_name = f"{outer[0]}.{name}" if outer else name

        implicit: set[str] = set()
        if kind in (TypeKind.INTERFACE, TypeKind.ANNOTATION):
            implicit.add("abstract")
        if node.type == "record_declaration" or (
            kind is TypeKind.ENUM and not self._has_constant_bodies(node)
        ):
            implicit.add("final")
        if outer is not None:
            if kind is not TypeKind.CLASS or node.type == "record_declaration":
                implicit.add("static")
            if outer[1] in (TypeKind.INTERFACE, TypeKind.ANNOTATION):
                implicit.update({"public", "static"})

        super_classes: list[Type] = []
        interfaces: list[Type] = []

        superclass = self._child_of_type(node, "superclass")
        if superclass is not None and superclass.named_children:
            super_classes.append(
                self._reference(ctx, self._type_text(content, superclass.named_children[0]))
            )

        for clause in ("super_interfaces", "extends_interfaces"):
            clause_node = self._child_of_type(node, clause)
            if clause_node is not None:
                interfaces.extend(self._type_list(clause_node, content, ctx))

        type_ = Type(
            package=Package(name=ctx.package),
            name=nested_name,
            modifiers=self._modifiers(node, implicit),
            type=kind,
            super_classes=tuple(super_classes),
            interfaces=tuple(interfaces),
        )

        with self._type_variable_scope(node, content, ctx):
            members = self._extract_members(node, content, ctx, type_)
            out.append(TypeDetails(type=type_, type_members=frozenset(members)))
            logger.debug(f"java: {kind.value} {type_.qualified_name} ({len(members)} members)")

            for member in self._body_members(node):
                if member.type in _TYPE_DECLARATIONS:
                    self._collect_type(member, content, ctx, (nested_name, kind), out)

    def _type_list(self, clause_node: Any, content: bytes, ctx: _JavaFile) -> list[Type]:
        refs: list[Type] = []
        for child in clause_node.named_children:
            if child.type == "type_list":
                for t in child.named_children:
                    refs.append(
                        self._reference(ctx, self._type_text(content, t), TypeKind.INTERFACE)
                    )
        return refs

    # Members

    def _extract_members(
        self, node: Any, content: bytes, ctx: _JavaFile, owner: Type
    ) -> list[TypeMember]:
        members: list[TypeMember] = []
        in_interface = owner.type in (TypeKind.INTERFACE, TypeKind.ANNOTATION)
        owner_ref = Type(package=owner.package, name=owner.name, type=owner.type)

        if node.type == "record_declaration":
            components = node.child_by_field_name("parameters")
            if components is not None:
                for param in self._extract_parameters(components, content, ctx):
                    members.append(
                        Field(
                            name=param.name,
                            type=param.type,
                            modifiers=Modifiers(is_final=True, visibility=Visibility.PRIVATE),
                        )
                    )

        for member in self._body_members(node):
            if member.type in ("field_declaration", "constant_declaration"):
                implicit = {"public", "static", "final"} if in_interface else set()
                members.extend(self._extract_fields(member, content, ctx, implicit))
            elif member.type == "method_declaration":
                with self._type_variable_scope(member, content, ctx):
                    members.append(self._extract_method(member, content, ctx, in_interface))
            elif member.type == "constructor_declaration":
                with self._type_variable_scope(member, content, ctx):
                    members.append(
                        Method(
                            name=self._field_text(content, member, "name") or owner.name,
                            modifiers=self._modifiers(member),
                            return_type=owner_ref,
                            parameters=self._parameters_of(member, content, ctx),
                        )
                    )
            elif member.type == "enum_constant":
                constant = self._field_text(content, member, "name")
                if constant:
                    members.append(
                        Field(
                            name=constant,
                            type=owner_ref,
                            modifiers=Modifiers(
                                is_static=True, is_final=True, visibility=Visibility.PUBLIC
                            ),
                        )
                    )
            elif member.type == "annotation_type_element_declaration":
                element = self._field_text(content, member, "name")
                type_node = member.child_by_field_name("type")
                if element and type_node is not None:
                    members.append(
                        Method(
                            name=element,
                            modifiers=self._modifiers(member, {"public", "abstract"}),
                            return_type=self._reference(ctx, self._type_text(content, type_node)),
                        )
                    )

        return members

    def _extract_fields(
        self, node: Any, content: bytes, ctx: _JavaFile, implicit: set[str]
    ) -> list[Field]:
        """One Field per declarator: ``int a, b[];`` gives ``a: int`` and ``b: int[]``."""
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return []
        type_text = self._type_text(content, type_node)
        modifiers = self._modifiers(node, implicit)

        fields: list[Field] = []
        for declarator in node.children_by_field_name("declarator"):
            name = self._field_text(content, declarator, "name")
            if not name:
                continue
            dims = self._field_text(content, declarator, "dimensions") or ""
            fields.append(
                Field(
                    name=name,
                    type=self._reference(ctx, type_text + dims.replace(" ", "")),
                    modifiers=modifiers,
                )
            )
        return fields

    def _extract_method(
        self, node: Any, content: bytes, ctx: _JavaFile, in_interface: bool
    ) -> Method:
        implicit: set[str] = set()
        if in_interface:
            implicit.add("public")
            keywords = self._modifier_keywords(node)
            if (
                node.child_by_field_name("body") is None
                and "static" not in keywords
                and "private" not in keywords
            ):
                implicit.add("abstract")

        type_node = node.child_by_field_name("type")
        return_text = self._type_text(content, type_node) if type_node is not None else "void"
        dims = self._field_text(content, node, "dimensions") or ""

        return Method(
            name=self._field_text(content, node, "name") or "",
            modifiers=self._modifiers(node, implicit),
            return_type=self._reference(ctx, return_text + dims.replace(" ", "")),
            parameters=self._parameters_of(node, content, ctx),
        )

    def _parameters_of(self, node: Any, content: bytes, ctx: _JavaFile) -> tuple[Parameter, ...]:
        params_node = node.child_by_field_name("parameters")
        if params_node is None:
            return ()
        return tuple(self._extract_parameters(params_node, content, ctx))

    def _extract_parameters(
        self, params_node: Any, content: bytes, ctx: _JavaFile
    ) -> list[Parameter]:
        """Extract formal parameters in declaration order. Varargs become arrays."""
        parameters: list[Parameter] = []

        for child in params_node.named_children:
            if child.type == "formal_parameter":
                name = self._field_text(content, child, "name")
                type_node = child.child_by_field_name("type")
                if name and type_node is not None:
                    dims = self._field_text(content, child, "dimensions") or ""
                    type_text = self._type_text(content, type_node) + dims.replace(" ", "")
                    parameters.append(Parameter(name=name, type=self._reference(ctx, type_text)))
            elif child.type == "spread_parameter":
                type_text = None
                name = None
                for sc in child.named_children:
                    if sc.type == "variable_declarator":
                        name = self._field_text(content, sc, "name")
                    elif sc.type != "modifiers" and type_text is None:
                        type_text = self._type_text(content, sc)
                if name and type_text:
                    parameters.append(
                        Parameter(name=name, type=self._reference(ctx, f"{type_text}[]"))
                    )

        return parameters

    # Helpers

    def _body_members(self, node: Any) -> Iterator[Any]:
        """Children of a declaration body, flattening enum body declarations."""
        body = node.child_by_field_name("body")
        if body is None:
            return
        for child in body.children:
            if child.type == "enum_body_declarations":
                yield from child.children
            else:
                yield child

    def _has_constant_bodies(self, node: Any) -> bool:
        """True if any enum constant declares a class body (``PLUS { ... }``)."""
        return any(
            member.type == "enum_constant" and member.child_by_field_name("body") is not None
            for member in self._body_members(node)
        )

    def _type_variables(self, node: Any, content: bytes) -> frozenset[str]:
        """Names declared in a ``<T, U extends X>`` clause."""
        params = node.child_by_field_name("type_parameters")
        if params is None:
            params = self._child_of_type(node, "type_parameters")
        if params is None:
            return frozenset()

        names = set()
        for param in params.named_children:
            if param.type != "type_parameter":
                continue
            for child in param.named_children:
                if child.type in ("type_identifier", "identifier"):
                    names.add(self._get_node_text(content, child))
                    break
        return frozenset(names)

    @contextmanager
    def _type_variable_scope(self, node: Any, content: bytes, ctx: _JavaFile) -> Iterator[None]:
        """Bring the type parameters of ``node`` into scope for references."""
        outer = ctx.type_variables
        ctx.type_variables = outer | self._type_variables(node, content)
        try:
            yield
        finally:
            ctx.type_variables = outer

    def _child_of_type(self, node: Any, node_type: str) -> Any | None:
        for child in node.children:
            if child.type == node_type:
                return child
        return None

    def _modifier_keywords(self, node: Any) -> set[str]:
        """Keyword modifiers (``public``, ``static``...) of a declaration."""
        mods = self._child_of_type(node, "modifiers")
        if mods is None:
            return set()
        return {
            mod.type
            for mod in mods.children
            if mod.type not in ("annotation", "marker_annotation")
        }

    def _modifiers(self, node: Any, implicit: set[str] | None = None) -> Modifiers:
        keywords = self._modifier_keywords(node) | (implicit or set())

        visibility = Visibility.DEFAULT
        # Explicit private beats an implicit public (private interface methods)
        for candidate in (Visibility.PUBLIC, Visibility.PROTECTED, Visibility.PRIVATE):
            if candidate.value in keywords:
                visibility = candidate

        return Modifiers(
            is_static="static" in keywords,
            is_final="final" in keywords,
            is_abstract="abstract" in keywords,
            visibility=visibility,
        )

    def _type_text(self, content: bytes, node: Any) -> str:
        """Type text without generic arguments, annotations or whitespace."""
        text = _TYPE_ANNOTATION.sub("", self._get_node_text(content, node))
        return "".join(_strip_type_arguments(text).split())

    def _reference(self, ctx: _JavaFile, name: str, kind: TypeKind = TypeKind.CLASS) -> Type:
        """Build a stub for a type named in source."""
        base = name
        dims = ""
        while base.endswith("[]"):
            base = base[:-2]
            dims += "[]"

        package = ""
        if base in _PRIMITIVES or base in ctx.type_variables:
            pass
        elif base in ctx.declared:
            package, base = ctx.package, ctx.declared[base]
        elif base in ctx.imports:
            package, _, base = ctx.imports[base].rpartition(".")
        elif "." in base:
            head, _, rest = base.partition(".")
            if head in ctx.imports:
                package, _, outer = ctx.imports[head].rpartition(".")
                base = f"{outer}.{rest}"
            else:
                package, _, base = base.rpartition(".")
        elif base in _JAVA_LANG:
            package = "java.lang"
        else:
            package = ctx.package

        return Type(package=Package(name=package), name=base + dims, type=kind)


def _strip_type_arguments(text: str) -> str:
    """Remove ``<...>`` sections, including nested ones."""
    depth = 0
    kept: list[str] = []
    for char in text:
        if char == "<":
            depth += 1
        elif char == ">":
            depth = max(depth - 1, 0)
        elif depth == 0:
            kept.append(char)
    return "".join(kept)
