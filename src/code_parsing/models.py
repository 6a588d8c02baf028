"""Data models for parsed source code.

Every record is an immutable pydantic model: instances compare and hash by
value, sequences are tuples, and JSON output uses camelCase keys
(``isStatic``, ``superClasses``, ``typeMembers``, ``returnType``).
"""

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Annotated, Literal, Union

import pydantic
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions.errors import DuplicateTypeError


class Visibility(str, Enum):
    """Visibility/access level of a declared element."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    DEFAULT = "default"  # No explicit keyword (Java package-private)


class TypeKind(str, Enum):
    """Kind of a type declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    ANNOTATION = "annotation"


class CodeModel(BaseModel):
    """Base configuration shared by every record."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Package(CodeModel):
    """Namespace/module a type belongs to. An empty name is the default package."""

    name: str = ""


class Modifiers(CodeModel):
    """Modifier flags attached to any declared element."""

    is_static: bool = False
    is_final: bool = False
    is_abstract: bool = False
    visibility: Visibility = Visibility.DEFAULT


class Type(CodeModel):
    """A class, interface, enum or annotation declaration.

    Supertypes, interfaces and member types are usually stubs built with
    :meth:`reference`: they carry the package, name and kind of the target
    but none of its own supertypes. Mutually referencing declarations
    therefore never nest into each other; use :class:`TypeRegistry` to go
    from a stub to the full declaration.
    """

    package: Package = Package()
    name: str
    modifiers: Modifiers = Modifiers()
    type: TypeKind = TypeKind.CLASS
    super_classes: tuple["Type", ...] = ()
    interfaces: tuple["Type", ...] = ()

    @model_validator(mode="after")
    def _check_kind_consistency(self) -> "Type":
        if self.super_classes and self.type is not TypeKind.CLASS:
            raise ValueError(
                f"{self.type.value} {self.name!r} cannot declare super classes"
            )
        if self.interfaces and self.type is TypeKind.ANNOTATION:
            raise ValueError(f"annotation {self.name!r} cannot declare interfaces")
        return self

    @property
    def qualified_name(self) -> str:
        """Package-qualified name, e.g. ``java.util.List``."""
        if self.package.name:
            return f"{self.package.name}.{self.name}"
        return self.name

    @classmethod
    def reference(cls, qualified_name: str, kind: TypeKind = TypeKind.CLASS) -> "Type":
        """Build a stub type from a dotted name.

        The last dotted component becomes the name; everything before it
        becomes the package.
        """
        package, _, name = qualified_name.rpartition(".")
        return cls(package=Package(name=package), name=name, type=kind)


class TypeMember(CodeModel):
    """A member of a type: a field or a method."""

    name: str
    modifiers: Modifiers = Modifiers()


class Field(TypeMember):
    """Field declared in a type."""

    kind: Literal["field"] = "field"
    type: Type


class Parameter(CodeModel):
    """Method parameter."""

    name: str
    type: Type


class Method(TypeMember):
    """Method (or constructor) declared in a type."""

    kind: Literal["method"] = "method"
    return_type: Type
    parameters: tuple[Parameter, ...] = ()

    @property
    def signature(self) -> str:
        """Get method signature string."""
        params = ", ".join(f"{p.type.name} {p.name}" for p in self.parameters)
        return f"{self.return_type.name} {self.name}({params})"


AnyTypeMember = Annotated[Union[Field, Method], pydantic.Field(discriminator="kind")]


class TypeDetails(CodeModel):
    """A type together with its members."""

    type: Type
    type_members: frozenset[AnyTypeMember] = frozenset()

    @property
    def field_members(self) -> list[Field]:
        """Fields sorted by name."""
        return sorted(
            (m for m in self.type_members if isinstance(m, Field)), key=lambda m: m.name
        )

    @property
    def method_members(self) -> list[Method]:
        """Methods sorted by name, then arity."""
        return sorted(
            (m for m in self.type_members if isinstance(m, Method)),
            key=lambda m: (m.name, len(m.parameters)),
        )


class Import(CodeModel):
    """An import statement, e.g. ``java.util.List`` or ``java.util.*``."""

    value: str

    @property
    def is_wildcard(self) -> bool:
        """True when the import names every member of a namespace."""
        return self.value == "*" or self.value.endswith(".*")

    @property
    def namespace(self) -> str:
        """The imported value without a trailing wildcard marker."""
        if self.value == "*":
            return ""
        if self.value.endswith(".*"):
            return self.value[:-2]
        return self.value


class ParsedCodeFile(CodeModel):
    """Result of parsing one source file."""

    imports: tuple[Import, ...] = ()
    types: tuple[Type, ...] = ()

    def to_json(self, indent: int | None = None) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "ParsedCodeFile":
        """Inverse of :meth:`to_json`."""
        return cls.model_validate_json(data)


class TypeRegistry:
    """Lookup table from qualified name to full type declaration."""

    def __init__(self, types: Iterable[Type] = ()) -> None:
        self._types: dict[str, Type] = {}
        for type_ in types:
            self.register(type_)

    @classmethod
    def from_parsed(cls, files: Iterable[ParsedCodeFile]) -> "TypeRegistry":
        """Build a registry from every type declared in the given files."""
        registry = cls()
        for parsed in files:
            for type_ in parsed.types:
                registry.register(type_)
        return registry

    def register(self, type_: Type) -> None:
        """Add a declaration.

        Raises:
            DuplicateTypeError: If a different declaration has the same
                qualified name.
        """
        existing = self._types.get(type_.qualified_name)
        if existing is not None and existing != type_:
            raise DuplicateTypeError(
                f"Conflicting declarations for {type_.qualified_name}",
                qualified_name=type_.qualified_name,
            )
        self._types[type_.qualified_name] = type_

    def get(self, qualified_name: str) -> Type | None:
        return self._types.get(qualified_name)

    def resolve(self, ref: Type) -> Type:
        """Return the registered declaration for a stub, or the stub itself."""
        return self._types.get(ref.qualified_name, ref)

    def supertypes(self, type_: Type) -> list[Type]:
        """Resolved super classes followed by resolved interfaces."""
        return [self.resolve(t) for t in (*type_.super_classes, *type_.interfaces)]

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[Type]:
        return iter(self._types.values())
