"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed schema: typed containers (structs and
enums) and their members, ready for code generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TypeKind(Enum):
    """Kind of type in the IR."""

    PRIMITIVE = "primitive"  # String, bool, f64, i32, ...
    OPAQUE = "opaque"  # Untyped JSON value
    WELL_KNOWN = "well_known"  # Condition, ObjectReference, IntOrString
    OPTIONAL = "optional"  # Option<T>
    LIST = "list"  # Vec<T>
    MAP = "map"  # Map<String, T>
    REFERENCE = "reference"  # Another container, or an override replacement


class Primitive(str, Enum):
    """Scalar types the analyzer can produce."""

    STRING = "string"
    BOOL = "bool"
    F32 = "f32"
    F64 = "f64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    I128 = "i128"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    U128 = "u128"
    DATE = "date"
    DATETIME = "datetime"


class WellKnown(str, Enum):
    """Shapes recognized structurally and mapped to canonical types."""

    CONDITION = "Condition"
    OBJECT_REFERENCE = "ObjectReference"
    INT_OR_STRING = "IntOrString"


@dataclass(frozen=True)
class TypeRef:
    """A resolved type."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # Primitive / well-known / referenced container name

    # For wrapper types (optional, list, map value)
    type_args: tuple[TypeRef, ...] = ()

    @staticmethod
    def primitive(primitive: Primitive) -> TypeRef:
        return TypeRef(TypeKind.PRIMITIVE, primitive.value)

    @staticmethod
    def opaque() -> TypeRef:
        return TypeRef(TypeKind.OPAQUE)

    @staticmethod
    def well_known(shape: WellKnown) -> TypeRef:
        return TypeRef(TypeKind.WELL_KNOWN, shape.value)

    @staticmethod
    def optional(inner: TypeRef) -> TypeRef:
        return TypeRef(TypeKind.OPTIONAL, type_args=(inner,))

    @staticmethod
    def list_of(inner: TypeRef) -> TypeRef:
        return TypeRef(TypeKind.LIST, type_args=(inner,))

    @staticmethod
    def map_of(value: TypeRef) -> TypeRef:
        """A map keyed by strings."""
        return TypeRef(TypeKind.MAP, type_args=(value,))

    @staticmethod
    def reference(name: str) -> TypeRef:
        return TypeRef(TypeKind.REFERENCE, name)

    @property
    def inner(self) -> TypeRef:
        """The wrapped type of an optional, list or map."""
        return self.type_args[0]

    @property
    def is_wrapper(self) -> bool:
        return self.kind in (TypeKind.OPTIONAL, TypeKind.LIST, TypeKind.MAP)

    def underlying_reference(self) -> str | None:
        """Name of the container this type points at through any wrappers."""
        type_ref = self
        while type_ref.is_wrapper:
            type_ref = type_ref.inner
        if type_ref.kind == TypeKind.REFERENCE:
            return type_ref.name
        return None

    def walk(self):
        """Yield this type and every type nested inside it."""
        yield self
        for arg in self.type_args:
            yield from arg.walk()


@dataclass
class Member:
    """A struct field or enum variant of a container."""

    name: str = ""  # Raw wire key until the rename pass, then the identifier
    type_ref: TypeRef | None = None  # None for enum variants
    required: bool = False
    rename: str | None = None  # Original wire name when it differs from name
    docs: str | None = None

    # Additional field level annotations (builder hints)
    extra_annotations: list[str] = field(default_factory=list)

    @property
    def is_optional(self) -> bool:
        return self.type_ref is not None and self.type_ref.kind == TypeKind.OPTIONAL


@dataclass
class Container:
    """A generated struct or enum definition."""

    name: str = ""  # PascalCase path from the kind down to this node
    level: int = 0  # Recursion depth, 0 is the root
    is_enum: bool = False
    members: list[Member] = field(default_factory=list)
    docs: str | None = None

    @property
    def is_root(self) -> bool:
        return self.level == 0

    @property
    def is_main_container(self) -> bool:
        return self.level == 1 and self.name.endswith("Spec")

    @property
    def is_status_container(self) -> bool:
        return self.level == 1 and self.name.endswith("Status")

    def member_types(self):
        """Yield every type appearing in this container's members."""
        for member in self.members:
            if member.type_ref is not None:
                yield from member.type_ref.walk()

    def uses_kind(self, kind: TypeKind) -> bool:
        return any(t.kind == kind for t in self.member_types())

    def uses_primitive(self, primitive: Primitive) -> bool:
        return any(t.kind == TypeKind.PRIMITIVE and t.name == primitive.value for t in self.member_types())

    def uses_well_known(self, shape: WellKnown) -> bool:
        return any(t.kind == TypeKind.WELL_KNOWN and t.name == shape.value for t in self.member_types())
