"""
Node definitions for the OpenAPI v3 schema subset found in CRDs.

These nodes represent a parsed ``openAPIV3Schema`` before any analysis.
They are immutable; the analyzer only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AdditionalSchema:
    """``additionalProperties`` (or ``additionalItems``) given as a schema."""

    schema: SchemaNode


@dataclass(frozen=True)
class AdditionalBool:
    """``additionalProperties`` (or ``additionalItems``) given as a boolean."""

    value: bool


@dataclass(frozen=True)
class ItemsSchema:
    """``items`` given as a single schema (homogeneous array)."""

    schema: SchemaNode


@dataclass(frozen=True)
class ItemsArray:
    """``items`` given as a list of schemas (tuple-typed array)."""

    schemas: tuple[SchemaNode, ...]


SchemaOrBool = AdditionalSchema | AdditionalBool
SchemaOrArray = ItemsSchema | ItemsArray


@dataclass(frozen=True)
class SchemaNode:
    """A node of the CRD validation schema.

    ``properties`` is always stored ordered by key so every traversal is
    deterministic.
    """

    type: str | None = None
    format: str | None = None
    description: str | None = None

    properties: dict[str, SchemaNode] | None = None
    additional_properties: SchemaOrBool | None = None
    items: SchemaOrArray | None = None
    additional_items: SchemaOrBool | None = None
    required: tuple[str, ...] | None = None

    # Raw JSON literals
    enum: tuple[Any, ...] | None = None
    default: Any = None
    nullable: bool | None = None

    one_of: tuple[SchemaNode, ...] | None = None
    all_of: tuple[SchemaNode, ...] | None = None
    any_of: tuple[SchemaNode, ...] | None = None
    not_: SchemaNode | None = None

    # Kubernetes extensions
    x_int_or_string: bool | None = None
    x_preserve_unknown_fields: bool | None = None
    x_list_type: str | None = None
    x_map_type: str | None = None

    @property
    def type_name(self) -> str:
        """The declared type, or an empty string when the node is untyped."""
        return self.type or ""

    @property
    def property_map(self) -> dict[str, SchemaNode]:
        return self.properties or {}

    @property
    def required_names(self) -> tuple[str, ...]:
        return self.required or ()

    @property
    def is_int_or_string(self) -> bool:
        return bool(self.x_int_or_string)

    @property
    def preserves_unknown_fields(self) -> bool:
        return bool(self.x_preserve_unknown_fields)

    def additional_schema(self) -> SchemaNode | None:
        """The ``additionalProperties`` schema, if it is given as a schema."""
        if isinstance(self.additional_properties, AdditionalSchema):
            return self.additional_properties.schema
        return None
