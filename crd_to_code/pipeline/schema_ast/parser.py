"""
Schema parser that builds SchemaNode trees.

Phase 1 of the pipeline: read a raw ``openAPIV3Schema`` mapping (as loaded
from YAML or JSON) into immutable SchemaNode objects, without interpreting it.
"""

from __future__ import annotations

from typing import Any

from ..errors import SchemaParseError
from .nodes import (
    AdditionalBool,
    AdditionalSchema,
    ItemsArray,
    ItemsSchema,
    SchemaNode,
    SchemaOrArray,
    SchemaOrBool,
)


class SchemaParser:
    """Parses raw OpenAPI v3 schema mappings into SchemaNode trees."""

    # Wire keys with a scalar value that is copied as-is
    SCALAR_KEYS = {
        "type": "type",
        "format": "format",
        "description": "description",
        "nullable": "nullable",
        "x-kubernetes-int-or-string": "x_int_or_string",
        "x-kubernetes-preserve-unknown-fields": "x_preserve_unknown_fields",
        "x-kubernetes-list-type": "x_list_type",
        "x-kubernetes-map-type": "x_map_type",
    }

    # Wire keys holding a list of sub-schemas
    SCHEMA_LIST_KEYS = {
        "oneOf": "one_of",
        "allOf": "all_of",
        "anyOf": "any_of",
    }

    def parse(self, schema: dict[str, Any], path: str = "#") -> SchemaNode:
        """
        Parse a schema mapping recursively.

        Args:
            schema: The raw schema dictionary
            path: Current path in the schema (for error messages)

        Returns:
            The parsed SchemaNode
        """
        if not isinstance(schema, dict):
            raise SchemaParseError(f"expected a schema mapping, got {type(schema).__name__}", path)

        fields: dict[str, Any] = {}
        for key, attr in self.SCALAR_KEYS.items():
            if key in schema:
                fields[attr] = schema[key]

        if "default" in schema:
            fields["default"] = schema["default"]

        if "properties" in schema and schema["properties"] is not None:
            properties = schema["properties"]
            if not isinstance(properties, dict):
                raise SchemaParseError("properties must be a mapping", f"{path}/properties")
            fields["properties"] = {key: self.parse(properties[key], f"{path}/properties/{key}") for key in sorted(properties)}

        if "additionalProperties" in schema and schema["additionalProperties"] is not None:
            fields["additional_properties"] = self._parse_schema_or_bool(schema["additionalProperties"], f"{path}/additionalProperties")

        if "additionalItems" in schema and schema["additionalItems"] is not None:
            fields["additional_items"] = self._parse_schema_or_bool(schema["additionalItems"], f"{path}/additionalItems")

        if "items" in schema and schema["items"] is not None:
            fields["items"] = self._parse_schema_or_array(schema["items"], f"{path}/items")

        if "required" in schema and schema["required"] is not None:
            required = schema["required"]
            if not isinstance(required, list):
                raise SchemaParseError("required must be a list of names", f"{path}/required")
            fields["required"] = tuple(str(name) for name in required)

        if "enum" in schema and schema["enum"] is not None:
            if not isinstance(schema["enum"], list):
                raise SchemaParseError("enum must be a list", f"{path}/enum")
            fields["enum"] = tuple(schema["enum"])

        for key, attr in self.SCHEMA_LIST_KEYS.items():
            if key in schema and schema[key] is not None:
                variants = schema[key]
                if not isinstance(variants, list):
                    raise SchemaParseError(f"{key} must be a list of schemas", f"{path}/{key}")
                fields[attr] = tuple(self.parse(variant, f"{path}/{key}/{i}") for i, variant in enumerate(variants))

        if "not" in schema and schema["not"] is not None:
            fields["not_"] = self.parse(schema["not"], f"{path}/not")

        return SchemaNode(**fields)

    def _parse_schema_or_bool(self, value: Any, path: str) -> SchemaOrBool:
        if isinstance(value, bool):
            return AdditionalBool(value)
        return AdditionalSchema(self.parse(value, path))

    def _parse_schema_or_array(self, value: Any, path: str) -> SchemaOrArray:
        if isinstance(value, list):
            return ItemsArray(tuple(self.parse(item, f"{path}/{i}") for i, item in enumerate(value)))
        return ItemsSchema(self.parse(value, path))


def parse_schema(schema: dict[str, Any]) -> SchemaNode:
    """Parse a raw schema mapping into a SchemaNode tree."""
    return SchemaParser().parse(schema)
