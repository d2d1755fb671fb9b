"""
Structural schema comparison used by override rules.

Only the fields that can affect code generation are compared. Two relations
are provided:

* ``is_exhaustive(template, candidate)``: every compared field is equal.
  Sequences compare positionally, maps by exact key set, and ``None`` only
  equals ``None``.
* ``is_subset(template, candidate)``: the candidate has at least what the
  template has. ``None`` in the template matches anything, maps may carry
  extra keys, and each element of a template sequence must match *some*
  element of the candidate sequence.
"""

from __future__ import annotations

from typing import Any

from ..schema_ast.nodes import (
    AdditionalBool,
    AdditionalSchema,
    ItemsArray,
    ItemsSchema,
    SchemaNode,
)

# Fields of SchemaNode that can affect code generation
COMPARED_FIELDS = (
    "type",
    "enum",
    "items",
    "additional_items",
    "properties",
    "additional_properties",
    "required",
    "one_of",
    "all_of",
    "any_of",
    "not_",
    "x_int_or_string",
    "x_preserve_unknown_fields",
    "x_list_type",
    "x_map_type",
)


def _scalar_eq(x: Any, y: Any) -> bool:
    # JSON booleans never equal JSON numbers
    if isinstance(x, bool) != isinstance(y, bool):
        return False
    return x == y


def is_exhaustive(x: Any, y: Any) -> bool:
    """Check that ``x`` and ``y`` are equal on every compared field."""
    if x is None or y is None:
        return x is None and y is None

    if isinstance(x, SchemaNode):
        return isinstance(y, SchemaNode) and all(is_exhaustive(getattr(x, name), getattr(y, name)) for name in COMPARED_FIELDS)

    if isinstance(x, AdditionalSchema):
        return isinstance(y, AdditionalSchema) and is_exhaustive(x.schema, y.schema)
    if isinstance(x, AdditionalBool):
        return isinstance(y, AdditionalBool) and x.value == y.value

    if isinstance(x, ItemsSchema):
        return isinstance(y, ItemsSchema) and is_exhaustive(x.schema, y.schema)
    if isinstance(x, ItemsArray):
        return isinstance(y, ItemsArray) and is_exhaustive(x.schemas, y.schemas)

    if isinstance(x, dict):
        if not isinstance(y, dict) or len(x) != len(y):
            return False
        return all(k1 == k2 and is_exhaustive(v1, v2) for (k1, v1), (k2, v2) in zip(sorted(x.items()), sorted(y.items())))

    if isinstance(x, (list, tuple)):
        if not isinstance(y, (list, tuple)) or len(x) != len(y):
            return False
        return all(is_exhaustive(a, b) for a, b in zip(x, y))

    if isinstance(y, (dict, list, tuple)):
        return False
    return _scalar_eq(x, y)


def is_subset(x: Any, y: Any) -> bool:
    """Check that ``y`` contains at least everything ``x`` describes."""
    if x is None:
        return True
    if y is None:
        return False

    if isinstance(x, SchemaNode):
        return isinstance(y, SchemaNode) and all(is_subset(getattr(x, name), getattr(y, name)) for name in COMPARED_FIELDS)

    if isinstance(x, AdditionalSchema):
        return isinstance(y, AdditionalSchema) and is_subset(x.schema, y.schema)
    if isinstance(x, AdditionalBool):
        return isinstance(y, AdditionalBool) and x.value == y.value

    if isinstance(x, ItemsSchema):
        if isinstance(y, ItemsSchema):
            return is_subset(x.schema, y.schema)
        if isinstance(y, ItemsArray):
            return any(is_subset(x.schema, candidate) for candidate in y.schemas)
        return False
    if isinstance(x, ItemsArray):
        if isinstance(y, ItemsArray):
            return is_subset(x.schemas, y.schemas)
        if isinstance(y, ItemsSchema):
            return all(is_subset(template, y.schema) for template in x.schemas)
        return False

    if isinstance(x, dict):
        if not isinstance(y, dict) or len(x) > len(y):
            return False
        return all(k in y and is_subset(v, y[k]) for k, v in x.items())

    if isinstance(x, (list, tuple)):
        if not isinstance(y, (list, tuple)) or len(x) > len(y):
            return False
        return all(any(is_subset(a, b) for b in y) for a in x)

    if isinstance(y, (dict, list, tuple)):
        return False
    return _scalar_eq(x, y)
