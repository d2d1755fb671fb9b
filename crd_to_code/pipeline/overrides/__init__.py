"""
Overrides module.

Declarative rules that intercept individual properties during analysis.
"""

from __future__ import annotations

from .rules import (
    ActionKind,
    CompiledPropertyRule,
    Overrides,
    PropertyAction,
    PropertyName,
    PropertyRule,
    PropertySchema,
    SchemaMatchMode,
    parse_property_rules,
)
from .schema_eq import is_exhaustive, is_subset

__all__ = [
    "Overrides",
    "PropertyRule",
    "CompiledPropertyRule",
    "PropertyName",
    "PropertySchema",
    "PropertyAction",
    "ActionKind",
    "SchemaMatchMode",
    "parse_property_rules",
    "is_exhaustive",
    "is_subset",
]
