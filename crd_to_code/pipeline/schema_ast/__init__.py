"""
Schema AST module.

Contains the SchemaNode definitions and the parser for CRD validation schemas.
"""

from __future__ import annotations

from .nodes import (
    AdditionalBool,
    AdditionalSchema,
    ItemsArray,
    ItemsSchema,
    SchemaNode,
    SchemaOrArray,
    SchemaOrBool,
)
from .parser import SchemaParser, parse_schema

__all__ = [
    "SchemaNode",
    "AdditionalSchema",
    "AdditionalBool",
    "ItemsSchema",
    "ItemsArray",
    "SchemaOrBool",
    "SchemaOrArray",
    "SchemaParser",
    "parse_schema",
]
