"""
Analyzer module.

Contains the schema walk, the type catalog and member name resolution.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer, analyze
from .catalog import TypeCatalog
from .ir_nodes import (
    Container,
    Member,
    Primitive,
    TypeKind,
    TypeRef,
    WellKnown,
)
from .name_resolver import NameResolver

__all__ = [
    "Container",
    "Member",
    "TypeRef",
    "TypeKind",
    "Primitive",
    "WellKnown",
    "TypeCatalog",
    "NameResolver",
    "SchemaAnalyzer",
    "analyze",
]
