"""
Pipeline - CRD schema to Rust types generator.

This module provides a multi-phase architecture for generating code from the
OpenAPI v3 schema of a Kubernetes CustomResourceDefinition:

1. Phase 1 (Parser): Parse the raw schema into a SchemaNode tree
2. Phase 2 (Analyzer): Resolve every property to a type, consulting overrides,
   and collect containers into a TypeCatalog
3. Phase 3 (Passes): Rename members, add builder hints
4. Phase 4 (Backend): Render the catalog with Jinja2 templates
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer, TypeCatalog, analyze
from .config import AnalyzerConfig, GeneratorConfig, MapType, SchemaMode
from .crd import Version, find_crd_version, load_crd
from .derive import Derive, DeriveTarget
from .errors import (
    AnalysisError,
    CrdError,
    CrdToCodeError,
    OverrideCompileError,
    OverrideConfigError,
    SchemaParseError,
    UnsupportedSchemaShape,
)
from .generator import PipelineGenerator
from .overrides import Overrides
from .schema_ast import SchemaParser, parse_schema

__all__ = [
    "PipelineGenerator",
    "AnalyzerConfig",
    "GeneratorConfig",
    "MapType",
    "SchemaMode",
    "Derive",
    "DeriveTarget",
    "SchemaAnalyzer",
    "TypeCatalog",
    "analyze",
    "Overrides",
    "SchemaParser",
    "parse_schema",
    "Version",
    "find_crd_version",
    "load_crd",
    "CrdToCodeError",
    "SchemaParseError",
    "AnalysisError",
    "UnsupportedSchemaShape",
    "OverrideConfigError",
    "OverrideCompileError",
    "CrdError",
]
