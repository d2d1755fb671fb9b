"""CRD to Code Generator

A Python package for generating Rust types from the OpenAPI v3 schema of
Kubernetes CustomResourceDefinitions, with declarative property overrides.
"""

__version__ = "0.1.0"

from .pipeline import (
    AnalyzerConfig,
    GeneratorConfig,
    Overrides,
    PipelineGenerator,
    TypeCatalog,
    analyze,
    load_crd,
)

__all__ = [
    "PipelineGenerator",
    "AnalyzerConfig",
    "GeneratorConfig",
    "Overrides",
    "TypeCatalog",
    "analyze",
    "load_crd",
]
