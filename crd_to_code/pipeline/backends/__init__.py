"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import CodeBackend, GenerationContext
from .rust_backend import RustBackend, format_docstr

__all__ = [
    "CodeBackend",
    "GenerationContext",
    "RustBackend",
    "format_docstr",
]
