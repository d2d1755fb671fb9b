"""
Exceptions raised by the CRD to Code pipeline.
"""

from __future__ import annotations


class CrdToCodeError(Exception):
    """Base class for all pipeline errors."""

    pass


class SchemaParseError(CrdToCodeError):
    """Raised when a raw schema mapping cannot be read into a SchemaNode tree."""

    def __init__(self, message: str, path: str = "#"):
        super().__init__(f"{message} (at {path})")
        self.path = path


class AnalysisError(CrdToCodeError):
    """Raised when schema analysis fails.

    Analysis is all-or-nothing: when this is raised no catalog is produced.
    """

    pass


class UnsupportedSchemaShape(AnalysisError):
    """Raised for schema constructs the analyzer cannot turn into types.

    This covers:
    - Tuple-typed arrays (``items`` given as a list of schemas)
    - Enum literals that are not strings or non-negative integers
    - Untyped values without a resolving extension flag (outside relaxed mode)
    - Member names that cannot be escaped into identifiers
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{message} (at {path})" if path else message)
        self.path = path


class OverrideConfigError(CrdToCodeError):
    """Raised when an overrides document has an invalid shape."""

    pass


class OverrideCompileError(OverrideConfigError):
    """Raised when one or more name patterns of an overrides rule set fail to compile.

    Every broken pattern of the whole rule set is listed in ``errors`` as
    ``(pattern, reason)`` pairs.
    """

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = list(errors)
        rendered = ["Failed to compile regular expressions with:"]
        rendered.extend(f"{pattern!r}: {reason}" for pattern, reason in self.errors)
        super().__init__("\n".join(rendered))


class CrdError(CrdToCodeError):
    """Raised when a CustomResourceDefinition document cannot be used."""

    pass
