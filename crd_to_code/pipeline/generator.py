"""
Pipeline generator: runs every phase from a CRD document to Rust source.
"""

from __future__ import annotations

import logging
from typing import Any

from .. import __version__
from .analyzer import TypeCatalog, analyze
from .backends import GenerationContext, RustBackend
from .config import GeneratorConfig, SchemaMode
from .crd import CrdNames, find_crd_version, has_status_subresource, version_schema
from .derive import Derive
from .overrides import Overrides
from .schema_ast import SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates Rust types for a CustomResourceDefinition."""

    def __init__(
        self,
        crd: dict[str, Any],
        config: GeneratorConfig | None = None,
        overrides: Overrides | None = None,
        command_line: str = "",
    ):
        """
        Initialize the generator.

        Args:
            crd: The CustomResourceDefinition document
            config: Generation configuration
            overrides: Property rules; loaded from ``config.override_paths`` when None
            command_line: Command line recorded in the generated header
        """
        self.crd = crd
        self.config = config or GeneratorConfig()
        self.command_line = command_line

        # A derived schema needs JsonSchema on every generated type
        if self.config.schema_mode == SchemaMode.DERIVED:
            self.config.add_derive(Derive.all("JsonSchema"))

        if overrides is None:
            overrides = Overrides.from_paths(self.config.override_paths)
        self.overrides = overrides

    def analyze(self) -> tuple[TypeCatalog, GenerationContext]:
        """
        Run the parse, analysis and rename phases.

        Returns:
            The finished catalog and the resource context for the backend
        """
        version = find_crd_version(self.crd, self.config.api_version)
        names = CrdNames.from_crd(self.crd)
        logger.debug("using version %s of %s", version.get("name"), names.kind)

        schema = SchemaParser().parse(version_schema(version))
        catalog = analyze(schema, names.kind, self.config.analyzer_config(), self.overrides)
        catalog.rename().builder_fields(self.config.builders)

        context = GenerationContext(
            names=names,
            version=version.get("name", ""),
            status_subresource=has_status_subresource(version),
            command_line=self.command_line,
        )
        return catalog, context

    def generate(self) -> str:
        """
        Generate the Rust source.

        Returns:
            Generated code as a string
        """
        catalog, context = self.analyze()
        backend = RustBackend(self.config, __version__)
        return backend.generate(catalog, context)
