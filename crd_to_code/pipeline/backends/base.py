"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import jinja2

from ..analyzer.catalog import TypeCatalog
from ..analyzer.ir_nodes import TypeRef
from ..config import GeneratorConfig
from ..crd import CrdNames


@dataclass
class GenerationContext:
    """What a backend needs to know about the resource besides its types."""

    names: CrdNames
    version: str  # The CRD version the schema was taken from
    status_subresource: bool = False
    command_line: str = ""  # Reconstructed command line for the header, if any


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.container_template = self.jinja_env.get_template(f"container.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def generate(self, catalog: TypeCatalog, context: GenerationContext) -> str:
        """
        Generate code from a finished catalog.

        Args:
            catalog: The renamed catalog
            context: Resource information

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """
        Translate an IR type to a language-specific type string.

        Args:
            type_ref: The type reference

        Returns:
            Language-specific type string
        """
