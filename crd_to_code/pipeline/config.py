"""
Configuration for the CRD to Code pipeline.

``AnalyzerConfig`` controls how schemas are turned into containers;
``GeneratorConfig`` adds the options of the Rust emitter and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .derive import Derive


class MapType(str, Enum):
    """Representation used for ``additionalProperties`` maps."""

    BTREE_MAP = "BTreeMap"  # ordered
    HASH_MAP = "HashMap"  # unordered


class SchemaMode(str, Enum):
    """Supported values for kube-derive's ``schema`` attribute."""

    MANUAL = "manual"  # JsonSchema is implemented by hand elsewhere
    DERIVED = "derived"  # JsonSchema is derived for generated types
    DISABLED = "disabled"  # No schema; the CRD cannot be applied as-is


def _map_type(value: MapType | str) -> MapType:
    if isinstance(value, MapType):
        return value
    for candidate in MapType:
        if value in (candidate.value, candidate.name):
            return candidate
    raise ValueError(f"Unknown map type: {value}")


@dataclass
class AnalyzerConfig:
    """Configuration options for schema analysis."""

    # Do not replace condition-shaped arrays with the standard Condition type
    disable_condition_detection: bool = False

    # Do not replace ObjectReference-shaped objects with the standard type
    disable_object_reference_detection: bool = False

    # Map type used for additionalProperties
    map_type: MapType = MapType.BTREE_MAP

    # Degrade untyped / ambiguous values to opaque maps instead of failing
    relaxed: bool = False

    @staticmethod
    def from_dict(d: dict) -> AnalyzerConfig:
        """Create a config from a dictionary."""
        config = AnalyzerConfig()
        for k, v in d.items():
            if k == "map_type":
                config.map_type = _map_type(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "disable_condition_detection": self.disable_condition_detection,
            "disable_object_reference_detection": self.disable_object_reference_detection,
            "map_type": self.map_type.value,
            "relaxed": self.relaxed,
        }


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    # Use this CRD version if multiple versions are present
    api_version: str | None = None

    # Do not emit the prelude module
    hide_prelude: bool = False

    # Do not derive CustomResource nor set kube attributes
    hide_kube: bool = False

    # Emit doc comments from field descriptions
    emit_docs: bool = False

    # Emit TypedBuilder derives and builder field annotations
    builders: bool = False

    # kube-derive schema mode
    schema_mode: SchemaMode = SchemaMode.DISABLED

    # Additional traits to derive
    derive_traits: list[Derive] = field(default_factory=list)

    # Containers to leave out of the output (exact generated names)
    elide: list[str] = field(default_factory=list)

    # Relaxed interpretation of untyped values
    relaxed: bool = False

    # Disable standardized Condition detection
    no_condition: bool = False

    # Disable standardized ObjectReference detection
    no_object_reference: bool = False

    # Map type used for additionalProperties
    map_type: MapType = MapType.BTREE_MAP

    # Drop a derived Default from containers that cannot derive it
    smart_derive_elision: bool = False

    # Override rule documents to load
    override_paths: list[str] = field(default_factory=list)

    def add_derive(self, derive: Derive) -> None:
        """Add a derive directive, ignoring duplicates."""
        if derive not in self.derive_traits:
            self.derive_traits.append(derive)

    def analyzer_config(self) -> AnalyzerConfig:
        return AnalyzerConfig(
            disable_condition_detection=self.no_condition,
            disable_object_reference_detection=self.no_object_reference,
            map_type=self.map_type,
            relaxed=self.relaxed,
        )

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "map_type":
                config.map_type = _map_type(v)
            elif k == "schema_mode":
                config.schema_mode = SchemaMode(v.lower()) if isinstance(v, str) else v
            elif k == "derive_traits":
                for value in v:
                    config.add_derive(Derive.parse(value) if isinstance(value, str) else value)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "api_version": self.api_version,
            "hide_prelude": self.hide_prelude,
            "hide_kube": self.hide_kube,
            "emit_docs": self.emit_docs,
            "builders": self.builders,
            "schema_mode": self.schema_mode.value,
            "derive_traits": [str(derive) for derive in self.derive_traits],
            "elide": self.elide,
            "relaxed": self.relaxed,
            "no_condition": self.no_condition,
            "no_object_reference": self.no_object_reference,
            "map_type": self.map_type.value,
            "smart_derive_elision": self.smart_derive_elision,
            "override_paths": self.override_paths,
        }
