"""
Derive directives for generated containers.

A directive names a trait and the containers it should be derived for:

    PartialEq                       all containers
    IssuerAcmeSolversDns01=Hash     a single named container
    @struct=PartialEq               structs only
    @enum=PartialEq                 enums only
    @enum:simple=PartialEq          unit-only enums
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analyzer.ir_nodes import Container


class DeriveTarget(str, Enum):
    """Which containers a derive directive applies to."""

    ALL = "all"
    TYPE = "type"
    STRUCTS = "structs"
    ENUMS = "enums"
    SIMPLE_ENUMS = "simple_enums"


@dataclass(frozen=True)
class Derive:
    """A trait to derive, as well as the containers to derive it for."""

    derived_trait: str
    target: DeriveTarget = DeriveTarget.ALL
    type_name: str | None = None  # For DeriveTarget.TYPE

    @staticmethod
    def all(derived_trait: str) -> Derive:
        return Derive(derived_trait)

    @staticmethod
    def parse(value: str) -> Derive:
        """Parse a ``[target=]Trait`` directive."""
        if "=" not in value:
            return Derive(value)

        target, derived_trait = value.split("=", 1)
        if not target:
            raise ValueError(f"derive target cannot be empty in '{value}'")
        if not derived_trait:
            raise ValueError(f"derived trait cannot be empty in '{value}'")

        if not target.startswith("@"):
            return Derive(derived_trait, DeriveTarget.TYPE, target)

        targets = {
            "struct": DeriveTarget.STRUCTS,
            "structs": DeriveTarget.STRUCTS,
            "enum": DeriveTarget.ENUMS,
            "enums": DeriveTarget.ENUMS,
            "enum:simple": DeriveTarget.SIMPLE_ENUMS,
            "enums:simple": DeriveTarget.SIMPLE_ENUMS,
        }
        if target[1:] not in targets:
            raise ValueError(f"unknown derive target {target}, must be one of @struct, @enum, or @enum:simple")
        return Derive(derived_trait, targets[target[1:]])

    def is_applicable_to(self, container: Container) -> bool:
        # Default cannot be derived for enums without a marked default variant
        if container.is_enum and self.derived_trait == "Default":
            return False

        if self.target == DeriveTarget.ALL:
            return True
        if self.target == DeriveTarget.TYPE:
            return container.name == self.type_name
        if self.target == DeriveTarget.STRUCTS:
            return not container.is_enum
        if self.target == DeriveTarget.ENUMS:
            return container.is_enum
        if self.target == DeriveTarget.SIMPLE_ENUMS:
            return container.is_enum and all(member.type_ref is None for member in container.members)
        raise ValueError(f"Unknown derive target: {self.target}")

    def __str__(self) -> str:
        if self.target == DeriveTarget.ALL:
            return self.derived_trait
        if self.target == DeriveTarget.TYPE:
            return f"{self.type_name}={self.derived_trait}"
        prefixes = {
            DeriveTarget.STRUCTS: "@struct",
            DeriveTarget.ENUMS: "@enum",
            DeriveTarget.SIMPLE_ENUMS: "@enum:simple",
        }
        return f"{prefixes[self.target]}={self.derived_trait}"
