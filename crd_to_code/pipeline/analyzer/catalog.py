"""
Type catalog: the ordered, deduplicated set of containers found by analysis.

The catalog also hosts the post-analysis passes: member renaming, builder
hints and default-derivability.
"""

from __future__ import annotations

import logging
from typing import Iterator

from ..config import MapType
from .ir_nodes import Container, TypeKind
from .name_resolver import NameResolver

logger = logging.getLogger(__name__)


class TypeCatalog:
    """Containers keyed by name, in discovery order.

    Inserting a container whose name is already present is a no-op: the
    first definition wins and later ones are absorbed, even when they are
    structurally different.
    """

    def __init__(self, containers: list[Container] | None = None, map_type: MapType = MapType.BTREE_MAP):
        self._containers: dict[str, Container] = {}
        self.map_type = map_type  # Representation of Map types for emitters
        for container in containers or []:
            self.insert(container)

    def insert(self, container: Container) -> bool:
        """
        Insert a container unless one with the same name exists.

        Returns:
            True if the container was added, False if it was absorbed
        """
        if container.name in self._containers:
            logger.debug("container %s already in catalog, dropping duplicate", container.name)
            return False
        self._containers[container.name] = container
        return True

    def __len__(self) -> int:
        return len(self._containers)

    def __iter__(self) -> Iterator[Container]:
        return iter(self._containers.values())

    def __contains__(self, name: object) -> bool:
        return name in self._containers

    def __getitem__(self, name: str) -> Container:
        return self._containers[name]

    def get(self, name: str) -> Container | None:
        return self._containers.get(name)

    def names(self) -> list[str]:
        return list(self._containers)

    @property
    def containers(self) -> list[Container]:
        return list(self._containers.values())

    @property
    def root(self) -> Container | None:
        return next((c for c in self if c.is_root), None)

    def rename(self) -> TypeCatalog:
        """
        Rename all members of all containers to Rust conventions.

        Converts member names to snake_case for structs and PascalCase for
        enums, recording the wire name whenever it changes. It is unsound to
        skip this step: CRDs use kebab-cased keys that are not identifiers.
        """
        resolver = NameResolver()
        for container in self:
            resolver.rename(container)
        return self

    def builder_fields(self, builders: bool = True) -> TypeCatalog:
        """
        Add builder annotations to struct members.

        Optional members get ``#[builder(default, setter(strip_option))]``;
        required lists and maps get ``#[builder(default)]``.
        """
        if not builders:
            return self
        for container in self:
            if container.is_enum:
                continue
            for member in container.members:
                if member.type_ref is None:
                    continue
                if member.type_ref.kind == TypeKind.OPTIONAL:
                    member.extra_annotations.append("#[builder(default, setter(strip_option))]")
                elif member.type_ref.kind in (TypeKind.LIST, TypeKind.MAP):
                    member.extra_annotations.append("#[builder(default)]")
        return self

    def can_derive_default(self, container: Container | str, memo: dict[str, bool] | None = None) -> bool:
        """
        Check whether ``Default`` can be derived for a container.

        Enums never can. A struct can if every container its members point
        at (through options, lists and maps) can. Primitive, opaque and
        well-known leaves always can, and so can references to types that
        are not in the catalog (override replacements).

        Args:
            container: The container, or its name
            memo: Results by container name, shared across calls

        Returns:
            Whether Default is derivable
        """
        if memo is None:
            memo = {}
        if isinstance(container, str):
            container = self[container]
        return self._can_derive_default(container, memo, set())

    def _can_derive_default(self, container: Container, memo: dict[str, bool], in_progress: set[str]) -> bool:
        if container.name in memo:
            return memo[container.name]
        if container.is_enum:
            memo[container.name] = False
            return False

        in_progress.add(container.name)
        derivable = True
        for member in container.members:
            if member.type_ref is None:
                continue
            target = member.type_ref.underlying_reference()
            if target is None or target not in self:
                continue
            if target in in_progress:
                # Not yet known: the edge does not decide the outcome
                logger.warning("cycle through %s while checking Default for %s", target, container.name)
                continue
            if not self._can_derive_default(self[target], memo, in_progress):
                derivable = False
                break
        in_progress.discard(container.name)

        memo[container.name] = derivable
        return derivable

    def has_status_resource(self) -> bool:
        """Whether a non-empty top-level status container exists."""
        return any(c.is_status_container and c.members for c in self)
