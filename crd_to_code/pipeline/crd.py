"""
CustomResourceDefinition helpers.

Loading CRD documents, reading their names, and picking the version whose
schema gets generated.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

import yaml

from .errors import CrdError

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^v(\d+)(?:(alpha|beta)(\d*))?$")


class Stability(IntEnum):
    """Stability of a Kubernetes API version, lowest priority first."""

    OTHER = 0
    ALPHA = 1
    BETA = 2
    GA = 3


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    """A parsed Kubernetes API version such as ``v1``, ``v2beta1`` or ``v3alpha``.

    Versions order by priority: GA before beta before alpha before anything
    else, higher majors first, and a numbered pre-release before the
    unnumbered one of the same major. Unrecognised versions compare as
    strings.
    """

    stability: Stability
    major: int = 0
    minor: int | None = None
    text: str = ""  # The raw string, for Stability.OTHER

    @staticmethod
    def parse(text: str) -> Version:
        match = VERSION_PATTERN.match(text)
        if match is None:
            return Version(Stability.OTHER, text=text)
        major = int(match.group(1))
        if match.group(2) is None:
            return Version(Stability.GA, major)
        minor = int(match.group(3)) if match.group(3) else None
        stability = Stability.ALPHA if match.group(2) == "alpha" else Stability.BETA
        return Version(stability, major, minor)

    def priority(self) -> tuple:
        """Sort key; a higher key is a more preferred version."""
        if self.stability == Stability.OTHER:
            return (self.stability, 0, False, 0, self.text)
        return (self.stability, self.major, self.minor is not None, self.minor or 0, "")

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.priority() < other.priority()

    def __str__(self) -> str:
        if self.stability == Stability.OTHER:
            return self.text
        if self.stability == Stability.GA:
            return f"v{self.major}"
        minor = "" if self.minor is None else str(self.minor)
        return f"v{self.major}{self.stability.name.lower()}{minor}"


def load_crd(path: str | Path) -> dict[str, Any]:
    """
    Load a CRD from a YAML or JSON file.

    When the file holds several documents, the first CustomResourceDefinition is used.

    Raises:
        CrdError: if the file holds no CustomResourceDefinition
    """
    with open(path, encoding="utf-8") as f:
        documents = [doc for doc in yaml.safe_load_all(f) if doc is not None]
    for document in documents:
        if isinstance(document, dict) and document.get("kind", "CustomResourceDefinition") == "CustomResourceDefinition":
            logger.debug("loaded CRD %s from %s", crd_name(document), path)
            return document
    raise CrdError(f"No CustomResourceDefinition found in {path}")


def crd_name(crd: dict[str, Any]) -> str:
    return (crd.get("metadata") or {}).get("name", "")


def crd_versions(crd: dict[str, Any]) -> list[dict[str, Any]]:
    return list((crd.get("spec") or {}).get("versions") or [])


def all_crd_versions(crd: dict[str, Any]) -> str:
    """Comma separated version names, most preferred first."""
    names = [version.get("name", "") for version in crd_versions(crd)]
    names.sort(key=Version.parse, reverse=True)
    return ", ".join(names)


def find_crd_version(crd: dict[str, Any], api_version: str | None = None) -> dict[str, Any]:
    """
    Pick a version of a CRD.

    Args:
        crd: The CustomResourceDefinition document
        api_version: An explicit version name; the highest priority version is used when None

    Returns:
        The version entry of ``spec.versions``

    Raises:
        CrdError: if the requested version does not exist or the CRD has no versions
    """
    versions = crd_versions(crd)
    if api_version is not None:
        for version in versions:
            if version.get("name") == api_version:
                return version
        raise CrdError(
            f"Version '{api_version}' not found in CRD '{crd_name(crd)}'\n"
            f"available versions are '{all_crd_versions(crd)}'"
        )

    if not versions:
        raise CrdError(f"CRD '{crd_name(crd)}' has no versions")
    return max(versions, key=lambda version: Version.parse(version.get("name", "")))


def version_schema(version: dict[str, Any]) -> dict[str, Any]:
    """
    The ``openAPIV3Schema`` of a CRD version.

    Raises:
        CrdError: if the version carries no schema
    """
    schema = (version.get("schema") or {}).get("openAPIV3Schema")
    if schema is None:
        raise CrdError(f"no schema found for crd version {version.get('name')}")
    return schema


@dataclass
class CrdNames:
    """The parts of a CRD used for the ``#[kube(...)]`` attributes."""

    kind: str
    plural: str
    group: str
    scope: str

    @staticmethod
    def from_crd(crd: dict[str, Any]) -> CrdNames:
        spec = crd.get("spec") or {}
        names = spec.get("names") or {}
        if not names.get("kind"):
            raise CrdError(f"CRD '{crd_name(crd)}' has no kind")
        return CrdNames(
            kind=names["kind"],
            plural=names.get("plural", ""),
            group=spec.get("group", ""),
            scope=spec.get("scope", ""),
        )

    @property
    def namespaced(self) -> bool:
        return self.scope == "Namespaced"


def has_status_subresource(version: dict[str, Any]) -> bool:
    """
    Whether a status is expected: a status subresource, or a top-level
    ``status`` property for CRDs that do not declare the subresource.
    """
    subresources = version.get("subresources") or {}
    if subresources.get("status") is not None:
        return True
    schema = (version.get("schema") or {}).get("openAPIV3Schema") or {}
    return "status" in (schema.get("properties") or {})
