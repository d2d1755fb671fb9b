"""
Rust code generation backend.

Generates kube-rs compatible Rust structs and enums from a TypeCatalog.
"""

from __future__ import annotations

import logging
from typing import Any

from ...utils import to_upper_camel_case
from ..analyzer.catalog import TypeCatalog
from ..analyzer.ir_nodes import Container, Member, Primitive, TypeKind, TypeRef, WellKnown
from ..config import GeneratorConfig, SchemaMode
from .base import CodeBackend, GenerationContext

logger = logging.getLogger(__name__)

GENERATOR_NAME = "crd_to_code"

DEFAULT_DERIVES = ["Serialize", "Deserialize", "Clone", "Debug"]

OPTIONAL_SERDE = ["default", 'skip_serializing_if = "Option::is_none"']


def format_docstr(indent: str, docs: str) -> list[str]:
    """Render a description as ``///`` doc comment lines."""
    lines = []
    for line in docs.strip().splitlines():
        line = line.rstrip()
        lines.append(f"{indent}/// {line}" if line else f"{indent}///")
    return lines


class RustBackend(CodeBackend):
    """Rust code generation backend."""

    TEMPLATE_LANG = "rust"
    FILE_EXTENSION = "rs"

    TYPE_MAP = {
        Primitive.STRING.value: "String",
        Primitive.DATE.value: "NaiveDate",
        Primitive.DATETIME.value: "DateTime<Utc>",
    }

    def __init__(self, config: GeneratorConfig, tool_version: str = ""):
        super().__init__(config)
        self.tool_version = tool_version
        self.kind = ""
        self.map_type = config.map_type.value

    def generate(self, catalog: TypeCatalog, context: GenerationContext) -> str:
        """Generate Rust code from a renamed catalog."""
        self.kind = to_upper_camel_case(context.names.kind)
        self.map_type = catalog.map_type.value
        memo: dict[str, bool] = {}

        prefix = self.prefix_template.render(
            generator=GENERATOR_NAME,
            command_line=context.command_line,
            version=self.tool_version,
            prelude=[] if self.config.hide_prelude else self._prelude(catalog),
        )

        rendered = []
        for container in catalog:
            if container.is_root:
                continue  # ignoring root struct
            if container.name in self.config.elide or self._spec_trimmed(container.name) in self.config.elide:
                logger.debug("eliding %s from the output", container.name)
                continue
            ctx = self._prepare_container_context(container, catalog, context, memo)
            rendered.append(self.container_template.render(ctx))

        output = prefix + "\n\n".join(rendered)
        return output.rstrip() + "\n"

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate an IR type to a Rust type string."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            return self.TYPE_MAP.get(type_ref.name, type_ref.name)

        if type_ref.kind == TypeKind.OPAQUE:
            return "serde_json::Value"

        if type_ref.kind == TypeKind.WELL_KNOWN:
            return type_ref.name

        if type_ref.kind == TypeKind.OPTIONAL:
            return f"Option<{self.translate_type(type_ref.inner)}>"

        if type_ref.kind == TypeKind.LIST:
            return f"Vec<{self.translate_type(type_ref.inner)}>"

        if type_ref.kind == TypeKind.MAP:
            return f"{self.map_type}<String, {self.translate_type(type_ref.inner)}>"

        if type_ref.kind == TypeKind.REFERENCE:
            return self._spec_trimmed(type_ref.name)

        raise ValueError(f"Unknown type kind: {type_ref.kind}")

    def _spec_trimmed(self, name: str) -> str:
        """Drop the ``Spec`` infix from names nested under the main spec."""
        if not self.kind:
            return name
        return name.replace(f"{self.kind}Spec", self.kind)

    def _prelude(self, catalog: TypeCatalog) -> list[str]:
        """Imports needed by the generated code, in a fixed order."""
        containers = catalog.containers
        prelude = []
        if not self.config.hide_kube:
            prelude.append("kube::CustomResource")
        if self.config.builders:
            prelude.append("typed_builder::TypedBuilder")
        if any(derive.derived_trait == "JsonSchema" for derive in self.config.derive_traits):
            prelude.append("schemars::JsonSchema")
        prelude.append("serde::{Serialize, Deserialize}")

        if any(c.uses_kind(TypeKind.MAP) for c in containers):
            prelude.append(f"std::collections::{self.map_type}")
        if any(c.uses_primitive(Primitive.DATETIME) for c in containers):
            prelude.append("chrono::{DateTime, Utc}")
        if any(c.uses_primitive(Primitive.DATE) for c in containers):
            prelude.append("chrono::naive::NaiveDate")
        if any(c.uses_well_known(WellKnown.INT_OR_STRING) for c in containers):
            prelude.append("k8s_openapi::apimachinery::pkg::util::intstr::IntOrString")
        if any(c.uses_well_known(WellKnown.CONDITION) for c in containers) and not self.config.no_condition:
            prelude.append("k8s_openapi::apimachinery::pkg::apis::meta::v1::Condition")
        if any(c.uses_well_known(WellKnown.OBJECT_REFERENCE) for c in containers) and not self.config.no_object_reference:
            prelude.append("k8s_openapi::api::core::v1::ObjectReference")
        return prelude

    def _docs(self, docs: str | None, indent: str = "") -> list[str]:
        if not self.config.emit_docs or not docs:
            return []
        return format_docstr(indent, docs)

    def _derives(self, container: Container, catalog: TypeCatalog, memo: dict[str, bool]) -> list[str]:
        derives = list(DEFAULT_DERIVES)

        if container.is_main_container and not self.config.hide_kube:
            # CustomResource first for the root struct
            derives.insert(0, "CustomResource")

        # TypedBuilder does not work with enums
        if self.config.builders and not container.is_enum:
            derives.append("TypedBuilder")

        for derive in self.config.derive_traits:
            if derive.derived_trait == "Default" and (
                container.is_enum or (self.config.smart_derive_elision and not catalog.can_derive_default(container, memo))
            ):
                continue
            if derive.is_applicable_to(container) and derive.derived_trait not in derives:
                derives.append(derive.derived_trait)

        return derives

    def _kube_attributes(
        self,
        container: Container,
        catalog: TypeCatalog,
        context: GenerationContext,
        memo: dict[str, bool],
    ) -> list[str]:
        names = context.names
        attributes = [f'#[kube(group = "{names.group}", version = "{context.version}", kind = "{names.kind}", plural = "{names.plural}")]']

        if names.namespaced:
            attributes.append("#[kube(namespaced)]")

        if context.status_subresource and catalog.has_status_resource():
            attributes.append(f'#[kube(status = "{self.kind}Status")]')

        if self.config.schema_mode != SchemaMode.DERIVED:
            attributes.append(f'#[kube(schema = "{self.config.schema_mode.value}")]')

        for derive in self.config.derive_traits:
            if derive.derived_trait == "JsonSchema" or not derive.is_applicable_to(container):
                continue
            if derive.derived_trait == "Default" and self.config.smart_derive_elision and not catalog.can_derive_default(container, memo):
                continue
            attributes.append(f'#[kube(derive="{derive.derived_trait}")]')

        return attributes

    def _prepare_member_context(self, member: Member, is_enum: bool) -> dict[str, Any]:
        serde = []
        if member.is_optional:
            serde.extend(OPTIONAL_SERDE)
        if member.rename is not None:
            serde.append(f'rename = "{member.rename}"')

        return {
            "name": member.name,
            "type": None if is_enum or member.type_ref is None else self.translate_type(member.type_ref),
            "docs": self._docs(member.docs, "    "),
            "serde": serde,
            "annotations": member.extra_annotations,
        }

    def _prepare_container_context(
        self,
        container: Container,
        catalog: TypeCatalog,
        context: GenerationContext,
        memo: dict[str, bool],
    ) -> dict[str, Any]:
        """
        Prepare the template context for a container.

        Args:
            container: The container
            catalog: The catalog it belongs to
            context: Resource information
            memo: Shared Default derivability results

        Returns:
            Dictionary of template variables
        """
        is_main = container.is_main_container
        kube_attributes = []
        if is_main and not self.config.hide_kube:
            kube_attributes = self._kube_attributes(container, catalog, context, memo)

        return {
            "docs": self._docs(container.docs),
            "derives": self._derives(container, catalog, memo),
            "kube_attributes": kube_attributes,
            "is_enum": container.is_enum,
            "name": container.name if is_main else self._spec_trimmed(container.name),
            "members": [self._prepare_member_context(m, container.is_enum) for m in container.members],
        }
