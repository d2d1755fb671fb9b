"""
Tests for schema analysis: container discovery, member typing and the
detection of well-known shapes.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from crd_to_code.pipeline import AnalyzerConfig, GeneratorConfig, MapType, UnsupportedSchemaShape, analyze, parse_schema
from crd_to_code.pipeline.analyzer import Primitive, TypeKind, TypeRef, WellKnown
from crd_to_code.pipeline.backends import RustBackend


def load_test_data():
    """Load analyzer test cases from YAML file"""
    test_data_path = Path(__file__).parent / "test_data" / "analyzer_cases.yaml"
    with open(test_data_path) as f:
        return yaml.safe_load(f)


def render_type(type_ref: TypeRef) -> str:
    return RustBackend(GeneratorConfig()).translate_type(type_ref)


def analyze_yaml(text: str, kind: str, config: AnalyzerConfig | None = None):
    return analyze(parse_schema(yaml.safe_load(text)), kind, config)


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda case: case["name"])
def test_analyzer_cases(test_case):
    """Each schema produces exactly the expected containers, in discovery order"""
    catalog = analyze(parse_schema(test_case["schema"]), test_case["kind"])

    expected = test_case["containers"]
    assert catalog.names() == [c["name"] for c in expected]

    for expected_container in expected:
        container = catalog[expected_container["name"]]
        assert container.level == expected_container["level"], container.name
        assert container.is_enum == expected_container.get("is_enum", False), container.name

        if container.is_enum:
            assert [m.name for m in container.members] == expected_container["variants"]
            assert all(m.type_ref is None for m in container.members)
        else:
            members = {m.name: render_type(m.type_ref) for m in container.members}
            assert members == expected_container["members"], container.name


def test_analysis_is_deterministic():
    """Analyzing the same schema twice yields identical catalogs"""
    for test_case in load_test_data():
        first = analyze(parse_schema(test_case["schema"]), test_case["kind"])
        second = analyze(parse_schema(test_case["schema"]), test_case["kind"])
        assert first.containers == second.containers


@pytest.mark.parametrize("test_case", load_test_data(), ids=lambda case: case["name"])
def test_every_reference_has_a_container(test_case):
    """Members never point at a container the analysis did not produce"""
    catalog = analyze(parse_schema(test_case["schema"]), test_case["kind"])
    for container in catalog:
        for type_ref in container.member_types():
            if type_ref.kind == TypeKind.REFERENCE:
                assert type_ref.name in catalog, (container.name, type_ref.name)


def test_property_order_does_not_matter():
    first = analyze_yaml(
        """
        type: object
        properties:
          b: {type: string}
          a: {type: object, properties: {y: {type: integer}, x: {type: boolean}}}
        """,
        "Thing",
    )
    second = analyze_yaml(
        """
        type: object
        properties:
          a: {type: object, properties: {x: {type: boolean}, y: {type: integer}}}
          b: {type: string}
        """,
        "Thing",
    )
    assert first.containers == second.containers
    assert [m.name for m in first["Thing"].members] == ["a", "b"]


def test_required_members_are_not_wrapped():
    catalog = analyze_yaml(
        """
        type: object
        required: [name]
        properties:
          name: {type: string}
          replicas: {type: integer, format: int32}
        """,
        "App",
    )
    name, replicas = catalog["App"].members
    assert name.required
    assert not name.is_optional
    assert name.type_ref == TypeRef.primitive(Primitive.STRING)
    assert replicas.is_optional
    assert render_type(replicas.type_ref) == "Option<i32>"


def test_member_docs_come_from_descriptions():
    catalog = analyze_yaml(
        """
        type: object
        description: The root
        properties:
          spec:
            description: Desired state
            type: object
            properties:
              size:
                description: How many
                type: integer
        """,
        "Widget",
    )
    assert catalog["Widget"].docs == "The root"
    assert catalog["Widget"].members[0].docs == "Desired state"
    assert catalog["WidgetSpec"].docs == "Desired state"
    assert catalog["WidgetSpec"].members[0].docs == "How many"


def test_enum_docs_come_from_the_enum_property():
    catalog = analyze_yaml(
        """
        type: object
        properties:
          mode:
            description: Operating mode
            type: string
            enum: [fast, slow]
        """,
        "Job",
    )
    assert catalog["JobMode"].docs == "Operating mode"


class TestWellKnownShapes:
    """Condition and ObjectReference detection"""

    CONDITIONS = """
    type: object
    properties:
      conditions:
        type: array
        items:
          type: object
          properties:
            lastTransitionTime: {type: string, format: date-time}
            message: {type: string}
            reason: {type: string}
            status: {type: string}
            type: {type: string}
    """

    OBJECT_REFERENCE = """
    type: object
    properties:
      ref:
        type: object
        properties:
          apiVersion: {type: string}
          fieldPath: {type: string}
          kind: {type: string}
          name: {type: string}
          namespace: {type: string}
          resourceVersion: {type: string}
          uid: {type: string}
    """

    def test_conditions_detected(self):
        catalog = analyze_yaml(self.CONDITIONS, "Gateway")
        assert catalog.names() == ["Gateway"]
        member = catalog["Gateway"].members[0]
        assert member.type_ref.inner == TypeRef.list_of(TypeRef.well_known(WellKnown.CONDITION))

    def test_conditions_detection_disabled(self):
        catalog = analyze_yaml(self.CONDITIONS, "Gateway", AnalyzerConfig(disable_condition_detection=True))
        assert catalog.names() == ["Gateway", "GatewayConditions"]
        assert render_type(catalog["Gateway"].members[0].type_ref) == "Option<Vec<GatewayConditions>>"
        assert render_type(catalog["GatewayConditions"].members[0].type_ref) == "Option<DateTime<Utc>>"

    def test_conditions_with_extra_fields_still_detected(self):
        schema = yaml.safe_load(self.CONDITIONS)
        schema["properties"]["conditions"]["items"]["properties"]["extra"] = {"type": "string"}
        catalog = analyze(parse_schema(schema), "Gateway")
        assert catalog["Gateway"].uses_well_known(WellKnown.CONDITION)

    def test_object_reference_detected(self):
        catalog = analyze_yaml(self.OBJECT_REFERENCE, "Binding")
        assert catalog.names() == ["Binding"]
        assert render_type(catalog["Binding"].members[0].type_ref) == "Option<ObjectReference>"

    def test_object_reference_detection_disabled(self):
        catalog = analyze_yaml(self.OBJECT_REFERENCE, "Binding", AnalyzerConfig(disable_object_reference_detection=True))
        assert catalog.names() == ["Binding", "BindingRef"]
        assert len(catalog["BindingRef"].members) == 7

    def test_partial_object_reference_is_a_struct(self):
        schema = yaml.safe_load(self.OBJECT_REFERENCE)
        del schema["properties"]["ref"]["properties"]["uid"]
        catalog = analyze(parse_schema(schema), "Binding")
        assert catalog.names() == ["Binding", "BindingRef"]

    def array_of_object_references(self):
        ref = yaml.safe_load(self.OBJECT_REFERENCE)["properties"]["ref"]
        return {
            "type": "object",
            "properties": {
                "operator": {
                    "type": "object",
                    "properties": {"targets": {"type": "array", "items": ref}},
                }
            },
        }

    def test_object_reference_detected_in_array(self):
        catalog = analyze(parse_schema(self.array_of_object_references()), "Kind")
        assert catalog.names() == ["Kind", "KindOperator"]
        assert render_type(catalog["KindOperator"].members[0].type_ref) == "Option<Vec<ObjectReference>>"

    def test_object_reference_in_array_detection_disabled(self):
        config = AnalyzerConfig(disable_object_reference_detection=True)
        catalog = analyze(parse_schema(self.array_of_object_references()), "Kind", config)
        assert catalog.names() == ["Kind", "KindOperator", "KindOperatorTargets"]
        assert render_type(catalog["KindOperator"].members[0].type_ref) == "Option<Vec<KindOperatorTargets>>"
        assert len(catalog["KindOperatorTargets"].members) == 7


class TestUnsupportedShapes:
    """Shapes that abort the analysis"""

    def test_tuple_array_rejected(self):
        with pytest.raises(UnsupportedSchemaShape, match="single schema"):
            analyze_yaml(
                """
                type: object
                properties:
                  pair:
                    type: array
                    items:
                      - {type: string}
                      - {type: integer}
                """,
                "Tuple",
            )

    def test_array_without_items_rejected(self):
        with pytest.raises(UnsupportedSchemaShape, match="missing items"):
            analyze_yaml(
                """
                type: object
                properties:
                  things: {type: array}
                """,
                "Bag",
            )

    def test_negative_enum_rejected(self):
        with pytest.raises(UnsupportedSchemaShape, match="signed"):
            analyze_yaml(
                """
                type: object
                properties:
                  offset: {type: integer, enum: [-1, 0, 1]}
                """,
                "Shift",
            )

    def test_mixed_enum_rejected(self):
        with pytest.raises(UnsupportedSchemaShape, match="mix"):
            analyze_yaml(
                """
                type: object
                properties:
                  level: {type: string, enum: [low, 2]}
                """,
                "Level",
            )

    def test_untyped_value_rejected(self):
        with pytest.raises(UnsupportedSchemaShape, match="unknown empty dict type") as excinfo:
            analyze_yaml(
                """
                type: object
                properties:
                  anything: {description: no type at all}
                """,
                "Loose",
            )
        assert excinfo.value.path == "Loose.anything"

    def test_untyped_value_relaxed(self):
        catalog = analyze_yaml(
            """
            type: object
            properties:
              anything: {description: no type at all}
            """,
            "Loose",
            AnalyzerConfig(relaxed=True),
        )
        assert render_type(catalog["Loose"].members[0].type_ref) == "Option<BTreeMap<String, serde_json::Value>>"

    def test_empty_inner_array_relaxed(self):
        text = """
            type: object
            properties:
              grid:
                type: array
                items: {type: array}
            """
        with pytest.raises(UnsupportedSchemaShape, match="empty inner array"):
            analyze_yaml(text, "Board")

        catalog = analyze_yaml(text, "Board", AnalyzerConfig(relaxed=True))
        assert render_type(catalog["Board"].members[0].type_ref) == "Option<BTreeMap<String, serde_json::Value>>"


def test_untyped_preserve_unknown_is_opaque():
    catalog = analyze_yaml(
        """
        type: object
        properties:
          raw: {x-kubernetes-preserve-unknown-fields: true}
        """,
        "Blob",
    )
    assert catalog["Blob"].members[0].type_ref.inner == TypeRef.opaque()


def test_additional_properties_false_is_a_struct():
    catalog = analyze_yaml(
        """
        type: object
        properties:
          closed:
            type: object
            additionalProperties: false
            properties:
              a: {type: string}
        """,
        "Strict",
    )
    assert catalog.names() == ["Strict", "StrictClosed"]
    assert catalog["Strict"].members[0].type_ref.inner == TypeRef.reference("StrictClosed")


def test_nested_containers_are_named_by_path():
    catalog = analyze_yaml(
        """
        type: object
        properties:
          spec:
            type: object
            properties:
              tls-config:
                type: object
                properties:
                  ca:
                    type: object
                    properties:
                      secret: {type: string}
        """,
        "Issuer",
    )
    assert catalog.names() == ["Issuer", "IssuerSpec", "IssuerSpecTlsConfig", "IssuerSpecTlsConfigCa"]
    assert [catalog[name].level for name in catalog.names()] == [0, 1, 2, 3]


def test_duplicate_container_names_keep_the_first():
    # "a-b" and "a_b" both become "AB"; only the first definition is kept
    catalog = analyze_yaml(
        """
        type: object
        properties:
          a-b:
            type: object
            properties:
              first: {type: string}
          a_b:
            type: object
            properties:
              second: {type: string}
        """,
        "X",
    )
    assert catalog.names() == ["X", "XAB"]
    assert [m.name for m in catalog["XAB"].members] == ["first"]


def test_map_type_is_carried_by_the_catalog():
    catalog = analyze_yaml(
        """
        type: object
        properties:
          labels:
            type: object
            additionalProperties: {type: string}
        """,
        "Tagged",
        AnalyzerConfig(map_type=MapType.HASH_MAP),
    )
    assert catalog.map_type == MapType.HASH_MAP
    assert catalog["Tagged"].uses_kind(TypeKind.MAP)


if __name__ == "__main__":
    pytest.main([__file__])
