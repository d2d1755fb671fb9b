"""
Tests for the Rust backend: type translation and the effect of generator
options on the emitted code.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from crd_to_code.pipeline import Derive, GeneratorConfig, MapType, PipelineGenerator, SchemaMode, load_crd
from crd_to_code.pipeline.analyzer import Primitive, TypeRef, WellKnown
from crd_to_code.pipeline.backends import RustBackend, format_docstr

CRDS_DIR = Path(__file__).parent / "test_data" / "crds"


@pytest.fixture
def crd():
    return load_crd(CRDS_DIR / "widget.yaml")


def generate(crd, **options) -> str:
    return PipelineGenerator(crd, GeneratorConfig(**options)).generate()


class TestTranslateType:
    @pytest.mark.parametrize(
        "type_ref, expected",
        [
            (TypeRef.primitive(Primitive.STRING), "String"),
            (TypeRef.primitive(Primitive.BOOL), "bool"),
            (TypeRef.primitive(Primitive.U128), "u128"),
            (TypeRef.primitive(Primitive.DATE), "NaiveDate"),
            (TypeRef.primitive(Primitive.DATETIME), "DateTime<Utc>"),
            (TypeRef.opaque(), "serde_json::Value"),
            (TypeRef.well_known(WellKnown.INT_OR_STRING), "IntOrString"),
            (TypeRef.optional(TypeRef.list_of(TypeRef.list_of(TypeRef.primitive(Primitive.F64)))), "Option<Vec<Vec<f64>>>"),
            (TypeRef.map_of(TypeRef.map_of(TypeRef.opaque())), "BTreeMap<String, BTreeMap<String, serde_json::Value>>"),
            (TypeRef.reference("WidgetSpecTls"), "WidgetSpecTls"),
        ],
    )
    def test_translate(self, type_ref, expected):
        assert RustBackend(GeneratorConfig()).translate_type(type_ref) == expected

    def test_hash_map(self):
        backend = RustBackend(GeneratorConfig(map_type=MapType.HASH_MAP))
        assert backend.translate_type(TypeRef.map_of(TypeRef.primitive(Primitive.I32))) == "HashMap<String, i32>"


def test_format_docstr():
    docs = "First line\n\nSecond line   \n"
    assert format_docstr("    ", docs) == ["    /// First line", "    ///", "    /// Second line"]


class TestGeneratorOptions:
    def test_hide_kube(self, crd):
        output = generate(crd, hide_kube=True)
        assert "CustomResource" not in output
        assert "#[kube(" not in output
        assert "#[derive(Serialize, Deserialize, Clone, Debug)]\npub struct WidgetSpec {" in output

    def test_hide_prelude(self, crd):
        output = generate(crd, hide_prelude=True)
        assert "mod prelude" not in output
        assert "use self::prelude::*;" not in output
        assert output.startswith("// WARNING: generated by crd_to_code")

    def test_elide_by_emitted_name(self, crd):
        output = generate(crd, elide=["WidgetTlsConfig", "WidgetStatus"])
        assert "pub struct WidgetTlsConfig" not in output
        assert "pub struct WidgetStatus" not in output
        assert "pub struct WidgetSpec" in output

    def test_older_version(self, crd):
        output = generate(crd, api_version="v1beta1")
        assert 'version = "v1beta1"' in output
        assert "    pub size: Option<i64>," in output
        assert "#[kube(status" not in output

    def test_schema_modes(self, crd):
        assert '#[kube(schema = "manual")]' in generate(crd, schema_mode=SchemaMode.MANUAL)
        derived = generate(crd, schema_mode=SchemaMode.DERIVED)
        assert "#[kube(schema" not in derived
        assert "pub use schemars::JsonSchema;" in derived

    def test_type_derive(self, crd):
        assert "Hash" not in generate(crd)

        config = GeneratorConfig()
        config.add_derive(Derive.parse("WidgetSpecTlsConfig=Hash"))
        output = PipelineGenerator(crd, config).generate()
        assert "#[derive(Serialize, Deserialize, Clone, Debug, Hash)]\npub struct WidgetTlsConfig {" in output
        assert '#[kube(derive="Hash")]' not in output

    def test_command_line_header(self, crd):
        output = PipelineGenerator(crd, command_line="crd_to_code widget.yaml").generate()
        assert "// crd_to_code command: crd_to_code widget.yaml\n" in output

    def test_default_without_elision_is_kept_on_structs(self, crd):
        config = GeneratorConfig()
        config.add_derive(Derive.parse("Default"))
        output = PipelineGenerator(crd, config).generate()
        assert "#[derive(CustomResource, Serialize, Deserialize, Clone, Debug, Default)]" in output
        assert '#[kube(derive="Default")]' in output
        assert "#[derive(Serialize, Deserialize, Clone, Debug)]\npub enum WidgetMode {" in output


if __name__ == "__main__":
    pytest.main([__file__])
