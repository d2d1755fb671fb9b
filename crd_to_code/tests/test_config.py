import pytest

from crd_to_code.pipeline import AnalyzerConfig, Derive, GeneratorConfig, MapType, SchemaMode


class TestGeneratorConfig:
    def test_defaults(self):
        config = GeneratorConfig()
        assert config.schema_mode == SchemaMode.DISABLED
        assert config.map_type == MapType.BTREE_MAP
        assert config.derive_traits == []

    def test_from_dict(self):
        config = GeneratorConfig.from_dict(
            {
                "emit_docs": True,
                "schema_mode": "Derived",
                "map_type": "HASH_MAP",
                "derive_traits": ["PartialEq", "@enum=Copy", "PartialEq"],
                "elide": ["WidgetStatus"],
                "unknown_key": 1,
            }
        )
        assert config.emit_docs
        assert config.schema_mode == SchemaMode.DERIVED
        assert config.map_type == MapType.HASH_MAP
        assert config.derive_traits == [Derive.parse("PartialEq"), Derive.parse("@enum=Copy")]
        assert config.elide == ["WidgetStatus"]

    def test_to_dict(self):
        config = GeneratorConfig(builders=True, derive_traits=[Derive.parse("@struct=Eq")])
        assert GeneratorConfig.from_dict(config.to_dict()) == config
        assert config.to_dict()["derive_traits"] == ["@struct=Eq"]
        assert config.to_dict()["map_type"] == "BTreeMap"

    def test_invalid_map_type(self):
        with pytest.raises(ValueError):
            GeneratorConfig.from_dict({"map_type": "TreeMap"})

    def test_analyzer_config(self):
        config = GeneratorConfig(no_condition=True, relaxed=True, map_type=MapType.HASH_MAP)
        assert config.analyzer_config() == AnalyzerConfig(
            disable_condition_detection=True,
            disable_object_reference_detection=False,
            map_type=MapType.HASH_MAP,
            relaxed=True,
        )


def test_analyzer_config_round_trip():
    config = AnalyzerConfig(disable_object_reference_detection=True, map_type=MapType.HASH_MAP)
    assert AnalyzerConfig.from_dict(config.to_dict()) == config


if __name__ == "__main__":
    pytest.main([__file__])
