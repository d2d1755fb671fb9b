"""
Tests for member renaming: case conversion, keyword escaping and collision
suffixes.
"""

import pytest

from crd_to_code.pipeline import UnsupportedSchemaShape
from crd_to_code.pipeline.analyzer import Container, Member, NameResolver, Primitive, TypeCatalog, TypeRef
from crd_to_code.pipeline.analyzer.name_resolver import try_escape_name


def struct(name, *keys):
    string = TypeRef.optional(TypeRef.primitive(Primitive.STRING))
    return Container(name=name, level=1, members=[Member(name=key, type_ref=string) for key in keys])


def enum(name, *keys):
    return Container(name=name, level=2, is_enum=True, members=[Member(name=key) for key in keys])


def renamed(container):
    TypeCatalog([container]).rename()
    return [(m.name, m.rename) for m in container.members]


class TestFieldNames:
    """Struct members become snake_case identifiers"""

    def test_colliding_fields_get_suffixes(self):
        container = struct("IssuerJwks", "jwksUri", "jwks_uri", "jwks-uri", "JwksUri")
        assert renamed(container) == [
            ("jwks_uri", "jwksUri"),
            ("jwks_uri_x", "jwks_uri"),
            ("jwks_uri_x_x", "jwks-uri"),
            ("jwks_uri_x_x_x", "JwksUri"),
        ]

    def test_collision_suffixes_follow_input_order(self):
        container = struct("IssuerJwks", "jwks_uri", "jwks-uri", "jwksUri", "JwksUri")
        assert renamed(container) == [
            ("jwks_uri", None),
            ("jwks_uri_x", "jwks-uri"),
            ("jwks_uri_x_x", "jwksUri"),
            ("jwks_uri_x_x_x", "JwksUri"),
        ]

    def test_unchanged_names_are_not_marked(self):
        assert renamed(struct("A", "name", "replicas")) == [("name", None), ("replicas", None)]

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("type", "r#type"),
            ("match", "r#match"),
            ("self", "r#_self"),
            ("", "kopium_empty"),
            ("-", "kopium_dash"),
            ("_", "kopium_underscore"),
            ("x-kubernetes-int-or-string", "x_kubernetes_int_or_string"),
            ("podCIDR", "pod_cidr"),
        ],
    )
    def test_field_escapes(self, key, expected):
        container = struct("A", key)
        NameResolver().rename(container)
        assert container.members[0].name == expected
        assert container.members[0].rename == key

    def test_unescapable_field_rejected(self):
        with pytest.raises(UnsupportedSchemaShape):
            NameResolver().rename(struct("A", "!!"))


class TestVariantNames:
    """Enum members become PascalCase identifiers"""

    def test_colliding_variants_get_suffixes(self):
        container = enum("RelabelingsAction", "replace", "Replace", "hashmod", "HashMod", "keep")
        assert renamed(container) == [
            ("Replace", "replace"),
            ("ReplaceX", "Replace"),
            ("Hashmod", "hashmod"),
            ("HashMod", None),
            ("Keep", "keep"),
        ]

    def test_three_way_variant_collision(self):
        container = enum("Mode", "jwks-uri", "jwksUri", "jwks_uri", "JWKS_URI")
        assert [name for name, _ in renamed(container)] == ["JwksUri", "JwksUriX", "JwksUriXX", "JwksUriXXX"]

    def test_variant_collision_suffixes_follow_input_order(self):
        container = enum("Mode", "jwks_uri", "jwks-uri", "jwksUri", "JwksUri")
        assert [name for name, _ in renamed(container)] == ["JwksUri", "JwksUriX", "JwksUriXX", "JwksUriXXX"]

    def test_variant_sentinels(self):
        container = enum("Sep", "", "-", "_")
        assert [name for name, _ in renamed(container)] == ["KopiumEmpty", "KopiumDash", "KopiumUnderscore"]

    def test_symbolic_variants_get_positional_names(self):
        container = enum("Operator", "==", "!=", "In")
        assert [name for name, _ in renamed(container)] == ["KopiumVariant0", "KopiumVariant1", "In"]

    def test_numeric_variants(self):
        # Integer enums have no identifier characters of their own
        container = enum("StatusCode", "301", "302")
        assert [name for name, _ in renamed(container)] == ["r#_301", "r#_302"]

    def test_keyword_variant(self):
        assert renamed(enum("Kw", "Self")) == [("r#_Self", "Self")]


def test_try_escape_name():
    assert try_escape_name("name") == "name"
    assert try_escape_name("type") == "r#type"
    assert try_escape_name("crate") == "r#_crate"
    assert try_escape_name("a-b") is None


if __name__ == "__main__":
    pytest.main([__file__])
