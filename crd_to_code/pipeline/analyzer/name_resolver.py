"""
Name resolver for member identifiers.

Converts raw wire keys to Rust naming conventions (snake_case fields,
PascalCase variants), escapes reserved words and resolves collisions
between keys that fold to the same identifier.
"""

from __future__ import annotations

from ...utils import to_pascal_case, to_snake_case
from ..errors import UnsupportedSchemaShape
from .ir_nodes import Container

# Rust keywords (strict and reserved) that cannot be used as plain identifiers
RUST_RESERVED_KEYWORDS = {
    "abstract",
    "as",
    "async",
    "await",
    "become",
    "box",
    "break",
    "const",
    "continue",
    "crate",
    "do",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "final",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "macro",
    "match",
    "mod",
    "move",
    "mut",
    "override",
    "priv",
    "pub",
    "ref",
    "return",
    "self",
    "Self",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "try",
    "type",
    "typeof",
    "unsafe",
    "unsized",
    "use",
    "virtual",
    "where",
    "while",
    "yield",
}

# Keywords that stay invalid even as raw identifiers
RUST_NON_RAW_KEYWORDS = {"crate", "self", "Self", "super"}

# Replacements for raw names that carry no usable characters
VARIANT_SENTINELS = {"": "KopiumEmpty", "-": "KopiumDash", "_": "KopiumUnderscore"}
FIELD_SENTINELS = {"": "kopium_empty", "-": "kopium_dash", "_": "kopium_underscore"}


def is_identifier(name: str) -> bool:
    """Check whether ``name`` parses as a Rust identifier (plain or raw)."""
    if name.startswith("r#"):
        bare = name[2:]
        return bare not in RUST_NON_RAW_KEYWORDS and bare != "_" and bare.isidentifier()
    return name != "_" and name not in RUST_RESERVED_KEYWORDS and name.isidentifier()


def try_escape_name(name: str) -> str | None:
    """Try ``name``, ``r#name`` and ``r#_name`` in turn, returning the first identifier."""
    for candidate in (name, f"r#{name}", f"r#_{name}"):
        if is_identifier(candidate):
            return candidate
    return None


class NameResolver:
    """Renames container members to identifiers."""

    def member_name(self, container: Container, index: int, raw_name: str) -> str:
        """
        Convert a single raw member name, without collision handling.

        Args:
            container: The container owning the member
            index: Position of the member (used for synthetic variant names)
            raw_name: The wire name

        Returns:
            The converted identifier
        """
        if container.is_enum:
            name = VARIANT_SENTINELS.get(raw_name) or to_pascal_case(raw_name)
            # Nothing survived the conversion (e.g. "!=")
            if not name:
                return f"KopiumVariant{index}"
            return try_escape_name(name) or f"KopiumVariant{index}"

        if raw_name in FIELD_SENTINELS:
            return FIELD_SENTINELS[raw_name]
        escaped = try_escape_name(to_snake_case(raw_name))
        if escaped is None:
            raise UnsupportedSchemaShape(f"invalid field name '{raw_name}' could not be escaped", container.name)
        return escaped

    def rename(self, container: Container) -> None:
        """
        Rename all members of a container in place.

        Converted names that collide with an earlier member get a suffix
        (``X`` for variants, ``_x`` for fields) until unique. Members whose
        final name differs from the wire name record it in ``rename``.
        """
        seen: set[str] = set()
        suffix = "X" if container.is_enum else "_x"
        for i, member in enumerate(container.members):
            new_name = self.member_name(container, i, member.name)
            while new_name in seen:
                new_name = f"{new_name}{suffix}"
            seen.add(new_name)

            if new_name != member.name:
                member.rename = member.name
                member.name = new_name
