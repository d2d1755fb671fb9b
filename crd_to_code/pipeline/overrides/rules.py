"""
Override rules for individual schema properties.

Rules let users intercept a property before structural inference runs,
either replacing its type with an existing one or omitting it entirely.

The serialized YAML format is:

    propertyRules:
        # The action to perform if the name and schema matches below succeed.
      - matchSuccess:
          # Type name to use verbatim for the property. No container is
          # generated for it when the rule matches.
          replace: MyType
        # Instead of replacing, the property can be dropped with:
        # matchSuccess: omit

        # Zero or more expressions to match the property name against. Only
        # one of them needs to match. When absent, only the schema is matched.
        matchName:
          - exact: foo
          - regex: ^bar[1-9]+$

        # A schema to compare the property schema with, either as a `subset`
        # (the property has at least these fields) or `exhaustive` (the
        # property has exactly these fields). When absent, only the name is
        # matched.
        matchSchema:
          subset:
            type: object
            properties:
              claims:
                type: array
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..errors import OverrideCompileError, OverrideConfigError, SchemaParseError
from ..schema_ast.nodes import SchemaNode
from ..schema_ast.parser import SchemaParser
from .schema_eq import is_exhaustive, is_subset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyName:
    """An expression a property name is matched against."""

    value: str
    is_regex: bool = False

    @staticmethod
    def exact(value: str) -> PropertyName:
        return PropertyName(value)

    @staticmethod
    def regex(value: str) -> PropertyName:
        return PropertyName(value, is_regex=True)


class SchemaMatchMode(str, Enum):
    EXHAUSTIVE = "exhaustive"
    SUBSET = "subset"


@dataclass(frozen=True)
class PropertySchema:
    """A schema expression a property schema is matched against."""

    schema: SchemaNode
    mode: SchemaMatchMode = SchemaMatchMode.SUBSET

    @staticmethod
    def exhaustive(schema: SchemaNode) -> PropertySchema:
        return PropertySchema(schema, SchemaMatchMode.EXHAUSTIVE)

    @staticmethod
    def subset(schema: SchemaNode) -> PropertySchema:
        return PropertySchema(schema, SchemaMatchMode.SUBSET)

    def matches(self, candidate: SchemaNode) -> bool:
        if self.mode == SchemaMatchMode.EXHAUSTIVE:
            return is_exhaustive(self.schema, candidate)
        return is_subset(self.schema, candidate)


class ActionKind(str, Enum):
    REPLACE = "replace"
    OMIT = "omit"


@dataclass(frozen=True)
class PropertyAction:
    """What happens to a property when a rule matches."""

    kind: ActionKind
    type_name: str | None = None  # For ActionKind.REPLACE

    @staticmethod
    def replace(type_name: str) -> PropertyAction:
        return PropertyAction(ActionKind.REPLACE, type_name)

    @staticmethod
    def omit() -> PropertyAction:
        return PropertyAction(ActionKind.OMIT)

    @property
    def is_omit(self) -> bool:
        return self.kind == ActionKind.OMIT


@dataclass
class PropertyRule:
    """An uncompiled rule, as read from an overrides document."""

    match_success: PropertyAction
    match_name: tuple[PropertyName, ...] = ()
    match_schema: PropertySchema | None = None

    def exact_names(self) -> list[str]:
        return list(dict.fromkeys(name.value for name in self.match_name if not name.is_regex))

    def regex_patterns(self) -> list[str]:
        return list(dict.fromkeys(name.value for name in self.match_name if name.is_regex))


@dataclass
class CompiledPropertyRule:
    """A rule with its regex names compiled into a single alternation."""

    # Equality is the dedup key for extend: every field except the compiled regex
    match_success: PropertyAction
    exact_names: frozenset[str] = frozenset()
    patterns: tuple[str, ...] = ()
    match_schema: PropertySchema | None = None
    regex: re.Pattern | None = field(default=None, compare=False, repr=False)

    def matches_name(self, name: str) -> bool:
        """Exact or regex match; a rule without names matches every name."""
        if not self.exact_names and self.regex is None:
            return True
        return name in self.exact_names or (self.regex is not None and self.regex.search(name) is not None)

    def is_match(self, name: str, schema: SchemaNode) -> bool:
        """Determine if this rule matches the supplied name *and* schema."""
        if not self.matches_name(name):
            return False

        if self.match_schema is not None and not self.match_schema.matches(schema):
            return False

        return True


def _compile_alternation(patterns: Iterable[str]) -> re.Pattern | None:
    patterns = list(patterns)
    if not patterns:
        return None
    return re.compile("|".join(f"(?:{pattern})" for pattern in patterns))


class Overrides:
    """A set of property rules.

    Rules naming exact properties are indexed by those names; every rule
    with regex names (or with no names at all) is kept in an ordered list
    scanned linearly when the index does not produce a match.
    """

    def __init__(self) -> None:
        self.property_index: dict[str, list[CompiledPropertyRule]] = {}
        self.property_rules: list[CompiledPropertyRule] = []

    @classmethod
    def new(cls, rules: Iterable[PropertyRule]) -> Overrides:
        """
        Compile a rule set.

        All patterns are compiled even if some fail, so that every broken
        pattern is reported at once.

        Raises:
            OverrideCompileError: if any pattern fails to compile
        """
        errors: list[tuple[str, str]] = []
        overrides = cls()
        for rule in rules:
            patterns = rule.regex_patterns()
            for pattern in patterns:
                try:
                    re.compile(pattern)
                except re.error as e:
                    errors.append((pattern, str(e)))
            if errors:
                continue

            compiled = CompiledPropertyRule(
                match_success=rule.match_success,
                exact_names=frozenset(rule.exact_names()),
                patterns=tuple(patterns),
                match_schema=rule.match_schema,
                regex=_compile_alternation(patterns),
            )
            exact_names = rule.exact_names()
            for name in exact_names:
                overrides.property_index.setdefault(name, []).append(compiled)

            # Rules with only exact names are reachable through the index alone
            if not (exact_names and not patterns):
                overrides.property_rules.append(compiled)

        if errors:
            raise OverrideCompileError(errors)
        return overrides

    @classmethod
    def from_dict(cls, document: dict[str, Any] | None) -> Overrides:
        """Compile an overrides document (the ``propertyRules`` format)."""
        return cls.new(parse_property_rules(document))

    @classmethod
    def from_paths(cls, paths: Iterable[str | Path]) -> Overrides:
        """
        Load multiple overrides documents into a single set of overrides.

        Rules of later documents are appended after the rules of earlier ones.
        """
        overrides = cls()
        for path in paths:
            with open(path, encoding="utf-8") as f:
                document = yaml.safe_load(f)
            logger.debug("loaded overrides from %s", path)
            overrides.extend(cls.from_dict(document))
        return overrides

    def extend(self, *others: Overrides) -> None:
        """Merge other overrides into this one by appending their rules."""
        for other in others:
            for name, rules in other.property_index.items():
                self.property_index.setdefault(name, []).extend(rules)

            self.property_rules.extend(other.property_rules)
            # Drop consecutive duplicates; order matters so no sorting happens
            deduped: list[CompiledPropertyRule] = []
            for rule in self.property_rules:
                if not deduped or deduped[-1] != rule:
                    deduped.append(rule)
            self.property_rules = deduped

    def get_property_rule(self, name: str, schema: SchemaNode) -> CompiledPropertyRule | None:
        """
        Get the first rule matching the supplied property name and schema.

        Rules indexed under ``name`` are tried first, in order; then the
        linear list is scanned. The first match wins.
        """
        for rule in self.property_index.get(name, []):
            if rule.is_match(name, schema):
                return rule

        for rule in self.property_rules:
            if rule.is_match(name, schema):
                return rule

        return None

    def get_property_action(self, name: str, schema: SchemaNode) -> PropertyAction | None:
        rule = self.get_property_rule(name, schema)
        return rule.match_success if rule else None

    def __bool__(self) -> bool:
        return bool(self.property_index or self.property_rules)


def _parse_name(value: Any, path: str) -> PropertyName:
    if not isinstance(value, dict) or len(value) != 1:
        raise OverrideConfigError(f"{path}: expected a single 'exact' or 'regex' key, got {value!r}")
    key, name = next(iter(value.items()))
    if key == "exact":
        return PropertyName.exact(str(name))
    if key == "regex":
        return PropertyName.regex(str(name))
    raise OverrideConfigError(f"{path}: unknown name matcher '{key}'")


def _parse_schema(value: Any, path: str) -> PropertySchema:
    if not isinstance(value, dict) or len(value) != 1:
        raise OverrideConfigError(f"{path}: expected a single 'subset' or 'exhaustive' key, got {value!r}")
    key, schema = next(iter(value.items()))
    if key not in ("subset", "exhaustive"):
        raise OverrideConfigError(f"{path}: unknown schema matcher '{key}'")
    try:
        node = SchemaParser().parse(schema or {}, f"{path}/{key}")
    except SchemaParseError as e:
        raise OverrideConfigError(str(e)) from e
    return PropertySchema(node, SchemaMatchMode(key))


def _parse_action(value: Any, path: str) -> PropertyAction:
    if value == "omit" or value == {"omit": None}:
        return PropertyAction.omit()
    if isinstance(value, dict) and set(value) == {"replace"} and isinstance(value["replace"], str):
        return PropertyAction.replace(value["replace"])
    raise OverrideConfigError(f"{path}: matchSuccess must be 'omit' or {{replace: <type>}}, got {value!r}")


def parse_property_rules(document: dict[str, Any] | None) -> list[PropertyRule]:
    """Read the ``propertyRules`` of an overrides document."""
    if document is None:
        return []
    if not isinstance(document, dict):
        raise OverrideConfigError("overrides document must be a mapping")

    rules = []
    for i, raw in enumerate(document.get("propertyRules") or []):
        path = f"propertyRules[{i}]"
        if not isinstance(raw, dict):
            raise OverrideConfigError(f"{path}: expected a mapping")
        if "matchSuccess" not in raw:
            raise OverrideConfigError(f"{path}: missing matchSuccess")

        names = tuple(dict.fromkeys(_parse_name(name, f"{path}.matchName[{j}]") for j, name in enumerate(raw.get("matchName") or [])))
        schema = _parse_schema(raw["matchSchema"], f"{path}.matchSchema") if raw.get("matchSchema") is not None else None
        rules.append(
            PropertyRule(
                match_success=_parse_action(raw["matchSuccess"], f"{path}.matchSuccess"),
                match_name=names,
                match_schema=schema,
            )
        )
    return rules
