"""
Schema analyzer that turns a CRD schema into containers.

Phase 2 of the pipeline: walk the SchemaNode tree, resolve every property to
a TypeRef and collect the structs and enums that need generating.

The walk is two-phase per object. ``_extract_container`` resolves the
members of the current object without recursing, noting how deep each
array property nests; ``_find_containers`` then recurses into the members
that need containers of their own. Containers are collected parent first,
children depth-first, and deduplicated by name in the catalog.
"""

from __future__ import annotations

import logging

from ...utils import to_upper_camel_case
from ..config import AnalyzerConfig
from ..errors import UnsupportedSchemaShape
from ..overrides import Overrides
from ..schema_ast.nodes import (
    AdditionalBool,
    AdditionalSchema,
    ItemsArray,
    ItemsSchema,
    SchemaNode,
    SchemaOrBool,
)
from .catalog import TypeCatalog
from .ir_nodes import Container, Member, Primitive, TypeRef, WellKnown

logger = logging.getLogger(__name__)

# Handled by the resource wrapper, never recursed into at the root
IGNORED_KEYS = ("metadata", "apiVersion", "kind")

CONDITION_KEYS = frozenset({"type", "status", "reason", "message", "lastTransitionTime"})

OBJECT_REFERENCE_KEYS = frozenset({"apiVersion", "fieldPath", "kind", "name", "namespace", "resourceVersion", "uid"})

INTEGER_FORMATS = {
    "int8": Primitive.I8,
    "int16": Primitive.I16,
    "int32": Primitive.I32,
    "int64": Primitive.I64,
    "int128": Primitive.I128,
    "uint8": Primitive.U8,
    "uint16": Primitive.U16,
    "uint32": Primitive.U32,
    "uint64": Primitive.U64,
    "uint128": Primitive.U128,
}

DATE_FORMATS = {
    "date": Primitive.DATE,
    "date-time": Primitive.DATETIME,
}

SCALAR_TYPES = ("string", "boolean", "number", "integer", "date")


def _opaque_map() -> TypeRef:
    return TypeRef.map_of(TypeRef.opaque())


def _integer_type(schema: SchemaNode) -> TypeRef:
    # Unknown formats (and no format) fall back to i64
    return TypeRef.primitive(INTEGER_FORMATS.get(schema.format or "", Primitive.I64))


def _number_type(schema: SchemaNode) -> TypeRef:
    if schema.format == "float":
        return TypeRef.primitive(Primitive.F32)
    return TypeRef.primitive(Primitive.F64)


def _string_type(schema: SchemaNode) -> TypeRef:
    return TypeRef.primitive(DATE_FORMATS.get(schema.format or "", Primitive.STRING))


def _date_type(schema: SchemaNode, path: str) -> TypeRef:
    """Type of a ``type: date`` node, which only makes sense with a date format."""
    if schema.format is None:
        return TypeRef.primitive(Primitive.STRING)
    if schema.format not in DATE_FORMATS:
        raise UnsupportedSchemaShape(f"unknown date format {schema.format}", path)
    return TypeRef.primitive(DATE_FORMATS[schema.format])


def is_conditions(schema: SchemaNode) -> bool:
    """Whether an array schema holds standard Condition objects."""
    if not isinstance(schema.items, ItemsSchema):
        return False
    return CONDITION_KEYS <= set(schema.items.schema.property_map)


def is_object_reference(schema: SchemaNode) -> bool:
    """Whether an object schema has exactly the fields of an ObjectReference."""
    return set(schema.property_map) == OBJECT_REFERENCE_KEYS


class SchemaAnalyzer:
    """Analyzes a SchemaNode tree and builds a TypeCatalog."""

    def __init__(self, config: AnalyzerConfig | None = None, overrides: Overrides | None = None):
        """
        Initialize the analyzer.

        Args:
            config: Analysis options
            overrides: Property rules consulted before structural inference
        """
        self.config = config or AnalyzerConfig()
        self.overrides = overrides or Overrides()

    def analyze(self, schema: SchemaNode, kind: str) -> TypeCatalog:
        """
        Analyze a schema and collect all containers.

        All containers are named by the path from ``kind`` down to them.

        Args:
            schema: The root (openAPIV3Schema) node
            kind: The kind of the resource, used as the root name

        Returns:
            The catalog, root container first

        Raises:
            UnsupportedSchemaShape: for constructs that cannot be typed
        """
        results: list[Container] = []
        self._analyze(schema, "", kind, 0, results, kind)
        logger.debug("analysis of %s found %d containers", kind, len(results))
        return TypeCatalog(results, map_type=self.config.map_type)

    def _analyze(
        self,
        schema: SchemaNode,
        current: str,
        stack: str,
        level: int,
        results: list[Container],
        path: str,
    ) -> None:
        """
        Create the container for ``schema`` (if it is one) and recurse into its members.

        Args:
            schema: Root schema or sub schema
            current: Current key name, empty for the root
            stack: Concatenation of kind and all keys down to here, the container name
            level: Recursion level, 0 at the root
            results: Collected containers, not deduplicated
            path: Dotted property path for diagnostics
        """
        props = schema.property_map
        array_recurse_level: dict[str, int] = {}
        resolved: set[str] = set()

        # additionalProperties XOR properties
        additional = schema.additional_schema()
        if schema.type_name == "object":
            if additional is not None:
                if additional.properties is not None:
                    logger.debug("generating map struct for %s (under %s)", current, stack)
                    container = self._extract_container(
                        additional.property_map, stack, array_recurse_level, resolved, level, additional, path
                    )
                    results.append(container)
                elif additional.type_name == "object":
                    # Map of maps: the wrapper does not get a container
                    self._analyze(additional, current, stack, level, results, path)
                    return
                elif additional.type_name:
                    logger.warning("not generating type %s - using %s map", current, additional.type_name)
                    return
            else:
                if not props and schema.preserves_unknown_fields:
                    logger.debug("not generating type %s - using map", current)
                    return
                logger.debug("generating struct for %s (under %s)", current, stack)
                container = self._extract_container(props, stack, array_recurse_level, resolved, level, schema, path)
                results.append(container)

        if additional is not None:
            props = additional.property_map
        self._find_containers(props, stack, array_recurse_level, resolved, level, results, path)

    def _find_containers(
        self,
        props: dict[str, SchemaNode],
        stack: str,
        array_recurse_level: dict[str, int],
        resolved: set[str],
        level: int,
        results: list[Container],
        path: str,
    ) -> None:
        """
        Recurse into the members that need containers of their own.

        Container names are concatenated on the way down so they stay
        unique across the tree, and the level is bumped.
        """
        for key, value in props.items():
            if level == 0 and key in IGNORED_KEYS:
                logger.debug("not recursing into ignored %s", key)
                continue
            if key in resolved:
                logger.debug("not recursing into resolved %s", key)
                continue

            next_key = to_upper_camel_case(key)
            next_stack = f"{stack}{next_key}"
            next_path = f"{path}.{key}"
            value_type = value.type_name

            if value_type == "object":
                additional = value.additional_schema()
                if additional is not None and additional.type_name == "array" and isinstance(additional.items, ItemsSchema):
                    # Unpack the inner object from the array wrap
                    self._analyze(additional.items.schema, next_key, next_stack, level + 1, results, next_path)
                else:
                    self._analyze(value, next_key, next_stack, level + 1, results, next_path)

            elif value_type == "array":
                depth = array_recurse_level.get(key)
                if depth is None:
                    continue
                inner = value
                for _ in range(depth):
                    if isinstance(inner.items, ItemsSchema):
                        inner = inner.items.schema
                    elif isinstance(inner.items, ItemsArray):
                        raise UnsupportedSchemaShape("only a single schema is supported in array items", next_path)
                    else:
                        raise UnsupportedSchemaShape("could not recurse into array without items", next_path)
                self._analyze(inner, next_key, next_stack, level + 1, results, next_path)

            elif value_type == "":
                logger.debug("not recursing into untyped %s", key)

            elif value.enum:
                # Scalar enums are collected here, they have nothing to recurse into
                results.append(self._analyze_enum(value, next_stack, level + 1, next_path))

            else:
                logger.debug("not recursing into %s (%s is not a container)", key, value_type)

    def _analyze_enum(self, schema: SchemaNode, stack: str, level: int, path: str) -> Container:
        """Create an enum container whose variants are the enum literals, in order."""
        members = []
        kinds = set()
        for literal in schema.enum or ():
            if isinstance(literal, str):
                name = literal
                kinds.add(str)
            elif isinstance(literal, int) and not isinstance(literal, bool):
                if literal < 0:
                    raise UnsupportedSchemaShape("enum member cannot have signed discriminants", path)
                name = str(literal)
                kinds.add(int)
            else:
                raise UnsupportedSchemaShape(f"unsupported enum member {literal!r}, only strings and non-negative integers are handled", path)
            members.append(Member(name=name))

        if len(kinds) > 1:
            raise UnsupportedSchemaShape("enum members mix strings and integers", path)

        logger.debug("generating enum %s with %d variants", stack, len(members))
        return Container(name=stack, level=level, is_enum=True, members=members, docs=schema.description)

    def _extract_container(
        self,
        props: dict[str, SchemaNode],
        stack: str,
        array_recurse_level: dict[str, int],
        resolved: set[str],
        level: int,
        schema: SchemaNode,
        path: str,
    ) -> Container:
        """
        Fully populate a container with its members, without recursing.

        Args:
            props: The properties that become members
            stack: The container name
            array_recurse_level: Filled with the nesting depth of each array member
            resolved: Filled with the keys that must not be recursed into
            level: Recursion level of the container
            schema: The schema holding ``required`` and the description
            path: Dotted property path for diagnostics

        Returns:
            The container
        """
        required = set(schema.required_names)
        members = []
        for key, value in props.items():
            member_path = f"{path}.{key}"

            action = self.overrides.get_property_action(key, value) if self.overrides else None
            if action is not None:
                resolved.add(key)
                if action.is_omit:
                    logger.debug("omitting member %s", member_path)
                    continue
                type_ref = TypeRef.reference(action.type_name)
                logger.debug("replacing type of %s with %s", member_path, action.type_name)
            else:
                type_ref = self._member_type(key, value, stack, array_recurse_level, resolved, member_path)

            if key in required:
                logger.debug("with required member %s", key)
                members.append(Member(name=key, type_ref=type_ref, required=True, docs=value.description))
            else:
                logger.debug("with optional member %s", key)
                members.append(Member(name=key, type_ref=TypeRef.optional(type_ref), docs=value.description))

        return Container(name=stack, level=level, is_enum=False, members=members, docs=schema.description)

    def _member_type(
        self,
        key: str,
        value: SchemaNode,
        stack: str,
        array_recurse_level: dict[str, int],
        resolved: set[str],
        path: str,
    ) -> TypeRef:
        """Resolve the (unwrapped) type of a single member."""
        value_type = value.type_name
        child = TypeRef.reference(f"{stack}{to_upper_camel_case(key)}")

        if value_type == "object":
            if not self.config.disable_object_reference_detection and is_object_reference(value):
                resolved.add(key)
                return TypeRef.well_known(WellKnown.OBJECT_REFERENCE)
            if value.additional_properties is not None:
                map_value = self._resolve_additional_properties(value.additional_properties, stack, key, path)
                if map_value is not None:
                    return TypeRef.map_of(map_value)
            if not value.property_map and value.preserves_unknown_fields:
                return _opaque_map()
            return child

        if value_type in SCALAR_TYPES and value.enum:
            return child
        if value_type == "string":
            return _string_type(value)
        if value_type == "date":
            return _date_type(value, path)
        if value_type == "boolean":
            return TypeRef.primitive(Primitive.BOOL)
        if value_type == "number":
            return _number_type(value)
        if value_type == "integer":
            return _integer_type(value)

        if value_type == "array":
            if not self.config.disable_condition_detection and is_conditions(value):
                return TypeRef.list_of(TypeRef.well_known(WellKnown.CONDITION))
            # Recurse through repeated arrays until a concrete type, keeping track of the depth
            type_ref, depth = self._array_recurse_for_type(value, stack, key, 1, path)
            if depth is not None:
                array_recurse_level[key] = depth
            return type_ref

        if value_type == "":
            return self._untyped_type(value, path)

        raise UnsupportedSchemaShape(f"unknown type {value_type}", path)

    def _untyped_type(self, schema: SchemaNode, path: str) -> TypeRef:
        if schema.is_int_or_string:
            return TypeRef.well_known(WellKnown.INT_OR_STRING)
        if schema.preserves_unknown_fields:
            return TypeRef.opaque()
        if self.config.relaxed:
            logger.warning("using an opaque map for untyped value at %s", path)
            return _opaque_map()
        raise UnsupportedSchemaShape("unknown empty dict type", path)

    def _resolve_additional_properties(
        self,
        additional: SchemaOrBool,
        stack: str,
        key: str,
        path: str,
    ) -> TypeRef | None:
        """
        Resolve the value type of a map given by ``additionalProperties``.

        Returns:
            The value type, or None when ``additionalProperties`` is a boolean
            and the object is not a map
        """
        if isinstance(additional, AdditionalBool):
            return None
        if not isinstance(additional, AdditionalSchema):
            raise UnsupportedSchemaShape(f"unexpected additionalProperties {additional!r}", path)

        schema = additional.schema
        dict_type = schema.type_name
        child = TypeRef.reference(f"{stack}{to_upper_camel_case(key)}")

        if dict_type == "string":
            return _string_type(schema)
        if dict_type == "boolean":
            return TypeRef.primitive(Primitive.BOOL)
        if dict_type == "integer":
            return _integer_type(schema)
        if dict_type == "number":
            return _number_type(schema)

        if dict_type == "array":
            # Map of lists collapses to a map of the element type
            if isinstance(schema.items, ItemsArray):
                raise UnsupportedSchemaShape("only a single schema is supported in array items", path)
            if schema.items is None:
                raise UnsupportedSchemaShape("missing items in array type", path)
            element = schema.items.schema
            inner_type = element.type_name
            if inner_type == "string":
                return _string_type(element)
            if inner_type == "integer":
                return _integer_type(element)
            if inner_type == "date":
                return _date_type(element, path)
            if inner_type in ("object", ""):
                if inner_type == "" and element.is_int_or_string:
                    return TypeRef.well_known(WellKnown.INT_OR_STRING)
                # Inline structs under items, the key becomes the struct
                return child
            raise UnsupportedSchemaShape(f"unknown inner map value type {inner_type}", path)

        if dict_type == "object":
            if schema.properties is not None:
                return child
            if schema.additional_properties is not None:
                inner = self._resolve_additional_properties(schema.additional_properties, stack, key, path)
                if inner is not None:
                    return TypeRef.map_of(inner)
            if schema.preserves_unknown_fields:
                return TypeRef.opaque()
            return child

        if dict_type == "":
            if schema.properties is not None:
                return child
            return self._untyped_type(schema, path)

        raise UnsupportedSchemaShape(f"unknown map value type {dict_type}", path)

    def _array_recurse_for_type(
        self,
        value: SchemaNode,
        stack: str,
        key: str,
        level: int,
        path: str,
    ) -> tuple[TypeRef, int | None]:
        """
        Recurse into an array type to find its element type.

        Returns:
            The list type, and how many arrays deep the element sits (None
            when the element needs no container discovery)
        """
        items = value.items
        if items is None:
            raise UnsupportedSchemaShape("missing items in array type", path)
        if isinstance(items, ItemsArray):
            raise UnsupportedSchemaShape("only a single schema is supported in array items", path)
        if not isinstance(items, ItemsSchema):
            raise UnsupportedSchemaShape(f"unexpected items {items!r}", path)

        element = items.schema
        if element.type is None and element.preserves_unknown_fields:
            return TypeRef.list_of(_opaque_map()), level

        element_type = element.type_name
        if element_type == "object":
            if not self.config.disable_object_reference_detection and is_object_reference(element):
                return TypeRef.list_of(TypeRef.well_known(WellKnown.OBJECT_REFERENCE)), None
            # Same simplification to maps as for plain members
            if element.additional_properties is not None:
                map_value = self._resolve_additional_properties(element.additional_properties, stack, key, path)
                if map_value is not None:
                    return TypeRef.list_of(TypeRef.map_of(map_value)), level
            if not element.property_map and element.preserves_unknown_fields:
                return TypeRef.list_of(_opaque_map()), None
            return TypeRef.list_of(TypeRef.reference(f"{stack}{to_upper_camel_case(key)}")), level

        if element_type == "string":
            return TypeRef.list_of(_string_type(element)), level
        if element_type == "boolean":
            return TypeRef.list_of(TypeRef.primitive(Primitive.BOOL)), level
        if element_type == "date":
            return TypeRef.list_of(_date_type(element, path)), level
        if element_type == "number":
            return TypeRef.list_of(_number_type(element)), level
        if element_type == "integer":
            return TypeRef.list_of(_integer_type(element)), level

        if element_type == "array":
            if element.items is not None:
                inner, depth = self._array_recurse_for_type(element, stack, key, level + 1, path)
                return TypeRef.list_of(inner), depth
            if self.config.relaxed:
                # The whole member becomes one opaque map, the outer list is not kept
                logger.warning("empty inner array in %s key %s", stack, key)
                return _opaque_map(), level
            raise UnsupportedSchemaShape(f"empty inner array in {stack} key {key}", path)

        if element_type == "":
            return TypeRef.list_of(self._untyped_type(element, path)), level

        raise UnsupportedSchemaShape(f"unsupported recursive array type {element_type!r} for {key}", path)


def analyze(
    schema: SchemaNode,
    kind: str,
    config: AnalyzerConfig | None = None,
    overrides: Overrides | None = None,
) -> TypeCatalog:
    """
    Scan a schema for containers and members, recursing to find all of them.

    Args:
        schema: The root schema
        kind: The kind of the resource; every container name starts with it
        config: Analysis options
        overrides: Property rules

    Returns:
        The catalog of all containers
    """
    return SchemaAnalyzer(config, overrides).analyze(schema, kind)
