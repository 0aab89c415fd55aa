"""
AST node definitions for API description schemas.

These nodes are the dialect-agnostic form of the raw document: Swagger 2
``definitions`` and OpenAPI 3 ``components.schemas`` both parse into the same
shapes. Nodes are built once per run and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


LOCAL_REF_PREFIXES = ("#/definitions/", "#/components/schemas/")


def local_ref_name(ref_path: str) -> str | None:
    """Return the schema name designated by a local pointer, or None for other pointers."""
    for prefix in LOCAL_REF_PREFIXES:
        if ref_path.startswith(prefix):
            # JSON pointer escapes: ``~1`` -> ``/``, ``~0`` -> ``~``
            return ref_path[len(prefix) :].replace("~1", "/").replace("~0", "~")
    return None


class SchemaKind(str, Enum):
    """Kind tag of a raw schema node."""

    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    ENUM = "enum"
    REFERENCE = "reference"
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"


class Dialect(str, Enum):
    """Supported description dialects."""

    SWAGGER_2 = "swagger2"
    OPENAPI_3 = "openapi3"


@dataclass(frozen=True)
class SchemaNode:
    """Base class for all AST nodes."""

    # Location in the document (for error messages)
    source_path: str = ""

    # Explicit ``nullable: true`` (or ``x-nullable`` / a ``null`` type member)
    nullable: bool = False

    description: str | None = None
    example: Any = None

    # Raw x-* extensions
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> SchemaKind:
        raise NotImplementedError


@dataclass(frozen=True)
class PrimitiveNode(SchemaNode):
    """A primitive type. ``type_name`` is None when the schema declares no type."""

    type_name: str | None = None  # "string", "integer", "number", "boolean"
    format: str | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.PRIMITIVE


@dataclass(frozen=True)
class EnumNode(SchemaNode):
    """An enumeration of literal values."""

    values: tuple[Any, ...] = ()
    inferred_type: str = "string"

    # Display names from x-enumNames / x-enum-varnames, aligned with ``values``
    display_names: tuple[str, ...] | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ENUM


@dataclass(frozen=True)
class RefNode(SchemaNode):
    """A ``$ref`` pointer to a named schema (unresolved)."""

    ref_path: str = ""

    @property
    def target_name(self) -> str:
        """The schema name designated by the pointer (last path segment for non-local ones)."""
        name = local_ref_name(self.ref_path)
        return name if name is not None else self.ref_path.rstrip("/").split("/")[-1]

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.REFERENCE


@dataclass(frozen=True)
class ArrayNode(SchemaNode):
    """An array with a homogeneous item schema (None when ``items`` is absent)."""

    items: SchemaNode | None = None

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.ARRAY


@dataclass(frozen=True)
class PropertyDef:
    """A named property of an object schema."""

    name: str = ""
    schema: SchemaNode = field(default_factory=SchemaNode)
    source_path: str = ""


@dataclass(frozen=True)
class ObjectNode(SchemaNode):
    """An object with its properties in name order.

    ``additional_properties`` is a schema node, ``True`` for untyped extra
    keys, or None / ``False`` when extra keys are not described.
    """

    properties: tuple[PropertyDef, ...] = ()
    required: frozenset[str] = frozenset()
    additional_properties: SchemaNode | bool | None = None

    def get_property(self, name: str) -> PropertyDef | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    @property
    def is_map_only(self) -> bool:
        """True for objects described only by additionalProperties."""
        return not self.properties and self.additional_properties not in (None, False)

    @property
    def kind(self) -> SchemaKind:
        return SchemaKind.OBJECT


@dataclass(frozen=True)
class Discriminator:
    """Discriminator descriptor of a oneOf/anyOf group."""

    property_name: str = "type"

    # Explicit tag -> $ref mapping, sorted by tag
    mapping: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class CompositionNode(SchemaNode):
    """An allOf / oneOf / anyOf group.

    Sibling ``properties`` declared next to ``allOf`` are kept as ``own`` and
    flattened as the last fragment.
    """

    operator: SchemaKind = SchemaKind.ALL_OF
    parts: tuple[SchemaNode, ...] = ()
    discriminator: Discriminator | None = None
    own: ObjectNode | None = None

    @property
    def kind(self) -> SchemaKind:
        return self.operator


@dataclass(frozen=True)
class DefinitionNode:
    """A named schema of the document."""

    name: str = ""
    body: SchemaNode = field(default_factory=SchemaNode)

    # The raw mapping the body was parsed from (hashed by the incremental cache)
    raw: Mapping[str, Any] = field(default_factory=dict)
    source_path: str = ""


@dataclass
class SchemaIndex:
    """Name -> definition index over one parsed document."""

    dialect: Dialect = Dialect.OPENAPI_3
    definitions: dict[str, DefinitionNode] = field(default_factory=dict)

    # The full document, for reference
    document: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str) -> DefinitionNode | None:
        return self.definitions.get(name)

    def names(self) -> list[str]:
        """Schema names in declaration order."""
        return list(self.definitions)

    def __contains__(self, name: object) -> bool:
        return name in self.definitions

    def __iter__(self) -> Iterator[DefinitionNode]:
        return iter(self.definitions.values())

    def __len__(self) -> int:
        return len(self.definitions)
