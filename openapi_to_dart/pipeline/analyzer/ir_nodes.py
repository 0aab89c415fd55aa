"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed and resolved schemas, ready for the
emission backends. All references are resolved to model names and every
field carries its final type descriptor and nullability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeKind(Enum):
    """Kind of a resolved type."""

    INTEGER = "integer"  # int
    NUMBER = "number"  # num
    BOOLEAN = "boolean"  # bool
    STRING = "string"  # String
    DATE_TIME = "date_time"  # DateTime
    DYNAMIC = "dynamic"  # dynamic
    CLASS = "class"  # A generated class
    ENUM = "enum"  # A generated enum
    LIST = "list"  # List<T>
    MAP = "map"  # Map<String, T>


@dataclass
class TypeRef:
    """A resolved type descriptor."""

    kind: TypeKind = TypeKind.DYNAMIC

    # Model name for CLASS / ENUM
    name: str = ""

    # Item type for LIST, value type for MAP
    type_args: list[TypeRef] = field(default_factory=list)

    # Only meaningful for nested type arguments; field nullability lives on FieldDef
    nullable: bool = False

    # Target type forced by a schema override type mapping
    override: str | None = None

    @property
    def item_type(self) -> TypeRef:
        return self.type_args[0] if self.type_args else TypeRef(kind=TypeKind.DYNAMIC)

    def referenced_models(self) -> list[str]:
        """Names of CLASS / ENUM models reachable through this descriptor."""
        names = []
        if self.kind in (TypeKind.CLASS, TypeKind.ENUM) and self.override is None:
            names.append(self.name)
        for arg in self.type_args:
            names.extend(arg.referenced_models())
        return names


@dataclass
class FieldDef:
    """A field of a generated class."""

    name: str = ""  # Target (Dart) field name
    json_key: str = ""  # Original property key
    type_ref: TypeRef = field(default_factory=TypeRef)

    # Nullable only when the property is explicitly marked nullable
    nullable: bool = False

    # Whether the key is listed in ``required`` (OR-ed across allOf fragments)
    listed_required: bool = False

    description: str | None = None
    example: Any = None

    @property
    def is_required(self) -> bool:
        """Required in the generated constructor (present and not nullable)."""
        return not self.nullable

    def needs_json_key(self) -> bool:
        return self.json_key != self.name


@dataclass
class ModelDef:
    """Base of every model emitted to its own file."""

    name: str = ""  # Target type name
    schema_name: str = ""  # Originating schema key (identity used for hashing)
    description: str | None = None

    # Inline models rendered into the same file (enums/classes declared on properties)
    inline_models: list[ModelDef] = field(default_factory=list)

    # Schema names this model's file must import
    dependencies: list[str] = field(default_factory=list)


@dataclass
class ClassDef(ModelDef):
    """An object schema (possibly flattened from allOf fragments)."""

    fields: list[FieldDef] = field(default_factory=list)

    # allOf bases in flattening order
    composed_of: list[str] = field(default_factory=list)

    # Ancestors reached again while already being expanded, kept as named references
    cycle_refs: list[str] = field(default_factory=list)

    use_json_key: bool = False


@dataclass
class MapClassDef(ModelDef):
    """An object described only by additionalProperties."""

    value_type: TypeRef = field(default_factory=TypeRef)


@dataclass
class EnumMember:
    name: str = ""
    value: Any = None


@dataclass
class EnumDef(ModelDef):
    """An enumeration of literal values."""

    value_type: str = "string"
    members: list[EnumMember] = field(default_factory=list)


@dataclass
class TypedefDef(ModelDef):
    """A named alias of a primitive, array or other schema."""

    target: TypeRef = field(default_factory=TypeRef)


@dataclass
class IR:
    """Every model of one document, keyed by schema name, in declaration order.

    Assigning a name again supersedes the earlier model.
    """

    models: dict[str, ModelDef] = field(default_factory=dict)

    # Schema name -> target type name
    name_mapping: dict[str, str] = field(default_factory=dict)

    def add(self, model: ModelDef) -> None:
        self.models[model.schema_name] = model

    def get(self, schema_name: str) -> ModelDef | None:
        return self.models.get(schema_name)
