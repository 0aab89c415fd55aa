"""
Type mapper: converts a property schema into a resolved type descriptor.

Nullability is not decided here from the type: a field is nullable only when
its schema is explicitly marked nullable, whatever the required list says.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from ...utils import to_enum_value_name
from ..config import SchemaOverride
from ..schema_ast.nodes import (
    ArrayNode,
    CompositionNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaKind,
    SchemaNode,
)
from .ir_nodes import EnumDef, EnumMember, ModelDef, TypeKind, TypeRef
from .name_resolver import NameResolver
from .reference_resolver import ReferenceResolver

logger = logging.getLogger(__name__)

PRIMITIVE_KINDS = {
    "integer": TypeKind.INTEGER,
    "number": TypeKind.NUMBER,
    "boolean": TypeKind.BOOLEAN,
    "string": TypeKind.STRING,
}

DATE_FORMATS = {"date", "date-time"}


@dataclass
class MappingContext:
    """Where a type is being mapped."""

    schema_name: str  # Schema owning the file (override lookups, diagnostics)
    owner: str  # Class name used to prefix inline type names
    property_name: str = ""
    override: SchemaOverride | None = None

    # Inline enums / classes created while mapping, rendered in the owner's file
    inline_models: list[ModelDef] = field(default_factory=list)


def schema_type_name(node: SchemaNode) -> str | None:
    """The schema ``type`` a node was declared with, if any."""
    if isinstance(node, PrimitiveNode):
        return node.type_name
    if isinstance(node, EnumNode):
        return node.inferred_type
    if isinstance(node, ArrayNode):
        return "array"
    if isinstance(node, ObjectNode):
        return "object"
    return None


def build_enum_members(node: EnumNode) -> list[EnumMember]:
    """
    Build enum members with display names resolved by priority.

    ``x-enumNames``, then ``x-enum-varnames``, then the sanitized literal.
    Non-string literals without a display name are named ``value{i}``.
    Duplicate names get their index appended.
    """
    members = []
    seen: set[str] = set()
    for i, value in enumerate(node.values):
        display = node.display_names[i] if node.display_names else ""
        if display:
            name = to_enum_value_name(display)
        elif isinstance(value, str):
            name = to_enum_value_name(value)
        else:
            name = f"value{i}"
        if name in seen:
            name = f"{name}{i}"
        seen.add(name)
        members.append(EnumMember(name=name, value=value))
    return members


class TypeMapper:
    """Maps schema nodes to TypeRef descriptors."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        names: NameResolver,
        build_inline_class: Callable[[str, SchemaNode, MappingContext], ModelDef] | None = None,
    ):
        """
        Initialize the mapper.

        Args:
            resolver: Reference resolver over the schema index
            names: Name resolver (class names and inline name allocation)
            build_inline_class: Hook building a class for an inline object
                schema; inline objects map to ``Map<String, dynamic>`` without it
        """
        self.resolver = resolver
        self.names = names
        self.build_inline_class = build_inline_class

    def map_field(self, node: SchemaNode, context: MappingContext) -> tuple[TypeRef, bool]:
        """
        Map a property schema.

        Args:
            node: The property schema
            context: Mapping context (owner, property, override)

        Returns:
            Tuple of the type descriptor and the nullability flag

        Raises:
            UnresolvedReference: If the property references an unknown schema
        """
        override = self._type_override(node, context)
        type_ref = override if override is not None else self.map_type(node, context)
        return type_ref, node.nullable

    def map_type(self, node: SchemaNode | None, context: MappingContext) -> TypeRef:
        """Map a schema node to a type descriptor (field nullability excluded)."""
        if node is None:
            return TypeRef(kind=TypeKind.DYNAMIC)

        if isinstance(node, RefNode):
            return self._map_ref(node, context)

        if isinstance(node, EnumNode):
            return self._map_inline_enum(node, context)

        if isinstance(node, PrimitiveNode):
            return self._map_primitive(node)

        if isinstance(node, ArrayNode):
            item_context = MappingContext(
                schema_name=context.schema_name,
                owner=context.owner,
                property_name=f"{context.property_name}_item",
                override=context.override,
                inline_models=context.inline_models,
            )
            if node.items is None:
                item = TypeRef(kind=TypeKind.DYNAMIC)
            else:
                item = self.map_type(node.items, item_context)
                item.nullable = node.items.nullable
            return TypeRef(kind=TypeKind.LIST, type_args=[item])

        if isinstance(node, ObjectNode):
            return self._map_object(node, context)

        if isinstance(node, CompositionNode):
            return self._map_composition(node, context)

        return TypeRef(kind=TypeKind.DYNAMIC)

    def _type_override(self, node: SchemaNode, context: MappingContext) -> TypeRef | None:
        if context.override is None or not context.override.type_mapping:
            return None
        type_name = schema_type_name(node)
        if type_name is None or type_name not in context.override.type_mapping:
            return None
        target = context.override.type_mapping[type_name]
        return TypeRef(kind=TypeKind.DYNAMIC, name=target, override=target)

    def _map_primitive(self, node: PrimitiveNode) -> TypeRef:
        if node.type_name == "string" and node.format in DATE_FORMATS:
            return TypeRef(kind=TypeKind.DATE_TIME)
        return TypeRef(kind=PRIMITIVE_KINDS.get(node.type_name or "", TypeKind.DYNAMIC))

    def _map_ref(self, node: RefNode, context: MappingContext) -> TypeRef:
        definition = self.resolver.resolve(node, context.schema_name)
        body = definition.body

        if isinstance(body, EnumNode) and body.values:
            return TypeRef(kind=TypeKind.ENUM, name=self.names.class_name(definition.name))

        # Aliases of primitives and arrays are inlined; the typedef is still emitted
        if isinstance(body, (PrimitiveNode, ArrayNode, RefNode)):
            with self.resolver.expanding(definition.name) as entered:
                if entered:
                    return self.map_type(body, context)
            return TypeRef(kind=TypeKind.DYNAMIC)

        return TypeRef(kind=TypeKind.CLASS, name=self.names.class_name(definition.name))

    def _map_inline_enum(self, node: EnumNode, context: MappingContext) -> TypeRef:
        if not node.values:
            return TypeRef(kind=PRIMITIVE_KINDS.get(node.inferred_type, TypeKind.DYNAMIC))

        name = self.names.inline_name(context.owner, context.property_name)
        context.inline_models.append(
            EnumDef(
                name=name,
                schema_name=context.schema_name,
                description=node.description,
                value_type=node.inferred_type,
                members=build_enum_members(node),
            )
        )
        logger.debug("Inline enum %s for %s.%s", name, context.owner, context.property_name)
        return TypeRef(kind=TypeKind.ENUM, name=name)

    def _map_object(self, node: ObjectNode, context: MappingContext) -> TypeRef:
        if node.is_map_only:
            if isinstance(node.additional_properties, SchemaNode):
                value = self.map_type(node.additional_properties, context)
                value.nullable = node.additional_properties.nullable
            else:
                value = TypeRef(kind=TypeKind.DYNAMIC)
            return TypeRef(kind=TypeKind.MAP, type_args=[value])

        if node.properties and self.build_inline_class is not None:
            return self._inline_class(node, context)

        return TypeRef(kind=TypeKind.MAP, type_args=[TypeRef(kind=TypeKind.DYNAMIC)])

    def _map_composition(self, node: CompositionNode, context: MappingContext) -> TypeRef:
        # allOf: [$ref] is the usual way to annotate a reference
        if node.operator == SchemaKind.ALL_OF and len(node.parts) == 1 and node.own is None:
            return self.map_type(node.parts[0], context)

        if node.operator == SchemaKind.ALL_OF and self.build_inline_class is not None:
            return self._inline_class(node, context)

        # Inline alternatives cannot be named; they stay loosely typed
        return TypeRef(kind=TypeKind.DYNAMIC)

    def _inline_class(self, node: SchemaNode, context: MappingContext) -> TypeRef:
        name = self.names.inline_name(context.owner, context.property_name)
        model = self.build_inline_class(name, node, context)
        context.inline_models.append(model)
        logger.debug("Inline class %s for %s.%s", name, context.owner, context.property_name)
        return TypeRef(kind=TypeKind.CLASS, name=name)
