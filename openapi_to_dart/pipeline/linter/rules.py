"""
Spec-quality lint rules.

Each rule inspects one part of the schema index (a definition or one of its
properties) and yields human readable messages. Rules never touch resolution
state; severities are applied by the SpecLinter.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Iterator

from ..schema_ast.nodes import (
    ArrayNode,
    CompositionNode,
    DefinitionNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaIndex,
    SchemaNode,
    local_ref_name,
)
from .config import LintRuleId


def ref_target_exists(index: SchemaIndex, ref_path: str) -> bool:
    """Whether a local ``$ref`` designates a schema of the index."""
    name = local_ref_name(ref_path)
    return name is not None and name in index


class LintRule(ABC):
    """Base class for all lint rules.

    Subclasses override ``check_definition`` and/or ``check_property``.
    """

    rule_id: LintRuleId

    def check_definition(self, definition: DefinitionNode, index: SchemaIndex) -> Iterator[str]:
        """
        Inspect a named schema.

        Args:
            definition: The definition being linted
            index: The whole schema index (for reference lookups)

        Returns:
            Iterator of messages, one per finding
        """
        return iter(())

    def check_property(self, owner: str, obj: ObjectNode, prop: PropertyDef, index: SchemaIndex) -> Iterator[str]:
        """Inspect one property of an object schema owned by ``owner``."""
        return iter(())


class MissingTypeRule(LintRule):
    rule_id = LintRuleId.MISSING_TYPE

    def check_property(self, owner, obj, prop, index):
        if isinstance(prop.schema, PrimitiveNode) and prop.schema.type_name is None:
            yield (
                f'Property "{prop.name}" in schema "{owner}" has no type and is not a reference ($ref). '
                "It will be generated as dynamic."
            )


class SuspiciousIdFieldRule(LintRule):
    rule_id = LintRuleId.SUSPICIOUS_ID_FIELD

    def check_property(self, owner, obj, prop, index):
        name = prop.name
        if not (name == "id" or name.endswith("_id") or name.endswith("Id")):
            return
        if not prop.schema.nullable and name not in obj.required:
            yield (
                f'Property "{name}" in schema "{owner}" looks like an identifier but is neither required nor nullable. '
                "Consider adding it to required or marking it nullable: true."
            )


class TypeInconsistencyRule(LintRule):
    rule_id = LintRuleId.TYPE_INCONSISTENCY

    def check_property(self, owner, obj, prop, index):
        schema = prop.schema
        if not isinstance(schema, PrimitiveNode) or schema.format is None:
            return
        if schema.type_name == "integer":
            yield (
                f'Property "{prop.name}" in schema "{owner}" has type integer with format "{schema.format}". '
                "Formats are normally used with strings."
            )
        elif schema.type_name == "number" and schema.format not in ("float", "double"):
            yield (
                f'Property "{prop.name}" in schema "{owner}" has type number with format "{schema.format}". '
                "Only float or double are valid number formats."
            )


class ArrayWithoutItemsRule(LintRule):
    rule_id = LintRuleId.ARRAY_WITHOUT_ITEMS

    def check_property(self, owner, obj, prop, index):
        if isinstance(prop.schema, ArrayNode) and prop.schema.items is None:
            yield (
                f'Property "{prop.name}" in schema "{owner}" is an array without items. '
                "It will be generated as List<dynamic>."
            )


class EmptyEnumRule(LintRule):
    rule_id = LintRuleId.EMPTY_ENUM

    def check_definition(self, definition, index):
        if isinstance(definition.body, EnumNode) and not definition.body.values:
            yield f'Enum "{definition.name}" has no values.'


class EmptyObjectRule(LintRule):
    rule_id = LintRuleId.EMPTY_OBJECT

    def check_definition(self, definition, index):
        body = definition.body
        if isinstance(body, ObjectNode) and not body.properties and body.additional_properties in (None, False):
            yield f'Schema "{definition.name}" is an empty object (no properties and no additionalProperties).'


class MissingRefTargetRule(LintRule):
    """Reports every distinct unresolvable ``$ref`` reachable from a definition."""

    rule_id = LintRuleId.MISSING_REF_TARGET

    def check_definition(self, definition, index):
        seen: set[str] = set()
        for ref in self._walk_refs(definition.body):
            if ref.ref_path in seen or ref_target_exists(index, ref.ref_path):
                continue
            seen.add(ref.ref_path)
            yield (
                f'No schema found for reference "{ref.ref_path}" (in schema "{definition.name}"). '
                "Check that the schema is defined in the specification."
            )

    def _walk_refs(self, node: SchemaNode | None) -> Iterator[RefNode]:
        if isinstance(node, RefNode):
            yield node
        elif isinstance(node, ObjectNode):
            for prop in node.properties:
                yield from self._walk_refs(prop.schema)
            if isinstance(node.additional_properties, SchemaNode):
                yield from self._walk_refs(node.additional_properties)
        elif isinstance(node, ArrayNode):
            yield from self._walk_refs(node.items)
        elif isinstance(node, CompositionNode):
            for part in node.parts:
                yield from self._walk_refs(part)
            yield from self._walk_refs(node.own)


DEFAULT_RULES: tuple[type[LintRule], ...] = (
    EmptyEnumRule,
    EmptyObjectRule,
    MissingTypeRule,
    SuspiciousIdFieldRule,
    MissingRefTargetRule,
    TypeInconsistencyRule,
    ArrayWithoutItemsRule,
)
