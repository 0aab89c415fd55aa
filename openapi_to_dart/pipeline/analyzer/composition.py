"""
Composition engine.

Flattens allOf groups into a single ordered property set and turns
oneOf / anyOf groups into either a discriminated union or a loosely typed
wrapper.

Flattening is depth-first and left-to-right. A property seen again in a
later fragment keeps its position, takes the later schema and ORs its
required flag. A base reached through several paths (a diamond) contributes
its properties once. A base that is already being expanded (a cycle) is not
expanded again and is kept as a named reference instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...utils import to_field_name
from ..schema_ast.nodes import (
    CompositionNode,
    DefinitionNode,
    EnumNode,
    ObjectNode,
    PropertyDef,
    RefNode,
    SchemaKind,
    SchemaNode,
)
from .name_resolver import NameResolver
from .reference_resolver import ReferenceResolver
from .unions import UnionModel, UnionVariant, WrapperModel

logger = logging.getLogger(__name__)

# Members of a generated union class that a variant field must not shadow
UNION_MEMBERS = {"tag", "when", "toJson", "toString", "hashCode", "runtimeType"}


@dataclass
class MergedProperty:
    """A property after flattening."""

    prop: PropertyDef
    listed_required: bool = False

    # Schema name of the fragment that last defined the property
    origin: str = ""


@dataclass
class FlattenResult:
    """Ordered properties of a flattened allOf group."""

    properties: dict[str, MergedProperty] = field(default_factory=dict)

    # Bases expanded into this result, in flattening order
    bases: list[str] = field(default_factory=list)

    # Ancestors reached again while being expanded
    cycle_refs: list[str] = field(default_factory=list)

    # First description found among the fragments
    description: str | None = None

    def merge_object(self, obj: ObjectNode, origin: str) -> None:
        """Merge one object fragment into the result."""
        for prop in obj.properties:
            listed = prop.name in obj.required
            existing = self.properties.get(prop.name)
            if existing is None:
                self.properties[prop.name] = MergedProperty(prop=prop, listed_required=listed, origin=origin)
                continue
            logger.debug("Property %s redefined by %s (was from %s)", prop.name, origin, existing.origin)
            existing.prop = prop
            existing.listed_required = existing.listed_required or listed
            existing.origin = origin

        # A required entry may name a property declared by an earlier fragment
        for name in obj.required:
            if name in self.properties:
                self.properties[name].listed_required = True

        if self.description is None and obj.description:
            self.description = obj.description


class CompositionEngine:
    """Flattens allOf groups and synthesizes unions."""

    def __init__(self, resolver: ReferenceResolver, names: NameResolver):
        """
        Initialize the engine.

        Args:
            resolver: Reference resolver (owns the visited-name stack)
            names: Name resolver for variant class names
        """
        self.resolver = resolver
        self.names = names

    # allOf

    def flatten_all_of(self, schema_name: str, node: CompositionNode) -> FlattenResult:
        """
        Flatten an allOf group.

        Args:
            schema_name: Name of the schema being flattened
            node: The allOf node

        Returns:
            FlattenResult with the merged, ordered properties

        Raises:
            UnresolvedReference: If a fragment references an unknown schema
        """
        result = FlattenResult(description=node.description)
        expanded: set[str] = set()
        with self.resolver.expanding(schema_name):
            self._flatten_group(node, schema_name, result, expanded)
        logger.debug(
            "Flattened %s: %d propert%s from bases [%s]",
            schema_name,
            len(result.properties),
            "y" if len(result.properties) == 1 else "ies",
            ", ".join(result.bases),
        )
        return result

    def flatten_definition(self, definition: DefinitionNode) -> FlattenResult:
        """Flattened properties of any object-like definition (empty for other kinds)."""
        body = definition.body
        if isinstance(body, CompositionNode) and body.operator == SchemaKind.ALL_OF:
            return self.flatten_all_of(definition.name, body)
        result = FlattenResult(description=body.description)
        if isinstance(body, ObjectNode):
            result.merge_object(body, definition.name)
        return result

    def _flatten_group(self, node: CompositionNode, origin: str, result: FlattenResult, expanded: set[str]) -> None:
        for part in node.parts:
            self._flatten_fragment(part, origin, result, expanded)
        # Properties declared next to allOf come last
        if node.own is not None:
            result.merge_object(node.own, origin)

    def _flatten_fragment(self, part: SchemaNode, origin: str, result: FlattenResult, expanded: set[str]) -> None:
        if isinstance(part, RefNode):
            self._flatten_ref(part, origin, result, expanded)
        elif isinstance(part, ObjectNode):
            result.merge_object(part, origin)
        elif isinstance(part, CompositionNode) and part.operator == SchemaKind.ALL_OF:
            self._flatten_group(part, origin, result, expanded)
        else:
            logger.debug("Skipping %s fragment of %s (contributes no properties)", part.kind.value, origin)

    def _flatten_ref(self, ref: RefNode, origin: str, result: FlattenResult, expanded: set[str]) -> None:
        definition = self.resolver.resolve(ref, origin)
        target = definition.name

        if self.resolver.is_expanding(target):
            logger.debug("allOf cycle: %s reached again from %s, kept as a reference", target, origin)
            if target not in result.cycle_refs:
                result.cycle_refs.append(target)
            return

        if target in expanded:
            logger.debug("allOf diamond: %s already merged, skipped from %s", target, origin)
            return
        expanded.add(target)
        result.bases.append(target)

        with self.resolver.expanding(target):
            logger.debug("Flattening base %s into %s", target, origin)
            self._flatten_fragment(definition.body, target, result, expanded)

    # oneOf / anyOf

    def synthesize_union(self, schema_name: str, class_name: str, node: CompositionNode) -> UnionModel | WrapperModel:
        """
        Build a union for a oneOf / anyOf group.

        A discriminated union is built when a tag can be found for every
        alternative (explicit mapping, explicit discriminator, or a property
        holding a single literal in every alternative). Otherwise a wrapper
        is built.

        Raises:
            UnresolvedReference: If an alternative references an unknown schema
        """
        with self.resolver.expanding(schema_name):
            found = self._discriminated_variants(schema_name, node)

        if found is not None:
            discriminator, variants = found
            logger.debug(
                "Union %s discriminated by %s: %s",
                class_name,
                discriminator,
                ", ".join(f"{v.tag}={v.class_name}" for v in variants),
            )
            return UnionModel(
                name=class_name,
                schema_name=schema_name,
                description=node.description,
                discriminator=discriminator,
                variants=variants,
                operator=node.operator,
                dependencies=sorted({v.schema_name for v in variants} - {schema_name}),
            )

        logger.debug("No discriminator for %s, generating a wrapper", class_name)
        alternatives = [
            self.names.class_name(part.target_name) if isinstance(part, RefNode) else part.kind.value for part in node.parts
        ]
        return WrapperModel(
            name=class_name,
            schema_name=schema_name,
            description=node.description,
            operator=node.operator,
            alternatives=alternatives,
        )

    def _discriminated_variants(
        self, schema_name: str, node: CompositionNode
    ) -> tuple[str, list[UnionVariant]] | None:
        discriminator = node.discriminator

        if discriminator is not None and discriminator.mapping:
            pairs = [(tag, self.resolver.resolve_mapping_target(ref, schema_name).name) for tag, ref in discriminator.mapping]
            return self._build_variants(schema_name, discriminator.property_name, pairs)

        if not node.parts or not all(isinstance(part, RefNode) for part in node.parts):
            if discriminator is not None:
                logger.warning("Union %s declares a discriminator but has inline alternatives", schema_name)
            return None

        targets = [self.resolver.resolve(part, schema_name).name for part in node.parts]

        if discriminator is not None:
            # Implicit mapping: the single literal of the variant, else the schema name
            pairs = [(self._literal_tag(target, discriminator.property_name) or target, target) for target in targets]
            return self._build_variants(schema_name, discriminator.property_name, pairs)

        property_name = self._find_tag_property(targets)
        if property_name is None:
            return None
        pairs = [(self._literal_tag(target, property_name), target) for target in targets]
        return self._build_variants(schema_name, property_name, pairs)

    def _build_variants(
        self, schema_name: str, property_name: str, pairs: list[tuple[str, str]]
    ) -> tuple[str, list[UnionVariant]] | None:
        tags = [tag for tag, _ in pairs]
        if len(set(tags)) != len(tags):
            logger.warning("Union %s has duplicate variant tags (%s), generating a wrapper", schema_name, ", ".join(tags))
            return None

        non_classes = [target for _, target in pairs if not self._is_class_schema(target)]
        if non_classes:
            logger.warning(
                "Union %s has variants that are not object schemas (%s), generating a wrapper",
                schema_name,
                ", ".join(non_classes),
            )
            return None

        variants = []
        used: set[str] = set()
        for tag, target in pairs:
            class_name = self.names.class_name(target)
            field_name = to_field_name(class_name)
            if field_name in UNION_MEMBERS:
                field_name = f"{field_name}Value"
            if field_name in used:
                field_name = to_field_name(f"{class_name}_{tag}")
            used.add(field_name)
            variants.append(UnionVariant(tag=tag, class_name=class_name, schema_name=target, field_name=field_name))
        return property_name, variants

    def _is_class_schema(self, target: str) -> bool:
        """Whether a schema is generated as a class with fromJson / toJson over a JSON object."""
        body = self.resolver.index.get(target).body
        if isinstance(body, CompositionNode):
            return body.operator == SchemaKind.ALL_OF
        return isinstance(body, ObjectNode) and not body.is_map_only

    def _find_tag_property(self, targets: list[str]) -> str | None:
        """Find a property holding a distinct single literal in every alternative."""
        flattened = [self._variant_properties(target) for target in targets]
        if not flattened or not flattened[0]:
            return None

        for candidate in flattened[0]:
            tags = [self._single_literal(props.get(candidate)) for props in flattened]
            if all(tag is not None for tag in tags) and len(set(tags)) == len(tags):
                return candidate
        return None

    def _literal_tag(self, target: str, property_name: str) -> str | None:
        return self._single_literal(self._variant_properties(target).get(property_name))

    def _variant_properties(self, target: str) -> dict[str, SchemaNode]:
        definition = self.resolver.index.get(target)
        if definition is None or self.resolver.is_expanding(target):
            return {}
        result = self.flatten_definition(definition)
        return {name: merged.prop.schema for name, merged in result.properties.items()}

    def _single_literal(self, node: SchemaNode | None) -> str | None:
        """The tag carried by an enum / const property with exactly one string literal."""
        if isinstance(node, RefNode):
            definition = self.resolver.try_resolve(node)
            node = definition.body if definition is not None else None
        if isinstance(node, EnumNode) and len(node.values) == 1 and isinstance(node.values[0], str):
            return node.values[0]
        return None
