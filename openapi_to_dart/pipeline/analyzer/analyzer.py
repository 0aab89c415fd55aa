"""
Schema analyzer that builds the class models.

Phase 2 of the pipeline: resolve references, flatten compositions, map
property types and build one model per named schema, in declaration order,
ready for the emission backends.
"""

from __future__ import annotations

import logging

from ..config import CodeGeneratorConfig
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
    SchemaKind,
    SchemaNode,
)
from .composition import CompositionEngine, FlattenResult, MergedProperty
from .ir_nodes import IR, ClassDef, EnumDef, FieldDef, MapClassDef, ModelDef, TypedefDef, TypeKind, TypeRef
from .name_resolver import NameResolver
from .reference_resolver import ReferenceResolver
from .type_mapper import MappingContext, TypeMapper, build_enum_members

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Analyzes the schema index and builds the IR."""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the analyzer.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.name_resolver = NameResolver(config)

        # Will be set during analysis
        self.index: SchemaIndex | None = None
        self.resolver: ReferenceResolver | None = None
        self.composition: CompositionEngine | None = None
        self.type_mapper: TypeMapper | None = None

    def analyze(self, index: SchemaIndex) -> IR:
        """
        Analyze the index and build the IR.

        Args:
            index: The parsed schema index

        Returns:
            IR with one model per named schema

        Raises:
            UnresolvedReference: If any reference designates an unknown schema
        """
        self.index = index
        mapping = self.name_resolver.resolve_names(index)
        self.resolver = ReferenceResolver(index)
        self.composition = CompositionEngine(self.resolver, self.name_resolver)
        self.type_mapper = TypeMapper(self.resolver, self.name_resolver, self._build_inline_class)

        ir = IR(name_mapping=dict(mapping.definition_names))
        for definition in index:
            ir.add(self.analyze_definition(definition))
        return ir

    def analyze_definition(self, definition: DefinitionNode) -> ModelDef:
        """Build the model of one named schema."""
        name = definition.name
        class_name = self.name_resolver.class_name(name)
        body = definition.body

        if isinstance(body, EnumNode):
            model = self._analyze_enum(definition, body, class_name)
        elif isinstance(body, CompositionNode) and body.operator == SchemaKind.ALL_OF:
            flattened = self.composition.flatten_all_of(name, body)
            model = self._class_from_flattened(name, class_name, flattened, name)
        elif isinstance(body, CompositionNode):
            model = self.composition.synthesize_union(name, class_name, body)
        elif isinstance(body, ObjectNode) and body.is_map_only:
            model = self._analyze_map_class(definition, body, class_name)
        elif isinstance(body, ObjectNode):
            flattened = FlattenResult(description=body.description)
            flattened.merge_object(body, name)
            model = self._class_from_flattened(name, class_name, flattened, name)
        else:
            model = self._analyze_alias(definition, body, class_name)

        if model.description is None:
            model.description = body.description
        model.dependencies = self._collect_dependencies(model)
        logger.debug("Analyzed %s as %s %s", name, type(model).__name__, model.name)
        return model

    def _analyze_enum(self, definition: DefinitionNode, node: EnumNode, class_name: str) -> ModelDef:
        if not node.values:
            # Nothing to enumerate: an empty class keeps references compiling
            return ClassDef(name=class_name, schema_name=definition.name)
        return EnumDef(
            name=class_name,
            schema_name=definition.name,
            value_type=node.inferred_type,
            members=build_enum_members(node),
        )

    def _analyze_map_class(self, definition: DefinitionNode, node: ObjectNode, class_name: str) -> MapClassDef:
        context = self._context(definition.name, class_name, "value")
        if isinstance(node.additional_properties, SchemaNode):
            value_type = self.type_mapper.map_type(node.additional_properties, context)
        else:
            value_type = TypeRef(kind=TypeKind.DYNAMIC)
        return MapClassDef(
            name=class_name,
            schema_name=definition.name,
            value_type=value_type,
            inline_models=context.inline_models,
        )

    def _analyze_alias(self, definition: DefinitionNode, node: SchemaNode, class_name: str) -> ModelDef:
        if isinstance(node, (PrimitiveNode, ArrayNode, RefNode)):
            context = self._context(definition.name, class_name, "")
            with self.resolver.expanding(definition.name):
                target = self.type_mapper.map_type(node, context)
            return TypedefDef(
                name=class_name,
                schema_name=definition.name,
                target=target,
                inline_models=context.inline_models,
            )
        return ClassDef(name=class_name, schema_name=definition.name)

    def _class_from_flattened(self, schema_name: str, class_name: str, flattened: FlattenResult, owner_schema: str) -> ClassDef:
        override = self.config.override_for(owner_schema)
        use_json_key = self.config.use_json_key
        if override is not None and override.use_json_key is not None:
            use_json_key = override.use_json_key

        inline_models: list[ModelDef] = []
        fields = []
        used_names: set[str] = set()
        for merged in flattened.properties.values():
            field_def = self._analyze_property(merged, owner_schema, class_name, inline_models)
            if field_def.name in used_names:
                field_def.name = f"{field_def.name}{len(fields)}"
            used_names.add(field_def.name)
            fields.append(field_def)

        return ClassDef(
            name=class_name,
            schema_name=schema_name,
            description=flattened.description,
            fields=fields,
            composed_of=[self.name_resolver.class_name(base) for base in flattened.bases],
            cycle_refs=[self.name_resolver.class_name(ref) for ref in flattened.cycle_refs],
            use_json_key=use_json_key,
            inline_models=inline_models,
        )

    def _analyze_property(
        self,
        merged: MergedProperty,
        owner_schema: str,
        class_name: str,
        inline_models: list[ModelDef],
    ) -> FieldDef:
        prop: PropertyDef = merged.prop
        context = self._context(owner_schema, class_name, prop.name)
        context.inline_models = inline_models
        type_ref, nullable = self.type_mapper.map_field(prop.schema, context)
        return FieldDef(
            name=self.name_resolver.field_name(owner_schema, prop.name),
            json_key=prop.name,
            type_ref=type_ref,
            nullable=nullable,
            listed_required=merged.listed_required,
            description=prop.schema.description,
            example=prop.schema.example,
        )

    def _build_inline_class(self, name: str, node: SchemaNode, context: MappingContext) -> ModelDef:
        """Build a class for an inline object or allOf property schema."""
        if isinstance(node, CompositionNode):
            flattened = self.composition.flatten_all_of(name, node)
        else:
            flattened = FlattenResult(description=node.description)
            flattened.merge_object(node, context.schema_name)

        model = self._class_from_flattened(context.schema_name, name, flattened, context.schema_name)
        # Nested inline types are rendered in the same file as their owner
        context.inline_models.extend(model.inline_models)
        model.inline_models = []
        return model

    def _context(self, schema_name: str, owner: str, property_name: str) -> MappingContext:
        return MappingContext(
            schema_name=schema_name,
            owner=owner,
            property_name=property_name,
            override=self.config.override_for(schema_name),
        )

    def _collect_dependencies(self, model: ModelDef) -> list[str]:
        """Schema names of the other models this model's file references."""
        type_names: list[str] = []
        for item in [model, *model.inline_models]:
            type_names.extend(self._referenced_type_names(item))

        inline_names = {inline.name for inline in model.inline_models}
        by_class = {class_name: schema for schema, class_name in self.name_resolver.mapping.definition_names.items()}

        dependencies = set(model.dependencies)
        for type_name in type_names:
            if type_name in inline_names:
                continue
            schema = by_class.get(type_name)
            if schema is not None and schema != model.schema_name:
                dependencies.add(schema)
        return sorted(dependencies)

    def _referenced_type_names(self, model: ModelDef) -> list[str]:
        if isinstance(model, ClassDef):
            return [name for field_def in model.fields for name in field_def.type_ref.referenced_models()]
        if isinstance(model, MapClassDef):
            return model.value_type.referenced_models()
        if isinstance(model, TypedefDef):
            return model.target.referenced_models()
        return []
