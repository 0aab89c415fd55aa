"""
Name resolver for class, file and field names.

Converts schema keys to PascalCase class names (honoring per-schema
overrides), derives snake_case file names and keeps inline class / enum
names unique across the document.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...utils import to_field_name, to_pascal_case, to_snake_case
from ..config import CodeGeneratorConfig
from ..schema_ast.nodes import SchemaIndex


@dataclass
class NameMapping:
    """Result of name resolution."""

    # Schema name -> class name
    definition_names: dict[str, str] = field(default_factory=dict)

    # Schema name -> file name (without directory)
    file_names: dict[str, str] = field(default_factory=dict)

    # Every type name handed out so far (definitions and inline types)
    taken: set[str] = field(default_factory=set)


class NameResolver:
    """Resolves class names and handles collisions."""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the resolver.

        Args:
            config: Generator configuration (holds the per-schema overrides)
        """
        self.config = config
        self.mapping = NameMapping()

    def resolve_names(self, index: SchemaIndex) -> NameMapping:
        """
        Resolve the class and file name of every definition.

        Args:
            index: The parsed schema index

        Returns:
            NameMapping with resolved names
        """
        mapping = NameMapping()
        for name in index.names():
            override = self.config.override_for(name)
            class_name = override.class_name if override and override.class_name else to_pascal_case(name)
            mapping.definition_names[name] = class_name
            mapping.file_names[name] = f"{to_snake_case(name)}.dart"
            mapping.taken.add(class_name)
        self.mapping = mapping
        return mapping

    def class_name(self, schema_name: str) -> str:
        return self.mapping.definition_names.get(schema_name) or to_pascal_case(schema_name)

    def file_name(self, schema_name: str) -> str:
        return self.mapping.file_names.get(schema_name) or f"{to_snake_case(schema_name)}.dart"

    def field_name(self, schema_name: str, json_key: str) -> str:
        """Return the Dart field name of a property (override, else camelCase)."""
        override = self.config.override_for(schema_name)
        if override and json_key in override.field_names:
            return override.field_names[json_key]
        return to_field_name(json_key)

    def inline_name(self, owner: str, property_name: str, suffix: str = "") -> str:
        """Generate a unique name for an inline class or enum."""
        base_name = f"{owner}{to_pascal_case(property_name)}{suffix}"
        unique_name = base_name
        counter = 2
        while unique_name in self.mapping.taken:
            unique_name = f"{base_name}{counter}"
            counter += 1
        self.mapping.taken.add(unique_name)
        return unique_name
