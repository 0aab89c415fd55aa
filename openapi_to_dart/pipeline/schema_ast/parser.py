"""
API description parser that builds the schema index.

Phase 1 of the pipeline: parse a Swagger 2 / OpenAPI 3 document into
dialect-agnostic nodes without resolving references.
"""

from __future__ import annotations

from typing import Any

from ..errors import SpecLoadError
from .nodes import (
    ArrayNode,
    CompositionNode,
    DefinitionNode,
    Dialect,
    Discriminator,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaIndex,
    SchemaKind,
    SchemaNode,
)


def detect_dialect(document: dict[str, Any]) -> Dialect:
    """Detect the description dialect from the top-level version key."""
    if "swagger" in document:
        return Dialect.SWAGGER_2
    if "openapi" in document:
        return Dialect.OPENAPI_3
    raise SpecLoadError("Unable to detect the specification version (expected a 'swagger' or 'openapi' key).")


class SchemaParser:
    """Parses an API description into a SchemaIndex."""

    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean"}

    def parse(self, document: dict[str, Any]) -> SchemaIndex:
        """
        Parse a document into a schema index.

        Args:
            document: The decoded Swagger/OpenAPI document

        Returns:
            SchemaIndex with one definition per named schema, in declaration order

        Raises:
            SpecLoadError: If the dialect is unknown or the document has no schemas
        """
        dialect = detect_dialect(document)
        schemas, prefix = self._extract_schemas(document, dialect)

        if not schemas:
            raise SpecLoadError("No schemas found in the specification (definitions/components.schemas).")

        index = SchemaIndex(dialect=dialect, document=document)
        for name, raw in schemas.items():
            raw = raw if isinstance(raw, dict) else {}
            path = f"{prefix}/{name}"
            index.definitions[name] = DefinitionNode(
                name=name,
                body=self.parse_node(raw, path),
                raw=raw,
                source_path=path,
            )
        return index

    def _extract_schemas(self, document: dict[str, Any], dialect: Dialect) -> tuple[dict[str, Any], str]:
        if dialect == Dialect.SWAGGER_2:
            definitions = document.get("definitions")
            return (definitions if isinstance(definitions, dict) else {}), "#/definitions"

        components = document.get("components")
        schemas = components.get("schemas") if isinstance(components, dict) else None
        return (schemas if isinstance(schemas, dict) else {}), "#/components/schemas"

    def parse_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """
        Parse a schema mapping recursively.

        Args:
            schema: The raw schema mapping
            path: Current path in the document (for error messages)

        Returns:
            Appropriate SchemaNode subclass
        """
        common = self._extract_common(schema, path)

        # $ref siblings are ignored except nullable/description
        if "$ref" in schema:
            return RefNode(ref_path=str(schema["$ref"]), **common)

        if isinstance(schema.get("allOf"), list):
            return self._parse_composition(schema, SchemaKind.ALL_OF, "allOf", path, common)

        if isinstance(schema.get("oneOf"), list):
            return self._parse_composition(schema, SchemaKind.ONE_OF, "oneOf", path, common)

        if isinstance(schema.get("anyOf"), list):
            return self._parse_composition(schema, SchemaKind.ANY_OF, "anyOf", path, common)

        if isinstance(schema.get("enum"), list):
            return self._parse_enum(schema, common)

        # A const is a single-valued enum
        if "const" in schema:
            return self._parse_enum({**schema, "enum": [schema["const"]]}, common)

        type_name = self._primary_type(schema)

        if type_name == "array":
            items = schema.get("items")
            return ArrayNode(
                items=self.parse_node(items, f"{path}/items") if isinstance(items, dict) else None,
                **common,
            )

        if type_name == "object" or "properties" in schema or "additionalProperties" in schema:
            return self._parse_object(schema, path, common)

        return PrimitiveNode(
            type_name=type_name if type_name in self.PRIMITIVE_TYPES else None,
            format=schema.get("format"),
            **common,
        )

    def _extract_common(self, schema: dict[str, Any], path: str) -> dict[str, Any]:
        type_value = schema.get("type")
        null_in_type = isinstance(type_value, list) and "null" in type_value
        return {
            "source_path": path,
            "nullable": bool(schema.get("nullable") or schema.get("x-nullable") or null_in_type),
            "description": schema.get("description"),
            "example": schema.get("example"),
            "metadata": {k: v for k, v in schema.items() if k.startswith("x-")},
        }

    def _primary_type(self, schema: dict[str, Any]) -> str | None:
        """Return the declared type, unwrapping OpenAPI 3.1 ``[T, "null"]`` arrays."""
        type_value = schema.get("type")
        if isinstance(type_value, list):
            non_null = [t for t in type_value if t != "null"]
            return non_null[0] if len(non_null) == 1 else None
        return type_value

    def _parse_enum(self, schema: dict[str, Any], common: dict[str, Any]) -> EnumNode:
        values = tuple(schema["enum"])
        declared = self._primary_type(schema)
        inferred = declared if declared in self.PRIMITIVE_TYPES else self._infer_type(values[0] if values else "")

        # First present override key wins; a length mismatch disables overrides
        names = schema.get("x-enumNames")
        if names is None:
            names = schema.get("x-enum-varnames")
        display_names = None
        if isinstance(names, list) and len(names) == len(values):
            display_names = tuple(str(n) if isinstance(n, str) else "" for n in names)

        return EnumNode(values=values, inferred_type=inferred, display_names=display_names, **common)

    def _parse_object(self, schema: dict[str, Any], path: str, common: dict[str, Any]) -> ObjectNode:
        properties = []
        raw_properties = schema.get("properties")
        if isinstance(raw_properties, dict):
            # Name order, matching the key order of the cache hash
            for prop_name in sorted(raw_properties, key=str):
                prop_schema = raw_properties[prop_name]
                prop_path = f"{path}/properties/{prop_name}"
                properties.append(
                    PropertyDef(
                        name=prop_name,
                        schema=self.parse_node(prop_schema if isinstance(prop_schema, dict) else {}, prop_path),
                        source_path=prop_path,
                    )
                )

        raw_required = schema.get("required")
        required = frozenset(r for r in raw_required if isinstance(r, str)) if isinstance(raw_required, list) else frozenset()

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            additional = self.parse_node(additional, f"{path}/additionalProperties")
        elif not isinstance(additional, bool):
            additional = None

        return ObjectNode(
            properties=tuple(properties),
            required=required,
            additional_properties=additional,
            **common,
        )

    def _parse_composition(
        self,
        schema: dict[str, Any],
        operator: SchemaKind,
        key: str,
        path: str,
        common: dict[str, Any],
    ) -> CompositionNode:
        parts = tuple(
            self.parse_node(part if isinstance(part, dict) else {}, f"{path}/{key}/{i}") for i, part in enumerate(schema[key])
        )

        own = None
        if operator == SchemaKind.ALL_OF and ("properties" in schema or "required" in schema):
            own = self._parse_object(schema, path, self._extract_common({}, path))

        return CompositionNode(
            operator=operator,
            parts=parts,
            discriminator=self._parse_discriminator(schema.get("discriminator")),
            own=own,
            **common,
        )

    def _parse_discriminator(self, value: Any) -> Discriminator | None:
        # Swagger 2 declares the discriminator as a bare property name
        if isinstance(value, str):
            return Discriminator(property_name=value)
        if not isinstance(value, dict):
            return None
        mapping = value.get("mapping")
        pairs = tuple(sorted((str(tag), str(ref)) for tag, ref in mapping.items())) if isinstance(mapping, dict) else ()
        return Discriminator(property_name=str(value.get("propertyName") or "type"), mapping=pairs)

    def _infer_type(self, value: Any) -> str:
        """Infer the schema type from a literal value."""
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, float):
            return "number"
        return "string"
