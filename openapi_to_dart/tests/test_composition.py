"""
Tests for reference resolution and allOf flattening.
"""

from __future__ import annotations

import logging

import pytest

from openapi_to_dart.pipeline.analyzer import (
    ClassDef,
    CompositionEngine,
    NameResolver,
    ReferenceResolver,
    SchemaAnalyzer,
    TypeKind,
)
from openapi_to_dart.pipeline.config import CodeGeneratorConfig
from openapi_to_dart.pipeline.errors import UnresolvedReference
from openapi_to_dart.pipeline.schema_ast import RefNode, SchemaParser


def ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def parse(schemas: dict):
    return SchemaParser().parse({"openapi": "3.0.0", "components": {"schemas": schemas}})


def engine_for(index) -> CompositionEngine:
    names = NameResolver(CodeGeneratorConfig())
    names.resolve_names(index)
    return CompositionEngine(ReferenceResolver(index), names)


def analyze(schemas: dict):
    return SchemaAnalyzer(CodeGeneratorConfig()).analyze(parse(schemas))


class TestReferenceResolver:
    def test_resolves_both_dialect_prefixes(self):
        index = parse({"A": {"type": "object"}})
        resolver = ReferenceResolver(index)

        assert resolver.resolve("#/components/schemas/A").name == "A"
        assert resolver.resolve("#/definitions/A").name == "A"

    def test_json_pointer_escapes(self):
        index = parse({"a/b": {"type": "object"}})
        assert ReferenceResolver(index).resolve("#/components/schemas/a~1b").name == "a/b"

    def test_unresolved_reference_carries_referrer(self):
        index = parse({"A": {"type": "object"}})
        with pytest.raises(UnresolvedReference) as exc_info:
            ReferenceResolver(index).resolve(RefNode(ref_path="#/components/schemas/Missing"), "A")

        assert exc_info.value.ref == "#/components/schemas/Missing"
        assert exc_info.value.referrer == "A"

    def test_remote_reference_is_unresolved(self):
        index = parse({"A": {"type": "object"}})
        assert ReferenceResolver(index).try_resolve("other.yaml#/A") is None

    def test_expanding_stack(self):
        resolver = ReferenceResolver(parse({"A": {"type": "object"}}))

        with resolver.expanding("A") as entered:
            assert entered
            assert resolver.is_expanding("A")
            with resolver.expanding("A") as reentered:
                assert not reentered
            assert resolver.stack == ("A",)
        assert resolver.stack == ()


class TestAllOfFlattening:
    def test_disjoint_fragments_are_complete(self):
        index = parse(
            {
                "A": {"type": "object", "properties": {"a": {"type": "string"}}},
                "B": {"type": "object", "properties": {"b": {"type": "integer"}}},
                "C": {"type": "object", "properties": {"c": {"type": "boolean"}}},
                "ABC": {"allOf": [ref("A"), ref("B"), ref("C")]},
            }
        )
        result = engine_for(index).flatten_all_of("ABC", index.get("ABC").body)

        assert list(result.properties) == ["a", "b", "c"]
        assert result.bases == ["A", "B", "C"]

    def test_later_fragment_overrides_type_and_keeps_position(self):
        index = parse(
            {
                "A": {"type": "object", "properties": {"x": {"type": "string"}, "y": {"type": "string"}}},
                "B": {"type": "object", "properties": {"x": {"type": "integer"}}},
                "AB": {"allOf": [ref("A"), ref("B")]},
            }
        )
        result = engine_for(index).flatten_all_of("AB", index.get("AB").body)

        assert list(result.properties) == ["x", "y"]
        assert result.properties["x"].prop.schema.type_name == "integer"
        assert result.properties["x"].origin == "B"

    def test_required_flag_is_ored(self):
        index = parse(
            {
                "A": {"type": "object", "required": ["x"], "properties": {"x": {"type": "string"}}},
                "B": {"type": "object", "properties": {"x": {"type": "string"}}},
                "AB": {"allOf": [ref("A"), ref("B")]},
            }
        )
        result = engine_for(index).flatten_all_of("AB", index.get("AB").body)

        assert result.properties["x"].listed_required

    def test_own_properties_come_last(self):
        index = parse(
            {
                "Base": {"type": "object", "properties": {"id": {"type": "integer"}}},
                "Child": {"allOf": [ref("Base")], "properties": {"name": {"type": "string"}}},
            }
        )
        result = engine_for(index).flatten_all_of("Child", index.get("Child").body)

        assert list(result.properties) == ["id", "name"]

    def test_diamond_contributes_fields_once(self):
        index = parse(
            {
                "Root": {"type": "object", "properties": {"id": {"type": "integer"}}},
                "Left": {"allOf": [ref("Root"), {"type": "object", "properties": {"l": {"type": "string"}}}]},
                "Right": {"allOf": [ref("Root"), {"type": "object", "properties": {"r": {"type": "string"}}}]},
                "Diamond": {"allOf": [ref("Left"), ref("Right")]},
            }
        )
        result = engine_for(index).flatten_all_of("Diamond", index.get("Diamond").body)

        assert list(result.properties) == ["id", "l", "r"]
        assert result.bases == ["Left", "Root", "Right"]

    def test_cycle_terminates_and_references_ancestor(self, caplog):
        index = parse(
            {
                "Node": {"allOf": [ref("Tree"), {"type": "object", "properties": {"value": {"type": "string"}}}]},
                "Tree": {"allOf": [ref("Node"), {"type": "object", "properties": {"depth": {"type": "integer"}}}]},
            }
        )
        with caplog.at_level(logging.DEBUG, logger="openapi_to_dart"):
            result = engine_for(index).flatten_all_of("Node", index.get("Node").body)

        assert list(result.properties) == ["depth", "value"]
        assert result.cycle_refs == ["Node"]
        assert any("cycle" in record.getMessage() for record in caplog.records)

    def test_self_reference_is_cycle(self):
        index = parse({"Loop": {"allOf": [ref("Loop"), {"type": "object", "properties": {"a": {"type": "string"}}}]}})
        result = engine_for(index).flatten_all_of("Loop", index.get("Loop").body)

        assert list(result.properties) == ["a"]
        assert result.cycle_refs == ["Loop"]

    def test_unknown_base_raises(self):
        index = parse({"Child": {"allOf": [ref("Missing")]}})
        with pytest.raises(UnresolvedReference):
            engine_for(index).flatten_all_of("Child", index.get("Child").body)


class TestClassModel:
    def test_flattened_class_model(self):
        ir = analyze(
            {
                "Named": {"type": "object", "required": ["name"], "properties": {"name": {"type": "string"}}},
                "Dated": {"type": "object", "properties": {"created": {"type": "string", "format": "date"}}},
                "Doc": {"allOf": [ref("Named"), ref("Dated")]},
            }
        )
        model = ir.get("Doc")

        assert isinstance(model, ClassDef)
        assert [f.name for f in model.fields] == ["name", "created"]
        assert model.fields[1].type_ref.kind == TypeKind.DATE_TIME
        assert model.composed_of == ["Named", "Dated"]

    def test_cyclic_class_is_valid(self):
        ir = analyze(
            {
                "A": {"allOf": [ref("B"), {"type": "object", "properties": {"a": {"type": "string"}}}]},
                "B": {"allOf": [ref("A"), {"type": "object", "properties": {"b": {"type": "string"}}}]},
            }
        )

        assert [f.name for f in ir.get("A").fields] == ["b", "a"]
        assert ir.get("A").cycle_refs == ["A"]
        assert [f.name for f in ir.get("B").fields] == ["a", "b"]

    def test_self_referencing_property(self):
        ir = analyze(
            {
                "Category": {
                    "type": "object",
                    "properties": {"parent": ref("Category"), "children": {"type": "array", "items": ref("Category")}},
                }
            }
        )
        model = ir.get("Category")

        assert model.fields[0].type_ref.kind == TypeKind.CLASS
        assert model.fields[0].type_ref.name == "Category"
        assert model.dependencies == []
