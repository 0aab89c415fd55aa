"""
Tests for type mapping, naming and the class model builder.
"""

from __future__ import annotations

from openapi_to_dart.pipeline.analyzer import (
    ClassDef,
    EnumDef,
    MapClassDef,
    SchemaAnalyzer,
    TypedefDef,
    TypeKind,
)
from openapi_to_dart.pipeline.config import CodeGeneratorConfig, SchemaOverride
from openapi_to_dart.pipeline.schema_ast import SchemaParser
from openapi_to_dart.utils import to_enum_value_name, to_field_name, to_pascal_case, to_snake_case


def ref(name: str) -> dict:
    return {"$ref": f"#/components/schemas/{name}"}


def analyze(schemas: dict, config: CodeGeneratorConfig | None = None):
    index = SchemaParser().parse({"openapi": "3.0.0", "components": {"schemas": schemas}})
    return SchemaAnalyzer(config or CodeGeneratorConfig()).analyze(index)


def fields_of(model: ClassDef) -> dict:
    return {f.json_key: f for f in model.fields}


class TestNaming:
    def test_pascal_case(self):
        assert to_pascal_case("user") == "User"
        assert to_pascal_case("order_item") == "OrderItem"
        assert to_pascal_case("pet-store.Owner") == "PetStoreOwner"
        assert to_pascal_case("userProfile") == "UserProfile"

    def test_snake_case(self):
        assert to_snake_case("UserProfile") == "user_profile"
        assert to_snake_case("order_item") == "order_item"

    def test_field_names(self):
        assert to_field_name("created_at") == "createdAt"
        assert to_field_name("class") == "class_"
        assert to_field_name("2fa") == "value2fa"

    def test_enum_value_names(self):
        assert to_enum_value_name("in-progress") == "in_progress"
        assert to_enum_value_name("2fa") == "value_2fa"
        assert to_enum_value_name("!!!") == "unknown"
        assert to_enum_value_name("values") == "values_"


class TestRequiredByDefault:
    def test_user_example(self):
        ir = analyze(
            {
                "User": {
                    "type": "object",
                    "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
                    "required": ["id"],
                }
            }
        )
        fields = fields_of(ir.get("User"))

        assert not fields["id"].nullable
        assert not fields["name"].nullable
        assert fields["name"].is_required
        assert fields["id"].listed_required
        assert not fields["name"].listed_required

    def test_nullable_is_always_nullable(self):
        ir = analyze(
            {
                "User": {
                    "type": "object",
                    "required": ["nickname"],
                    "properties": {"nickname": {"type": "string", "nullable": True}},
                }
            }
        )
        assert fields_of(ir.get("User"))["nickname"].nullable


class TestTypeMapping:
    def test_primitives(self):
        ir = analyze(
            {
                "T": {
                    "type": "object",
                    "properties": {
                        "count": {"type": "integer"},
                        "ratio": {"type": "number"},
                        "flag": {"type": "boolean"},
                        "label": {"type": "string"},
                        "when": {"type": "string", "format": "date-time"},
                        "anything": {},
                    },
                }
            }
        )
        kinds = {key: f.type_ref.kind for key, f in fields_of(ir.get("T")).items()}

        assert kinds == {
            "count": TypeKind.INTEGER,
            "ratio": TypeKind.NUMBER,
            "flag": TypeKind.BOOLEAN,
            "label": TypeKind.STRING,
            "when": TypeKind.DATE_TIME,
            "anything": TypeKind.DYNAMIC,
        }

    def test_integer_and_number_are_distinct(self):
        ir = analyze({"T": {"type": "object", "properties": {"a": {"type": "integer"}, "b": {"type": "number"}}}})
        fields = fields_of(ir.get("T"))
        assert fields["a"].type_ref.kind != fields["b"].type_ref.kind

    def test_arrays_and_maps(self):
        ir = analyze(
            {
                "Item": {"type": "object", "properties": {"a": {"type": "string"}}},
                "T": {
                    "type": "object",
                    "properties": {
                        "items": {"type": "array", "items": ref("Item")},
                        "loose": {"type": "array"},
                        "scores": {"type": "object", "additionalProperties": {"type": "integer"}},
                        "meta": {"type": "object"},
                    },
                },
            }
        )
        fields = fields_of(ir.get("T"))

        assert fields["items"].type_ref.kind == TypeKind.LIST
        assert fields["items"].type_ref.item_type.name == "Item"
        assert fields["loose"].type_ref.item_type.kind == TypeKind.DYNAMIC
        assert fields["scores"].type_ref.kind == TypeKind.MAP
        assert fields["scores"].type_ref.item_type.kind == TypeKind.INTEGER
        assert fields["meta"].type_ref.kind == TypeKind.MAP
        assert ir.get("T").dependencies == ["Item"]

    def test_enum_reference(self):
        ir = analyze(
            {
                "Status": {"type": "string", "enum": ["on", "off"]},
                "T": {"type": "object", "properties": {"status": ref("Status")}},
            }
        )
        type_ref = fields_of(ir.get("T"))["status"].type_ref

        assert type_ref.kind == TypeKind.ENUM
        assert type_ref.name == "Status"

    def test_primitive_alias_is_inlined(self):
        ir = analyze(
            {
                "Email": {"type": "string"},
                "T": {"type": "object", "properties": {"email": ref("Email")}},
            }
        )

        assert fields_of(ir.get("T"))["email"].type_ref.kind == TypeKind.STRING
        assert isinstance(ir.get("Email"), TypedefDef)
        assert ir.get("T").dependencies == []

    def test_map_only_definition(self):
        ir = analyze({"Scores": {"type": "object", "additionalProperties": {"type": "number"}}})
        model = ir.get("Scores")

        assert isinstance(model, MapClassDef)
        assert model.value_type.kind == TypeKind.NUMBER


class TestEnums:
    def test_display_names_priority(self):
        ir = analyze({"Level": {"type": "integer", "enum": [1, 2], "x-enumNames": ["Low", "High"]}})
        model = ir.get("Level")

        assert isinstance(model, EnumDef)
        assert [(m.name, m.value) for m in model.members] == [("Low", 1), ("High", 2)]

    def test_sanitized_literals(self):
        ir = analyze({"State": {"type": "string", "enum": ["in-progress", "done", "2nd"]}})
        assert [m.name for m in ir.get("State").members] == ["in_progress", "done", "value_2nd"]

    def test_numeric_literals_without_names(self):
        ir = analyze({"Code": {"type": "integer", "enum": [200, 404]}})
        assert [m.name for m in ir.get("Code").members] == ["value0", "value1"]

    def test_duplicate_member_names(self):
        ir = analyze({"Sign": {"type": "string", "enum": ["a-b", "a_b"]}})
        assert [m.name for m in ir.get("Sign").members] == ["a_b", "a_b1"]

    def test_inline_enum_is_named_after_owner(self):
        ir = analyze(
            {
                "Order": {
                    "type": "object",
                    "properties": {"status": {"type": "string", "enum": ["placed", "shipped"]}},
                }
            }
        )
        model = ir.get("Order")

        assert fields_of(model)["status"].type_ref.name == "OrderStatus"
        assert [inline.name for inline in model.inline_models] == ["OrderStatus"]

    def test_empty_enum_is_empty_class(self):
        ir = analyze({"Nothing": {"type": "string", "enum": []}})
        model = ir.get("Nothing")

        assert isinstance(model, ClassDef)
        assert model.fields == []


class TestOverrides:
    def test_class_and_field_names(self):
        config = CodeGeneratorConfig(
            schema_overrides={"user": SchemaOverride(class_name="AppUser", field_names={"user_id": "id"})}
        )
        ir = analyze({"user": {"type": "object", "properties": {"user_id": {"type": "integer"}}}}, config)
        model = ir.get("user")

        assert model.name == "AppUser"
        assert model.fields[0].name == "id"
        assert model.fields[0].json_key == "user_id"

    def test_type_mapping(self):
        config = CodeGeneratorConfig(schema_overrides={"T": SchemaOverride(type_mapping={"string": "MyString"})})
        ir = analyze({"T": {"type": "object", "properties": {"s": {"type": "string"}, "i": {"type": "integer"}}}}, config)
        fields = fields_of(ir.get("T"))

        assert fields["s"].type_ref.override == "MyString"
        assert fields["i"].type_ref.override is None

    def test_use_json_key_precedence(self):
        config = CodeGeneratorConfig(use_json_key=True, schema_overrides={"B": SchemaOverride(use_json_key=False)})
        ir = analyze({"A": {"type": "object"}, "B": {"type": "object"}}, config)

        assert ir.get("A").use_json_key
        assert not ir.get("B").use_json_key
