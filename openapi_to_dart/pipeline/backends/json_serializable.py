"""
json_serializable backend: serialization is delegated to the generated
``_$XFromJson`` / ``_$XToJson`` helpers.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import ClassDef, EnumDef, ModelDef
from .base import ClassGeneratorStrategy


def has_annotated_class(model: ModelDef) -> bool:
    """Whether the file of ``model`` holds a class that build_runner processes."""
    return any(type(m) is ClassDef for m in [model, *model.inline_models])


class JsonSerializableStrategy(ClassGeneratorStrategy):
    """Generates ``@JsonSerializable()`` classes."""

    STYLE = "json_serializable"
    TEMPLATE_DIRS = ("json_serializable", "common")

    def imports_and_parts(self, file_stem: str, needs_codegen: bool) -> list[str]:
        directives = ["import 'package:json_annotation/json_annotation.dart';"]
        if needs_codegen:
            directives.append(f"part '{file_stem}.g.dart';")
        return directives

    def class_annotations(self, class_def: ClassDef) -> list[str]:
        return ["@JsonSerializable()"]

    def enum_annotations(self, enum_def: EnumDef) -> list[str]:
        return ["@JsonEnum(valueField: 'value')"]

    def needs_codegen(self, model: ModelDef) -> bool:
        return has_annotated_class(model)
