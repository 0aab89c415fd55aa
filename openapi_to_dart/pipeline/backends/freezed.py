"""
freezed backend: immutable ``const factory`` classes with generated
equality, ``copyWith`` and JSON helpers.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import ClassDef, EnumDef, ModelDef
from .base import ClassGeneratorStrategy
from .json_serializable import has_annotated_class


class FreezedStrategy(ClassGeneratorStrategy):
    """Generates ``@freezed`` classes."""

    STYLE = "freezed"
    TEMPLATE_DIRS = ("freezed", "common")

    def imports_and_parts(self, file_stem: str, needs_codegen: bool) -> list[str]:
        directives = ["import 'package:freezed_annotation/freezed_annotation.dart';"]
        if needs_codegen:
            directives.append(f"part '{file_stem}.freezed.dart';")
            directives.append(f"part '{file_stem}.g.dart';")
        return directives

    def class_annotations(self, class_def: ClassDef) -> list[str]:
        return ["@freezed"]

    def enum_annotations(self, enum_def: EnumDef) -> list[str]:
        return ["@JsonEnum(valueField: 'value')"]

    def needs_codegen(self, model: ModelDef) -> bool:
        return has_annotated_class(model)
