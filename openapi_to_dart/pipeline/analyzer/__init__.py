"""
Analyzer module.

Resolves references, flattens compositions and maps types to build the IR.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .composition import CompositionEngine, FlattenResult, MergedProperty
from .ir_nodes import (
    IR,
    ClassDef,
    EnumDef,
    EnumMember,
    FieldDef,
    MapClassDef,
    ModelDef,
    TypedefDef,
    TypeKind,
    TypeRef,
)
from .name_resolver import NameMapping, NameResolver
from .reference_resolver import ReferenceResolver
from .type_mapper import MappingContext, TypeMapper, build_enum_members
from .unions import UnionModel, UnionValue, UnionVariant, WrapperModel

__all__ = [
    "SchemaAnalyzer",
    "CompositionEngine",
    "FlattenResult",
    "MergedProperty",
    "IR",
    "ClassDef",
    "EnumDef",
    "EnumMember",
    "FieldDef",
    "MapClassDef",
    "ModelDef",
    "TypedefDef",
    "TypeKind",
    "TypeRef",
    "NameMapping",
    "NameResolver",
    "ReferenceResolver",
    "MappingContext",
    "TypeMapper",
    "build_enum_members",
    "UnionModel",
    "UnionValue",
    "UnionVariant",
    "WrapperModel",
]
