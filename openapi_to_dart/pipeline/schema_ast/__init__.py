"""
Schema AST module.

Contains the node definitions and the parser for API description documents.
"""

from __future__ import annotations

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
from .parser import SchemaParser, detect_dialect

__all__ = [
    "SchemaNode",
    "SchemaKind",
    "Dialect",
    "ObjectNode",
    "ArrayNode",
    "RefNode",
    "PrimitiveNode",
    "EnumNode",
    "CompositionNode",
    "Discriminator",
    "PropertyDef",
    "DefinitionNode",
    "SchemaIndex",
    "SchemaParser",
    "detect_dialect",
]
