"""
Code generation backends (generation styles).
"""

from __future__ import annotations

from .base import ClassGeneratorStrategy
from .dart_types import DartTypes, dart_literal, dart_string, doc_lines
from .freezed import FreezedStrategy
from .json_serializable import JsonSerializableStrategy
from .plain_dart import PlainDartStrategy
from .registry import BUILTIN_STYLES, StyleRegistry

__all__ = [
    "ClassGeneratorStrategy",
    "DartTypes",
    "dart_literal",
    "dart_string",
    "doc_lines",
    "PlainDartStrategy",
    "JsonSerializableStrategy",
    "FreezedStrategy",
    "StyleRegistry",
    "BUILTIN_STYLES",
]
