"""
Dart type translation and JSON conversion expressions.

Shared by every backend: turns TypeRef descriptors into Dart type names and
into the expressions used by hand-written ``fromJson`` / ``toJson`` code.
"""

from __future__ import annotations

import json
from typing import Any

from ..analyzer.ir_nodes import EnumDef, TypeKind, TypeRef

TYPE_MAP: dict[TypeKind, str] = {
    TypeKind.INTEGER: "int",
    TypeKind.NUMBER: "num",
    TypeKind.BOOLEAN: "bool",
    TypeKind.STRING: "String",
    TypeKind.DATE_TIME: "DateTime",
    TypeKind.DYNAMIC: "dynamic",
}


def dart_string(value: str) -> str:
    """Return a single-quoted Dart string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f"'{escaped}'"


def dart_literal(value: Any) -> str:
    """Return the Dart literal of a JSON scalar."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return dart_string(value)
    return dart_string(json.dumps(value, sort_keys=True))


def enum_value_type(enum_def: EnumDef) -> str:
    """Dart type of the ``value`` field of a generated enum."""
    values = [member.value for member in enum_def.members]
    if values and all(isinstance(v, str) for v in values):
        return "String"
    if values and all(isinstance(v, bool) for v in values):
        return "bool"
    if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "int"
    if values and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "num"
    return "dynamic"


def doc_lines(description: str | None, example: Any = None) -> list[str]:
    """DartDoc lines for a description and an optional example."""
    lines = []
    if description and description.strip():
        for line in description.strip().split("\n"):
            line = line.rstrip()
            lines.append(f"/// {line}" if line else "///")
    if example is not None:
        if lines:
            lines.append("///")
        shown = example if isinstance(example, str) else json.dumps(example)
        lines.append(f"/// Example: {shown}")
    return lines


class DartTypes:
    """Translates type descriptors to Dart."""

    def __init__(self, dynamic_json_classes: set[str] | None = None):
        """
        Args:
            dynamic_json_classes: Classes whose ``fromJson`` takes ``dynamic``
                instead of ``Map<String, dynamic>`` (wrappers)
        """
        self.dynamic_json_classes = dynamic_json_classes or set()

    def translate_type(self, type_ref: TypeRef, nullable: bool = False) -> str:
        """Translate a descriptor to a Dart type, with ``?`` when nullable."""
        if type_ref.override is not None:
            base = type_ref.override
        elif type_ref.kind in TYPE_MAP:
            base = TYPE_MAP[type_ref.kind]
        elif type_ref.kind == TypeKind.LIST:
            base = f"List<{self._argument(type_ref.item_type)}>"
        elif type_ref.kind == TypeKind.MAP:
            base = f"Map<String, {self._argument(type_ref.item_type)}>"
        else:
            base = type_ref.name

        if nullable and base != "dynamic" and not base.endswith("?"):
            return f"{base}?"
        return base

    def _argument(self, type_ref: TypeRef) -> str:
        return self.translate_type(type_ref, type_ref.nullable)

    def from_json(self, source: str, type_ref: TypeRef, nullable: bool, depth: int = 0) -> str:
        """
        Expression converting a decoded JSON value to the Dart type.

        Args:
            source: Dart expression of the JSON value (e.g. ``json['id']``)
            type_ref: Target type
            nullable: Whether null is accepted
            depth: Closure nesting level (keeps lambda parameter names distinct)
        """
        if type_ref.override is not None:
            return f"{source} as {self.translate_type(type_ref, nullable)}"

        kind = type_ref.kind
        if kind == TypeKind.INTEGER:
            return f"({source} as num?)?.toInt()" if nullable else f"({source} as num).toInt()"
        if kind in (TypeKind.NUMBER, TypeKind.BOOLEAN, TypeKind.STRING):
            return f"{source} as {self.translate_type(type_ref, nullable)}"
        if kind == TypeKind.DATE_TIME:
            parse = f"DateTime.parse({source} as String)"
            return f"{source} == null ? null : {parse}" if nullable else parse
        if kind == TypeKind.ENUM:
            return f"{type_ref.name}.fromJson({source})" if nullable else f"{type_ref.name}.fromJson({source})!"
        if kind == TypeKind.CLASS:
            argument = source if type_ref.name in self.dynamic_json_classes else f"{source} as Map<String, dynamic>"
            call = f"{type_ref.name}.fromJson({argument})"
            return f"{source} == null ? null : {call}" if nullable else call
        if kind == TypeKind.LIST:
            item = type_ref.item_type
            if self._is_passthrough(item):
                return f"{source} as List<dynamic>?" if nullable else f"{source} as List<dynamic>"
            var = self._var("e", depth)
            inner = self.from_json(var, item, item.nullable, depth + 1)
            cast = f"({source} as List<dynamic>?)?" if nullable else f"({source} as List<dynamic>)"
            return f"{cast}.map(({var}) => {inner}).toList()"
        if kind == TypeKind.MAP:
            value = type_ref.item_type
            if self._is_passthrough(value):
                return f"{source} as Map<String, dynamic>?" if nullable else f"{source} as Map<String, dynamic>"
            key_var, value_var = self._var("k", depth), self._var("v", depth)
            inner = self.from_json(value_var, value, value.nullable, depth + 1)
            cast = f"({source} as Map<String, dynamic>?)?" if nullable else f"({source} as Map<String, dynamic>)"
            return f"{cast}.map(({key_var}, {value_var}) => MapEntry({key_var}, {inner}))"
        return source

    def to_json(self, expr: str, type_ref: TypeRef, nullable: bool, depth: int = 0) -> str:
        """Expression converting a Dart value back to JSON."""
        if type_ref.override is not None:
            return expr

        kind = type_ref.kind
        access = "?." if nullable else "."
        if kind in (TypeKind.CLASS, TypeKind.ENUM):
            return f"{expr}{access}toJson()"
        if kind == TypeKind.DATE_TIME:
            return f"{expr}{access}toIso8601String()"
        if kind == TypeKind.LIST:
            item = type_ref.item_type
            if not self._needs_to_json(item):
                return expr
            var = self._var("e", depth)
            return f"{expr}{access}map(({var}) => {self.to_json(var, item, item.nullable, depth + 1)}).toList()"
        if kind == TypeKind.MAP:
            value = type_ref.item_type
            if not self._needs_to_json(value):
                return expr
            key_var, value_var = self._var("k", depth), self._var("v", depth)
            inner = self.to_json(value_var, value, value.nullable, depth + 1)
            return f"{expr}{access}map(({key_var}, {value_var}) => MapEntry({key_var}, {inner}))"
        return expr

    def _is_passthrough(self, type_ref: TypeRef) -> bool:
        return type_ref.kind == TypeKind.DYNAMIC and type_ref.override is None

    def _needs_to_json(self, type_ref: TypeRef) -> bool:
        if type_ref.override is not None:
            return False
        if type_ref.kind in (TypeKind.CLASS, TypeKind.ENUM, TypeKind.DATE_TIME):
            return True
        if type_ref.kind in (TypeKind.LIST, TypeKind.MAP):
            return self._needs_to_json(type_ref.item_type)
        return False

    def _var(self, name: str, depth: int) -> str:
        return name if depth == 0 else f"{name}{depth}"
