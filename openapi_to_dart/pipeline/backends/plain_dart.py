"""
Plain Dart backend: hand-written ``fromJson`` / ``toJson`` without code generation.
"""

from __future__ import annotations

from .base import ClassGeneratorStrategy


class PlainDartStrategy(ClassGeneratorStrategy):
    """Generates self-contained Dart classes."""

    STYLE = "plain_dart"
    TEMPLATE_DIRS = ("plain_dart", "common")

    def imports_and_parts(self, file_stem: str, needs_codegen: bool) -> list[str]:
        return []
