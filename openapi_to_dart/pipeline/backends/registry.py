"""
Style registry: maps generation style names to backend factories.

A registry is an ordinary object created per run (or per test) rather than
module state, and is resolved once at startup into a concrete backend.
"""

from __future__ import annotations

from collections.abc import Callable

from ..config import CodeGeneratorConfig
from ..errors import UnknownStyleError
from .base import ClassGeneratorStrategy
from .freezed import FreezedStrategy
from .json_serializable import JsonSerializableStrategy
from .plain_dart import PlainDartStrategy

StrategyFactory = Callable[[CodeGeneratorConfig], ClassGeneratorStrategy]

BUILTIN_STYLES: dict[str, StrategyFactory] = {
    PlainDartStrategy.STYLE: PlainDartStrategy,
    JsonSerializableStrategy.STYLE: JsonSerializableStrategy,
    FreezedStrategy.STYLE: FreezedStrategy,
}


def normalize_style(name: str) -> str:
    return name.strip().lower().replace("-", "_")


class StyleRegistry:
    """Built-in styles plus custom styles registered by the caller."""

    def __init__(self):
        self._custom: dict[str, StrategyFactory] = {}

    def register(self, name: str, factory: StrategyFactory) -> None:
        """
        Register a custom style.

        Args:
            name: Style name (case-insensitive)
            factory: Callable building the backend from the configuration

        Raises:
            ValueError: If the name is empty or shadows a built-in style
        """
        key = normalize_style(name)
        if not key:
            raise ValueError("Style name cannot be empty")
        if key in BUILTIN_STYLES:
            raise ValueError(f'"{name}" is a built-in style')
        self._custom[key] = factory

    def unregister(self, name: str) -> None:
        self._custom.pop(normalize_style(name), None)

    def is_registered(self, name: str) -> bool:
        return normalize_style(name) in self._custom

    def styles(self) -> list[str]:
        """Every resolvable style name, built-ins first."""
        return [*BUILTIN_STYLES, *sorted(self._custom)]

    def resolve(self, name: str, config: CodeGeneratorConfig) -> ClassGeneratorStrategy:
        """
        Build the backend of a style.

        Raises:
            UnknownStyleError: If the style is neither built-in nor registered
        """
        key = normalize_style(name)
        factory = BUILTIN_STYLES.get(key) or self._custom.get(key)
        if factory is None:
            raise UnknownStyleError(f'Unknown generation style "{name}" (available: {", ".join(self.styles())})')
        return factory(config)
