"""
Union and wrapper models synthesized from oneOf / anyOf groups.

Besides describing what the backends render, these models carry the
reference decode / encode / dispatch semantics of the generated code, so
the behavior of a union can be checked without compiling Dart.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import MissingVariantHandler, NullPayload, UnknownVariantTag
from ..schema_ast.nodes import SchemaKind
from .ir_nodes import ModelDef


@dataclass
class UnionVariant:
    """One alternative of a discriminated union."""

    tag: str = ""  # Discriminator value selecting this variant
    class_name: str = ""  # Target type name of the variant class
    schema_name: str = ""  # Schema key of the variant
    field_name: str = ""  # Name of the optional field holding this variant


@dataclass
class UnionModel(ModelDef):
    """A discriminated union: a tag field plus one optional field per variant."""

    discriminator: str = "type"
    variants: list[UnionVariant] = field(default_factory=list)
    operator: SchemaKind = SchemaKind.ONE_OF

    @property
    def tags(self) -> list[str]:
        return [variant.tag for variant in self.variants]

    def variant_for_tag(self, tag: object) -> UnionVariant:
        """
        Select the variant for a discriminator value.

        Raises:
            UnknownVariantTag: If no variant declares the tag
        """
        for variant in self.variants:
            if variant.tag == tag:
                return variant
        raise UnknownVariantTag(self.name, tag)

    def construct(self, tag: str, payload: Any) -> UnionValue:
        """Named-constructor semantics: build a value with exactly one variant populated."""
        variant = self.variant_for_tag(tag)
        return UnionValue(model=self, tag=variant.tag, values={variant.field_name: payload})

    def decode(self, json: Mapping[str, Any]) -> UnionValue:
        """
        Decode a JSON object, selecting the active variant by its tag.

        Raises:
            NullPayload: If ``json`` is None
            UnknownVariantTag: If the tag matches no variant
        """
        if json is None:
            raise NullPayload(self.name)
        return self.construct(json.get(self.discriminator), dict(json))

    def encode(self, value: UnionValue) -> dict[str, Any]:
        """Encode the active variant, writing the tag back under the discriminator."""
        payload = value.payload
        encoded = dict(payload) if isinstance(payload, Mapping) else {"value": payload}
        encoded[self.discriminator] = value.tag
        return encoded

    def dispatcher(self, handlers: Mapping[str, Callable[[Any], Any]]) -> Callable[[UnionValue], Any]:
        """
        Build an exhaustive dispatch over the variants.

        Args:
            handlers: Variant tag -> handler receiving the variant payload

        Returns:
            Callable applying the handler of the active variant

        Raises:
            MissingVariantHandler: If a known variant has no handler
            ValueError: If a handler is given for an unknown tag
        """
        missing = [tag for tag in self.tags if tag not in handlers]
        if missing:
            raise MissingVariantHandler(self.name, missing)
        unknown = [tag for tag in handlers if tag not in self.tags]
        if unknown:
            raise ValueError(f'Handlers given for unknown variants of "{self.name}": {", ".join(unknown)}')

        def dispatch(value: UnionValue) -> Any:
            return handlers[value.tag](value.payload)

        return dispatch


@dataclass(frozen=True)
class UnionValue:
    """A value of a union. At most one variant field is populated."""

    model: UnionModel
    tag: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        populated = [name for name, value in self.values.items() if value is not None]
        if len(populated) > 1:
            raise ValueError(f"A {self.model.name} value holds more than one variant: {', '.join(populated)}")

    def get(self, field_name: str) -> Any:
        """Value of a variant field (None unless it is the active one)."""
        return self.values.get(field_name)

    @property
    def payload(self) -> Any:
        return self.get(self.model.variant_for_tag(self.tag).field_name)


@dataclass
class WrapperModel(ModelDef):
    """A loosely typed wrapper for alternatives without a discriminator."""

    operator: SchemaKind = SchemaKind.ONE_OF

    # Names of the alternatives (documentation only, never used to discriminate)
    alternatives: list[str] = field(default_factory=list)

    def construct(self, value: Any) -> Any:
        """
        Constructor semantics: any non-null value is accepted as is.

        Raises:
            NullPayload: If ``value`` is None
        """
        if value is None:
            raise NullPayload(self.name)
        return value

    def decode(self, json: Any) -> Any:
        return self.construct(json)

    def encode(self, value: Any) -> Any:
        return value
