"""
Reference resolver for $ref resolution.

Resolves $ref pointers to the named definitions of the schema index and
keeps the visited-name stack used to cut cycles: a name that is already being
expanded is reused by name instead of being expanded again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import UnresolvedReference
from ..schema_ast.nodes import DefinitionNode, RefNode, SchemaIndex, local_ref_name

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Resolves $ref to actual definitions."""

    def __init__(self, index: SchemaIndex):
        """
        Initialize the resolver.

        Args:
            index: The parsed schema index
        """
        self.index = index
        self._stack: list[str] = []

    def ref_name(self, ref: RefNode | str) -> str | None:
        """Return the schema name designated by a local pointer, or None for other pointers."""
        return local_ref_name(ref.ref_path if isinstance(ref, RefNode) else ref)

    def resolve(self, ref: RefNode | str, referrer: str | None = None) -> DefinitionNode:
        """
        Resolve a $ref to its definition.

        Args:
            ref: The RefNode (or raw pointer) to resolve
            referrer: Name of the schema holding the reference (for diagnostics)

        Returns:
            The designated definition

        Raises:
            UnresolvedReference: If the pointer is not local or names no schema
        """
        ref_path = ref.ref_path if isinstance(ref, RefNode) else ref
        name = self.ref_name(ref_path)
        definition = self.index.get(name) if name is not None else None
        if definition is None:
            raise UnresolvedReference(ref_path, referrer)
        return definition

    def resolve_mapping_target(self, value: str, referrer: str | None = None) -> DefinitionNode:
        """
        Resolve a discriminator mapping value.

        OpenAPI 3 allows either a pointer or a bare schema name there.

        Raises:
            UnresolvedReference: If the value designates no schema
        """
        if value.startswith("#"):
            return self.resolve(value, referrer)
        definition = self.index.get(value)
        if definition is None:
            raise UnresolvedReference(value, referrer)
        return definition

    def try_resolve(self, ref: RefNode | str) -> DefinitionNode | None:
        """Like ``resolve`` but returns None instead of raising."""
        try:
            return self.resolve(ref)
        except UnresolvedReference:
            return None

    # Visited-name stack

    def is_expanding(self, name: str) -> bool:
        return name in self._stack

    @property
    def stack(self) -> tuple[str, ...]:
        return tuple(self._stack)

    @contextmanager
    def expanding(self, name: str) -> Iterator[bool]:
        """
        Mark ``name`` as being expanded for the duration of the block.

        Yields False (without pushing) when the name is already on the stack;
        the caller must then reference the class by name instead of
        expanding it again.
        """
        if name in self._stack:
            logger.debug("Cycle on %s (stack: %s), reusing the class by name", name, " -> ".join(self._stack))
            yield False
            return

        self._stack.append(name)
        try:
            yield True
        finally:
            self._stack.pop()
