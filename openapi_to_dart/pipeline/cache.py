"""
Incremental generation cache.

Persists one content hash per schema so that unchanged schemas can be
skipped. Hashes are computed over a canonical JSON form with every mapping's
keys sorted recursively, so reordering keys in the document does not change
them. The record is only written at the end of a successful run.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from .errors import CacheCorrupt
from .merger.atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = ".openapi_to_dart.cache"


def canonicalize(value: Any) -> Any:
    """Return a copy of ``value`` with mapping keys sorted recursively."""
    if isinstance(value, Mapping):
        return {str(k): canonicalize(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def compute_schema_hash(schema: Any, fingerprint: Mapping[str, Any] | None = None) -> str:
    """
    Compute the structural hash of a raw schema.

    Args:
        schema: The raw schema mapping
        fingerprint: Generation settings folded into the hash (style, overrides)

    Returns:
        Hex sha256 digest
    """
    payload = schema if fingerprint is None else {"generator": fingerprint, "schema": schema}
    text = json.dumps(canonicalize(payload), separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class IncrementalCache:
    """Schema name -> content hash record of one project."""

    def __init__(self, path: Path, hashes: dict[str, str] | None = None, fingerprint: Mapping[str, Any] | None = None):
        """
        Initialize the cache.

        Args:
            path: Location of the cache file
            hashes: Hashes recorded by the previous run
            fingerprint: Generation settings folded into every hash
        """
        self.path = Path(path)
        self.fingerprint = fingerprint
        self._hashes: dict[str, str] = dict(hashes or {})
        self._previous: frozenset[str] = frozenset(self._hashes)

        # Set when the file existed but could not be decoded
        self.recovered = False

    @classmethod
    def load(cls, project_dir: str | Path, fingerprint: Mapping[str, Any] | None = None) -> IncrementalCache:
        """
        Load the cache of a project.

        A missing file gives an empty cache. A corrupt file is reported and
        also gives an empty cache, so that everything is regenerated.
        """
        path = Path(project_dir) / CACHE_FILE_NAME
        if not path.exists():
            return cls(path, fingerprint=fingerprint)

        try:
            hashes = cls.decode(path.read_text(encoding="utf-8"))
        except (CacheCorrupt, OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable cache %s (%s), regenerating everything", path, e)
            cache = cls(path, fingerprint=fingerprint)
            cache.recovered = True
            return cache

        logger.debug("Loaded cache %s with %d schema(s)", path, len(hashes))
        return cls(path, hashes, fingerprint=fingerprint)

    @staticmethod
    def decode(content: str) -> dict[str, str]:
        """
        Decode the cache file content.

        Raises:
            CacheCorrupt: If the content is not a valid cache record
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CacheCorrupt(f"invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("schemaHashes", {}), dict):
            raise CacheCorrupt("expected an object with a schemaHashes object")

        hashes = data.get("schemaHashes", {})
        if not all(isinstance(v, str) for v in hashes.values()):
            raise CacheCorrupt("schema hashes must be strings")
        return {str(k): v for k, v in hashes.items()}

    def hash_of(self, schema: Any) -> str:
        return compute_schema_hash(schema, self.fingerprint)

    def get_hash(self, name: str) -> str | None:
        return self._hashes.get(name)

    def should_regenerate(self, name: str, schema: Any) -> bool:
        """True when the schema has no recorded hash or a different one."""
        cached = self._hashes.get(name)
        return cached is None or cached != self.hash_of(schema)

    def commit(self, name: str, schema: Any) -> None:
        """Record the schema's hash (persisted by ``save``)."""
        self._hashes[name] = self.hash_of(schema)

    def drop(self, name: str) -> None:
        """Forget a schema (removed from the document, or failed to write)."""
        self._hashes.pop(name, None)

    def removed_since(self, current_names: Iterable[str]) -> set[str]:
        """Names recorded by the previous run that the document no longer has."""
        return set(self._previous) - set(current_names)

    @property
    def names(self) -> set[str]:
        return set(self._hashes)

    def to_dict(self) -> dict[str, Any]:
        return {"schemaHashes": dict(sorted(self._hashes.items()))}

    def save(self, writer: AtomicWriter | None = None) -> None:
        """Atomically rewrite the cache file."""
        writer = writer or AtomicWriter()
        writer.write(self.path, json.dumps(self.to_dict(), indent=2) + "\n", validate=False)
        logger.debug("Saved cache %s with %d schema(s)", self.path, len(self._hashes))
