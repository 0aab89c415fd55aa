"""
Exception taxonomy for the generator pipeline.

Fatal, project-wide conditions (an unresolvable ``$ref``) abort a run.
File-scoped conditions (``MarkerConflict``) fail the affected schema only.
``CacheCorrupt`` is always recovered by the cache itself.
"""

from __future__ import annotations

from pathlib import Path


class GeneratorError(Exception):
    """Base class for every error raised by the generator."""


class SpecLoadError(GeneratorError):
    """Raised when the API description cannot be loaded or understood."""


class ConfigError(GeneratorError):
    """Raised when a configuration file is missing or invalid."""


class UnknownStyleError(GeneratorError):
    """Raised when a generation style name is neither built-in nor registered."""


class UnresolvedReference(GeneratorError):
    """Raised when a ``$ref`` does not designate a schema of the document.

    References cross schema boundaries, so this is fatal for the whole run.
    """

    def __init__(self, ref: str, referrer: str | None = None):
        self.ref = ref
        self.referrer = referrer
        where = f' (referenced from "{referrer}")' if referrer else ""
        super().__init__(f'Unresolved reference "{ref}"{where}')


class UnknownVariantTag(GeneratorError):
    """Raised when decoding a union payload whose tag matches no variant."""

    def __init__(self, union: str, tag: object):
        self.union = union
        self.tag = tag
        super().__init__(f'Unknown variant tag {tag!r} for union "{union}"')


class NullPayload(GeneratorError):
    """Raised when a dynamic wrapper is constructed or decoded from null."""

    def __init__(self, wrapper: str):
        self.wrapper = wrapper
        super().__init__(f"JSON payload cannot be null for {wrapper}")


class MissingVariantHandler(GeneratorError):
    """Raised when a union dispatch is built without a handler for every variant."""

    def __init__(self, union: str, missing: list[str]):
        self.union = union
        self.missing = missing
        super().__init__(f'Dispatch for union "{union}" is missing handlers for: {", ".join(missing)}')


class MarkerConflict(GeneratorError):
    """Raised when an existing file cannot be safely patched.

    This is fatal for the affected file only; sibling schemas keep going.
    """

    def __init__(self, path: Path | str | None, reason: str):
        self.path = Path(path) if path is not None else None
        self.reason = reason
        location = f"{self.path}: " if self.path is not None else ""
        super().__init__(f"{location}{reason}")


class CacheCorrupt(GeneratorError):
    """Raised internally when the cache file cannot be decoded."""


class CodeMergeError(GeneratorError):
    """Raised when generated or merged code fails validation before writing.

    Like ``MarkerConflict`` this only fails the affected file.
    """
