"""
File merge controller.

Writes a rendered body into a new file or into the marker region of an
existing one. An existing file without the expected markers is never
overwritten: that raises ``MarkerConflict`` for this file only.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from ..errors import MarkerConflict
from .atomic_writer import AtomicWriter
from .markers import has_identity, locate_region, render_new, splice

logger = logging.getLogger(__name__)


class WriteOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def read_exact(path: Path) -> str:
    """Read a file without newline translation."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


class FileMergeController:
    """Creates generated files or patches their marker region."""

    def __init__(self, writer: AtomicWriter | None = None, validate: bool = True):
        """
        Initialize the controller.

        Args:
            writer: Writer used for every file (atomic by default)
            validate: Whether to validate Dart code before writing
        """
        self.writer = writer or AtomicWriter()
        self.validate = validate

    def merge(self, existing: str | None, body: str, path: Path | str | None = None) -> str:
        """
        Compute the new file content.

        Args:
            existing: Current file content, or None when the file does not exist
            body: Rendered generated code
            path: File path (for error messages)

        Returns:
            The full content to write

        Raises:
            MarkerConflict: If ``existing`` lacks the identity marker or a single marker pair
        """
        if existing is None:
            return render_new(body)
        if not has_identity(existing):
            raise MarkerConflict(path, "file exists but was not generated by openapi_to_dart (no identity marker)")
        return splice(existing, locate_region(existing, path), body)

    def write(self, path: Path, body: str) -> WriteOutcome:
        """
        Write the body to ``path``.

        Returns:
            CREATED for a new file, UPDATED when the region changed,
            UNCHANGED when the file already holds this exact content

        Raises:
            MarkerConflict: If an existing file cannot be safely patched
            CodeMergeError: If the result fails validation
        """
        existing = read_exact(path) if path.exists() else None
        content = self.merge(existing, body, path)

        if existing is not None and content == existing:
            logger.debug("Unchanged: %s", path)
            return WriteOutcome.UNCHANGED

        self.writer.write(path, content, validate=self.validate)
        if existing is None:
            logger.info("Created %s", path)
            return WriteOutcome.CREATED
        logger.info("Updated %s", path)
        return WriteOutcome.UPDATED
