"""
Merger module.

Writes generated code into new files or into the marker region of files
the user has edited, preserving everything outside the region.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .file_merge import FileMergeController, WriteOutcome, read_exact
from .markers import (
    BEGIN_MARKER,
    END_MARKER,
    IDENTITY_MARKER,
    Region,
    has_identity,
    locate_identity,
    locate_region,
    region_content,
    render_new,
    splice,
)

__all__ = [
    "AtomicWriter",
    "FileMergeController",
    "WriteOutcome",
    "read_exact",
    "IDENTITY_MARKER",
    "BEGIN_MARKER",
    "END_MARKER",
    "Region",
    "has_identity",
    "locate_identity",
    "locate_region",
    "region_content",
    "render_new",
    "splice",
]
