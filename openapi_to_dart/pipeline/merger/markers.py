"""
Marker region algebra.

A generated file carries an identity marker line and one begin/end marker
pair. Only the text between the begin and end markers belongs to the
generator; everything else belongs to the user and is preserved byte for
byte when the region is replaced.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import MarkerConflict

IDENTITY_MARKER = "/*OPENAPI-TO-DART*/"
BEGIN_MARKER = "/*OPENAPI-TO-DART: Fields start*/"
END_MARKER = "/*OPENAPI-TO-DART: Fields stop*/"


@dataclass(frozen=True)
class Region:
    """Offsets of the generated region: ``start`` is just after the begin
    marker, ``end`` is the offset of the end marker."""

    start: int
    end: int


def locate_identity(text: str) -> int | None:
    """Return the offset of the identity marker line, or None when absent."""
    offset = 0
    for line in text.splitlines(keepends=True):
        if line.strip() == IDENTITY_MARKER:
            return offset
        offset += len(line)
    return None


def has_identity(text: str) -> bool:
    return locate_identity(text) is not None


def _occurrences(text: str, marker: str) -> list[int]:
    positions = []
    index = text.find(marker)
    while index != -1:
        positions.append(index)
        index = text.find(marker, index + len(marker))
    return positions


def locate_region(text: str, path: Path | str | None = None) -> Region:
    """
    Locate the single begin/end marker pair.

    Args:
        text: File content
        path: File path (for error messages)

    Returns:
        The generated region

    Raises:
        MarkerConflict: If a marker is missing, repeated, or out of order
    """
    begins = _occurrences(text, BEGIN_MARKER)
    ends = _occurrences(text, END_MARKER)

    if not begins or not ends:
        missing = BEGIN_MARKER if not begins else END_MARKER
        raise MarkerConflict(path, f"missing region marker {missing}")
    if len(begins) > 1 or len(ends) > 1:
        raise MarkerConflict(path, f"found {len(begins)} begin and {len(ends)} end markers, expected exactly one pair")
    if begins[0] > ends[0]:
        raise MarkerConflict(path, "region end marker precedes the begin marker")

    return Region(start=begins[0] + len(BEGIN_MARKER), end=ends[0])


def region_content(body: str) -> str:
    """Normalize a rendered body to the exact text stored between the markers."""
    return f"\n\n{body.strip(chr(10))}\n\n"


def splice(text: str, region: Region, body: str) -> str:
    """Replace the region content, keeping every byte outside it."""
    return text[: region.start] + region_content(body) + text[region.end :]


def render_new(body: str) -> str:
    """Layout of a file that does not exist yet."""
    return f"{IDENTITY_MARKER}\n\n{BEGIN_MARKER}{region_content(body)}{END_MARKER}\n"
