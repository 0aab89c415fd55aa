"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from .base import Formatter
from .dart_formatter import DartFormatter

__all__ = [
    "Formatter",
    "DartFormatter",
]
