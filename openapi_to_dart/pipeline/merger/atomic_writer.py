"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import CodeMergeError

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n]*")
_STRING_LITERAL = re.compile(r"'(?:\\.|[^'\\\n])*'|\"(?:\\.|[^\"\\\n])*\"")


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, validate_dart: Callable[[str], None] | None = None, atomic: bool = True):
        """Initialize the atomic writer.

        Args:
            validate_dart: Optional validation function for Dart code
            atomic: Write through a temporary file (plain write when False)
        """
        self._validate_dart = validate_dart or self._default_validate_dart
        self.atomic = atomic

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            CodeMergeError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        if validate and path.suffix == ".dart":
            self._validate_dart(content)

        if not self.atomic:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            return

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            # newline="" keeps the exact bytes we were given
            with open(temp_fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def _default_validate_dart(self, content: str) -> None:
        """Default Dart validation (structural heuristics, no parser).

        Args:
            content: Dart code to validate

        Raises:
            CodeMergeError: If validation fails
        """
        # Strings first so "//" inside a literal is not taken for a comment
        code = _STRING_LITERAL.sub("''", content)
        code = _BLOCK_COMMENT.sub("", code)
        code = _LINE_COMMENT.sub("", code)

        for open_char, close_char in (("{", "}"), ("(", ")"), ("[", "]")):
            opened = code.count(open_char)
            closed = code.count(close_char)
            if opened != closed:
                raise CodeMergeError(f"Generated Dart code has unbalanced {open_char}{close_char}: {opened} open, {closed} close")
