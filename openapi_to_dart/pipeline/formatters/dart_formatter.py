"""
dart format post-processor for generated files.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class DartFormatter(Formatter):
    """Formatter using the ``dart format`` command."""

    def __init__(self, executable: str = "dart"):
        self.executable = executable
        self._available = None

    def is_available(self) -> bool:
        """Check if the Dart SDK is on the PATH."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [self.executable, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=10,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
            if not self._available:
                logger.warning("%s not found, generated code is left unformatted", self.executable)
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Dart code through stdin / stdout.

        Args:
            code: Dart source code to format
            config: Formatter configuration

        Returns:
            Formatted code, or the input unchanged if formatting fails
        """
        if not self.is_available():
            return code

        cmd = [self.executable, "format", "--output=show"]
        if config.line_length:
            cmd.append(f"--page-width={config.line_length}")

        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except subprocess.SubprocessError as e:
            logger.warning("dart format failed: %s", e)
            return code

        if result.returncode != 0:
            logger.warning("dart format rejected the generated code: %s", result.stderr.strip())
            return code
        return result.stdout
