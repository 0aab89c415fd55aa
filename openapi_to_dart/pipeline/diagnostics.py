"""
Diagnostics sink threaded through a generation run.

The linter and the pipeline report structured records here instead of
accumulating them in module state. Callers drain the sink at run end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class LintSeverity(str, Enum):
    """Severity of a diagnostic; ``OFF`` means the rule is not checked."""

    OFF = "off"
    WARNING = "warning"
    ERROR = "error"

    @staticmethod
    def parse(value: str) -> LintSeverity:
        normalized = value.strip().lower()
        if normalized == "warn":
            normalized = "warning"
        try:
            return LintSeverity(normalized)
        except ValueError:
            raise ValueError(f"Unknown severity level: {value} (expected: off, warning, error)") from None


@dataclass(frozen=True)
class Diagnostic:
    """A single reported issue."""

    rule: str
    severity: LintSeverity
    message: str
    schema: str | None = None

    def __str__(self) -> str:
        return f"[{self.rule}] {self.message}"


@dataclass
class DiagnosticSink:
    """Collects diagnostics for one run."""

    records: list[Diagnostic] = field(default_factory=list)

    def report(self, rule: str, severity: LintSeverity, message: str, schema: str | None = None) -> None:
        if severity == LintSeverity.OFF:
            return
        diagnostic = Diagnostic(rule=rule, severity=severity, message=message, schema=schema)
        self.records.append(diagnostic)
        if severity == LintSeverity.ERROR:
            logger.error("%s", diagnostic)
        else:
            logger.warning("%s", diagnostic)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.records if d.severity == LintSeverity.WARNING]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.records if d.severity == LintSeverity.ERROR]

    def has_errors(self) -> bool:
        return any(d.severity == LintSeverity.ERROR for d in self.records)

    def drain(self) -> list[Diagnostic]:
        """Return every collected diagnostic and empty the sink."""
        drained = list(self.records)
        self.records.clear()
        return drained
