"""
Spec-quality heuristics.
"""

from __future__ import annotations

from .config import DEFAULT_SEVERITIES, LintConfig, LintRuleId
from .linter import SpecLinter
from .rules import DEFAULT_RULES, LintRule

__all__ = [
    "LintConfig",
    "LintRuleId",
    "DEFAULT_SEVERITIES",
    "LintRule",
    "DEFAULT_RULES",
    "SpecLinter",
]
