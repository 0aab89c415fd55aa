"""
Lint rule identifiers and their severity configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..diagnostics import LintSeverity


class LintRuleId(str, Enum):
    """Stable tags of the spec-quality heuristics."""

    MISSING_TYPE = "missing_type"
    SUSPICIOUS_ID_FIELD = "suspicious_id_field"
    MISSING_REF_TARGET = "missing_ref_target"
    TYPE_INCONSISTENCY = "type_inconsistency"
    EMPTY_OBJECT = "empty_object"
    ARRAY_WITHOUT_ITEMS = "array_without_items"
    EMPTY_ENUM = "empty_enum"

    @staticmethod
    def parse(value: str) -> LintRuleId:
        """Parse a rule tag, accepting hyphenated and underscored spellings."""
        try:
            return LintRuleId(value.strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown lint rule: {value}") from None


DEFAULT_SEVERITIES: dict[LintRuleId, LintSeverity] = {
    LintRuleId.MISSING_TYPE: LintSeverity.WARNING,
    LintRuleId.SUSPICIOUS_ID_FIELD: LintSeverity.WARNING,
    LintRuleId.MISSING_REF_TARGET: LintSeverity.ERROR,
    LintRuleId.TYPE_INCONSISTENCY: LintSeverity.WARNING,
    LintRuleId.EMPTY_OBJECT: LintSeverity.WARNING,
    LintRuleId.ARRAY_WITHOUT_ITEMS: LintSeverity.WARNING,
    LintRuleId.EMPTY_ENUM: LintSeverity.WARNING,
}


@dataclass
class LintConfig:
    """Severity per rule. Rules missing from ``rules`` use their default."""

    rules: dict[LintRuleId, LintSeverity] = field(default_factory=lambda: dict(DEFAULT_SEVERITIES))

    @staticmethod
    def disabled() -> LintConfig:
        return LintConfig(rules={rule_id: LintSeverity.OFF for rule_id in LintRuleId})

    def severity(self, rule_id: LintRuleId) -> LintSeverity:
        return self.rules.get(rule_id, DEFAULT_SEVERITIES[rule_id])

    def is_enabled(self, rule_id: LintRuleId) -> bool:
        return self.severity(rule_id) != LintSeverity.OFF

    def merge(self, other: LintConfig) -> LintConfig:
        """Merge with another configuration (``other`` wins)."""
        return LintConfig(rules={**self.rules, **other.rules})

    @staticmethod
    def from_dict(d: dict) -> LintConfig:
        """Build from the ``lint`` section of a config file.

        Accepts ``enabled: false`` to turn every rule off, and per rule either
        ``rule: warning`` or ``rule: {severity: warning}``.
        """
        if d.get("enabled", True) is False:
            return LintConfig.disabled()

        config = LintConfig()
        for rule_name, value in (d.get("rules") or {}).items():
            rule_id = LintRuleId.parse(str(rule_name))
            if isinstance(value, dict):
                value = value.get("severity", "warning")
            # YAML reads a bare off/on as a boolean
            if isinstance(value, bool):
                value = "warning" if value else "off"
            config.rules[rule_id] = LintSeverity.parse(str(value))
        return config

    def to_dict(self) -> dict:
        return {"rules": {rule_id.value: severity.value for rule_id, severity in self.rules.items()}}
