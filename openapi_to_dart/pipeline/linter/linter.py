"""
Spec linter: runs heuristic quality checks over the schema index.

Findings are reported to a DiagnosticSink with the configured severity.
Linting never aborts generation; an error severity only changes how the
caller reports the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from ..diagnostics import DiagnosticSink
from ..schema_ast.nodes import CompositionNode, DefinitionNode, ObjectNode, SchemaIndex, SchemaKind
from .config import LintConfig
from .rules import DEFAULT_RULES, LintRule

logger = logging.getLogger(__name__)


class SpecLinter:
    """Applies the enabled lint rules to a schema index."""

    def __init__(self, config: LintConfig, sink: DiagnosticSink, rules: Iterable[type[LintRule]] = DEFAULT_RULES):
        self.config = config
        self.sink = sink
        self.rules = [rule() for rule in rules if config.is_enabled(rule.rule_id)]

    def lint(self, index: SchemaIndex, names: Iterable[str] | None = None) -> int:
        """
        Lint the given schemas (every schema of the index by default).

        Args:
            index: The parsed schema index
            names: Schema names to lint, in order

        Returns:
            Number of diagnostics reported
        """
        if not self.rules:
            return 0

        reported = 0
        for name in names if names is not None else index.names():
            definition = index.get(name)
            if definition is None:
                continue
            reported += self._lint_definition(definition, index)
        logger.debug("Linted %d schema(s), %d finding(s)", len(index), reported)
        return reported

    def _lint_definition(self, definition: DefinitionNode, index: SchemaIndex) -> int:
        reported = 0
        for rule in self.rules:
            for message in rule.check_definition(definition, index):
                self._report(rule, message, definition.name)
                reported += 1

        for obj in self._objects_of(definition):
            for prop in obj.properties:
                for rule in self.rules:
                    for message in rule.check_property(definition.name, obj, prop, index):
                        self._report(rule, message, definition.name)
                        reported += 1
        return reported

    def _objects_of(self, definition: DefinitionNode) -> Iterator[ObjectNode]:
        """Object nodes whose properties belong to the definition's own class."""
        body = definition.body
        if isinstance(body, ObjectNode):
            yield body
        elif isinstance(body, CompositionNode) and body.operator == SchemaKind.ALL_OF:
            for part in body.parts:
                if isinstance(part, ObjectNode):
                    yield part
            if body.own is not None:
                yield body.own

    def _report(self, rule: LintRule, message: str, schema: str) -> None:
        self.sink.report(rule.rule_id.value, self.config.severity(rule.rule_id), message, schema=schema)
