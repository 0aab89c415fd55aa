"""
Generation pipeline.

Runs the phases in order for one document:
    1. Load and parse the document into a schema index
    2. Lint the schemas that will be processed
    3. Analyze the index into class models
    4. Render each model with the selected backend
    5. Write or patch one file per schema, skipping unchanged schemas in
       incremental mode
    6. Delete the files of removed schemas and persist the cache
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .analyzer import IR, EnumDef, NameResolver, SchemaAnalyzer
from .backends import ClassGeneratorStrategy, StyleRegistry
from .cache import IncrementalCache
from .config import CodeGeneratorConfig
from .diagnostics import Diagnostic, DiagnosticSink
from .errors import CodeMergeError, MarkerConflict
from .formatters import DartFormatter, Formatter
from .linter import SpecLinter
from .loader import load_spec
from .merger import AtomicWriter, FileMergeController, WriteOutcome, has_identity, read_exact
from .schema_ast import SchemaIndex, SchemaParser

logger = logging.getLogger(__name__)

# Directories never scanned for previously generated files
SKIPPED_DIRECTORIES = {".dart_tool", ".git", "build", ".idea", ".pub-cache"}


@dataclass
class GenerationResult:
    """Outcome of one run."""

    output_dir: Path
    written_files: list[Path] = field(default_factory=list)
    deleted_files: list[Path] = field(default_factory=list)

    # Schemas left untouched because their hash did not change
    skipped: list[str] = field(default_factory=list)

    # Schema name -> error, for file-scoped failures
    failed: dict[str, Exception] = field(default_factory=dict)

    schemas_processed: int = 0
    enums_generated: int = 0
    files_created: int = 0
    files_updated: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def lint_errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity.value == "error"]


class PipelineGenerator:
    """Generates Dart models for every schema of a document."""

    def __init__(
        self,
        config: CodeGeneratorConfig,
        sink: DiagnosticSink | None = None,
        registry: StyleRegistry | None = None,
        formatter: Formatter | None = None,
    ):
        """
        Initialize the generator.

        Args:
            config: Generator configuration
            sink: Diagnostics sink (a fresh one by default)
            registry: Style registry used to resolve ``config.style``
            formatter: Post-processor used when formatting is enabled

        Raises:
            UnknownStyleError: If the configured style is not registered
        """
        self.config = config
        self.sink = sink if sink is not None else DiagnosticSink()
        self.registry = registry or StyleRegistry()
        self.backend: ClassGeneratorStrategy = self.registry.resolve(config.style, config)
        self.formatter = formatter or DartFormatter()
        self.names = NameResolver(config)
        self.writer = AtomicWriter(atomic=config.output.atomic_write)
        self.files = FileMergeController(self.writer, validate=config.output.validate_before_write)

    def fingerprint(self) -> dict[str, Any]:
        """Generation settings that invalidate every cached hash when changed."""
        return {
            "style": self.backend.STYLE or self.config.style,
            "use_json_key": self.config.use_json_key,
            "schema_overrides": {name: o.to_dict() for name, o in sorted(self.config.schema_overrides.items())},
        }

    def run(self, source: str | Path) -> GenerationResult:
        """
        Generate the models of a document.

        Args:
            source: Local path or URL of the document

        Returns:
            GenerationResult describing what was written

        Raises:
            SpecLoadError: If the document cannot be loaded
            UnresolvedReference: If a reference designates an unknown schema
        """
        document = load_spec(source)
        return self.generate(SchemaParser().parse(document))

    def generate(self, index: SchemaIndex) -> GenerationResult:
        """Generate the models of an already parsed index."""
        output_dir = Path(self.config.output_dir)
        project_dir = Path(self.config.project_dir)
        result = GenerationResult(output_dir=output_dir)

        cache = IncrementalCache.load(project_dir, self.fingerprint())
        existing = self._scan_project(project_dir, output_dir)
        names = index.names()
        pending = [name for name in names if self._should_process(name, index, cache, output_dir, existing)]
        result.skipped = [name for name in names if name not in pending]
        for name in result.skipped:
            logger.debug("Skipping %s (unchanged)", name)

        SpecLinter(self.config.lint, self.sink).lint(index, pending)

        ir = SchemaAnalyzer(self.config).analyze(index)
        self.backend.prepare(ir)

        output_dir.mkdir(parents=True, exist_ok=True)

        for name in pending:
            definition = index.get(name)
            try:
                path = self._write_model(ir, name, output_dir, existing, result)
            except (MarkerConflict, CodeMergeError, OSError) as e:
                logger.error("Failed to write %s: %s", name, e)
                result.failed[name] = e
                cache.drop(name)
                continue
            result.written_files.append(path)
            result.schemas_processed += 1
            cache.commit(name, definition.raw)

        for name in sorted(cache.removed_since(names)):
            self._delete_removed(name, output_dir, result)
            cache.drop(name)

        cache.save(self.writer)
        result.diagnostics = self.sink.drain()
        logger.info(
            "Processed %d schema(s): %d created, %d updated, %d skipped, %d failed",
            result.schemas_processed,
            result.files_created,
            result.files_updated,
            len(result.skipped),
            len(result.failed),
        )
        return result

    def _should_process(
        self, name: str, index: SchemaIndex, cache: IncrementalCache, output_dir: Path, existing: dict[str, Path]
    ) -> bool:
        if not self.config.changed_only:
            return True
        if not self._target_path(name, output_dir, existing).exists():
            return True
        return cache.should_regenerate(name, index.get(name).raw)

    def _write_model(
        self,
        ir: IR,
        name: str,
        output_dir: Path,
        existing: dict[str, Path],
        result: GenerationResult,
    ) -> Path:
        model = ir.get(name)
        file_name = self.names.file_name(name)
        imports = [self.names.file_name(dependency) for dependency in model.dependencies]
        body = self.backend.render_file(model, file_name[: -len(".dart")], imports)

        if self.config.formatter.enabled:
            body = self.formatter.format(body, self.config.formatter)

        path = self._target_path(name, output_dir, existing)
        outcome = self.files.write(path, body)
        if outcome == WriteOutcome.CREATED:
            result.files_created += 1
        elif outcome == WriteOutcome.UPDATED:
            result.files_updated += 1
        if isinstance(model, EnumDef):
            result.enums_generated += 1
        return path

    def _target_path(self, name: str, output_dir: Path, existing: dict[str, Path]) -> Path:
        """The output file of a schema, or a generated file of the same name found elsewhere in the project."""
        file_name = self.names.file_name(name)
        path = output_dir / file_name
        if not path.exists() and file_name in existing:
            logger.debug("Using %s found outside the output directory", existing[file_name])
            return existing[file_name]
        return path

    def _delete_removed(self, name: str, output_dir: Path, result: GenerationResult) -> None:
        path = output_dir / self.names.file_name(name)
        if not path.exists():
            return
        if not has_identity(read_exact(path)):
            logger.warning("Not deleting %s: it was not generated by openapi_to_dart", path)
            return
        path.unlink()
        result.deleted_files.append(path)
        logger.info("Deleted %s (schema %s removed)", path, name)

    def _scan_project(self, project_dir: Path, output_dir: Path) -> dict[str, Path]:
        """
        Find generated files placed outside the output directory.

        Returns:
            File name -> path of the first generated file found with that name
        """
        found: dict[str, Path] = {}
        if not project_dir.is_dir():
            return found
        resolved_output = output_dir.resolve()
        for path in sorted(project_dir.rglob("*.dart")):
            if SKIPPED_DIRECTORIES.intersection(path.relative_to(project_dir).parts):
                continue
            if path.parent.resolve() == resolved_output or path.name in found:
                continue
            try:
                content = read_exact(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Cannot read %s: %s", path, e)
                continue
            if has_identity(content):
                found[path.name] = path
        logger.debug("Found %d generated file(s) outside %s", len(found), output_dir)
        return found

