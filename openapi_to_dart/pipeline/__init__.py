"""
Pipeline - OpenAPI / Swagger to Dart model generator.

1. Phase 1 (Parser): Parse the document into a schema index
2. Phase 2 (Linter): Report spec-quality diagnostics
3. Phase 3 (Analyzer): Resolve references, flatten compositions, build models
4. Phase 4 (Backend): Render models in the selected generation style
5. Phase 5 (Formatter): Optional ``dart format`` post-processing
6. Phase 6 (Merger): Write new files or patch the marker region of existing ones
"""

from __future__ import annotations

from .backends import StyleRegistry
from .cache import IncrementalCache
from .config import CodeGeneratorConfig, FormatterConfig, OutputConfig, SchemaOverride, load_config
from .diagnostics import Diagnostic, DiagnosticSink, LintSeverity
from .errors import (
    CacheCorrupt,
    CodeMergeError,
    ConfigError,
    GeneratorError,
    MarkerConflict,
    MissingVariantHandler,
    NullPayload,
    SpecLoadError,
    UnknownStyleError,
    UnknownVariantTag,
    UnresolvedReference,
)
from .generator import GenerationResult, PipelineGenerator
from .merger import AtomicWriter, FileMergeController

__all__ = [
    "PipelineGenerator",
    "GenerationResult",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "SchemaOverride",
    "load_config",
    "StyleRegistry",
    "IncrementalCache",
    "FileMergeController",
    "AtomicWriter",
    "Diagnostic",
    "DiagnosticSink",
    "LintSeverity",
    "GeneratorError",
    "SpecLoadError",
    "ConfigError",
    "UnknownStyleError",
    "UnresolvedReference",
    "UnknownVariantTag",
    "NullPayload",
    "MissingVariantHandler",
    "MarkerConflict",
    "CacheCorrupt",
    "CodeMergeError",
]
