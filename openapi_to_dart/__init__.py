"""OpenAPI to Dart Generator

A Python package for generating Dart model classes from Swagger 2 and
OpenAPI 3 documents. Supports plain Dart, json_serializable and freezed
output with incremental regeneration and marker-based merging into
hand-edited files.
"""

__version__ = "1.0.0"

from .pipeline import (
    CodeGeneratorConfig,
    DiagnosticSink,
    GenerationResult,
    GeneratorError,
    PipelineGenerator,
    StyleRegistry,
    load_config,
)

__all__ = [
    "PipelineGenerator",
    "GenerationResult",
    "CodeGeneratorConfig",
    "DiagnosticSink",
    "GeneratorError",
    "StyleRegistry",
    "load_config",
]
