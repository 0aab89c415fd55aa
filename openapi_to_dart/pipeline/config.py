"""
Configuration for the code generator pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .errors import ConfigError
from .linter.config import LintConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "openapi_to_dart.yaml"


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        atomic_write: Whether to write files through a temporary file and rename
        validate_before_write: Whether to sanity-check generated Dart before writing
    """

    atomic_write: bool = True
    validate_before_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for the post-processing formatter."""

    # Whether formatting is enabled
    enabled: bool = False

    # Page width passed to ``dart format``
    line_length: int = 80


@dataclass
class SchemaOverride:
    """Per-schema overrides."""

    # Custom class name instead of the PascalCase schema key
    class_name: str | None = None

    # JSON key -> Dart field name
    field_names: dict[str, str] = field(default_factory=dict)

    # Schema type -> Dart type (e.g. "string" -> "MyString")
    type_mapping: dict[str, str] = field(default_factory=dict)

    # Overrides the global use_json_key option for this schema
    use_json_key: bool | None = None

    @staticmethod
    def from_dict(d: dict) -> SchemaOverride:
        return SchemaOverride(
            class_name=d.get("className", d.get("class_name")),
            field_names={str(k): str(v) for k, v in (d.get("fieldNames", d.get("field_names")) or {}).items()},
            type_mapping={str(k): str(v) for k, v in (d.get("typeMapping", d.get("type_mapping")) or {}).items()},
            use_json_key=d.get("useJsonKey", d.get("use_json_key")),
        )

    def to_dict(self) -> dict:
        return {
            "class_name": self.class_name,
            "field_names": self.field_names,
            "type_mapping": self.type_mapping,
            "use_json_key": self.use_json_key,
        }


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Generation style: plain_dart, json_serializable, freezed or a registered custom style
    style: str = "plain_dart"

    # Directory receiving one Dart file per schema
    output_dir: str = "lib/models"

    # Project root (holds the incremental cache file)
    project_dir: str = "."

    # Emit @JsonKey(name: ...) when a JSON key differs from its Dart field name
    use_json_key: bool = False

    # Only regenerate schemas whose content hash changed since the last run
    changed_only: bool = False

    # Per-schema overrides keyed by schema name
    schema_overrides: dict[str, SchemaOverride] = field(default_factory=dict)

    # Spec-quality heuristics
    lint: LintConfig = field(default_factory=LintConfig)

    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    output: OutputConfig = field(default_factory=OutputConfig)

    def override_for(self, schema_name: str) -> SchemaOverride | None:
        return self.schema_overrides.get(schema_name)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary (snake_case keys)."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "schema_overrides" and isinstance(v, dict):
                config.schema_overrides = {
                    name: o if isinstance(o, SchemaOverride) else SchemaOverride.from_dict(o) for name, o in v.items()
                }
            elif k == "lint" and isinstance(v, dict):
                config.lint = LintConfig.from_dict(v)
            elif k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                config.output = OutputConfig(**v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "style": self.style,
            "output_dir": self.output_dir,
            "project_dir": self.project_dir,
            "use_json_key": self.use_json_key,
            "changed_only": self.changed_only,
            "schema_overrides": {name: o.to_dict() for name, o in self.schema_overrides.items()},
            "lint": self.lint.to_dict(),
            "formatter": {
                "enabled": self.formatter.enabled,
                "line_length": self.formatter.line_length,
            },
            "output": {
                "atomic_write": self.output.atomic_write,
                "validate_before_write": self.output.validate_before_write,
            },
        }

    def merge(self, **options) -> CodeGeneratorConfig:
        """Return a copy where every non-None option replaces the configured value.

        Used to apply command line options over a config file.
        """
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in options.items() if v is not None})
        return CodeGeneratorConfig(**values)


# YAML keys -> dataclass attributes
_YAML_KEYS = {
    "defaultStyle": "style",
    "outputDir": "output_dir",
    "projectDir": "project_dir",
    "useJsonKey": "use_json_key",
    "changedOnly": "changed_only",
}


def load_config(config_path: str | Path | None, project_dir: str | Path = ".") -> CodeGeneratorConfig:
    """
    Load generator configuration from a YAML file.

    Args:
        config_path: Explicit config path. When None, ``openapi_to_dart.yaml``
            in ``project_dir`` is used if it exists.
        project_dir: Project root used for the default lookup

    Returns:
        The loaded configuration (defaults when no file is found)

    Raises:
        ConfigError: If an explicit path is missing or the file is invalid
    """
    if config_path is None:
        default_path = Path(project_dir) / DEFAULT_CONFIG_FILE
        if not default_path.exists():
            return CodeGeneratorConfig()
        config_path = default_path

    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing configuration file {path}: {e}") from e
    return parse_config(data)


def parse_config(data: object) -> CodeGeneratorConfig:
    """Build a config from the decoded YAML mapping."""
    if data is None:
        return CodeGeneratorConfig()
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping.")

    config = CodeGeneratorConfig()
    try:
        for yaml_key, attribute in _YAML_KEYS.items():
            if data.get(yaml_key) is not None:
                setattr(config, attribute, data[yaml_key])

        if isinstance(data.get("lint"), dict):
            config.lint = LintConfig.from_dict(data["lint"])

        if isinstance(data.get("formatter"), dict):
            config.formatter = FormatterConfig(
                enabled=bool(data["formatter"].get("enabled", False)),
                line_length=int(data["formatter"].get("lineLength", 80)),
            )

        schemas = data.get("schemas")
        if isinstance(schemas, dict):
            config.schema_overrides = {
                str(name): SchemaOverride.from_dict(override) for name, override in schemas.items() if isinstance(override, dict)
            }
    except ValueError as e:
        raise ConfigError(f"Error parsing configuration file: {e}") from e

    return config
