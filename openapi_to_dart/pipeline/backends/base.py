"""
Base class for code generation backends.

Defines the interface every generation style implements. The analyzer's
models carry fully resolved types; a backend only decides how they read
as Dart.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.ir_nodes import IR, ClassDef, EnumDef, FieldDef, MapClassDef, ModelDef, TypedefDef, TypeKind
from ..analyzer.unions import UnionModel, WrapperModel
from ..config import CodeGeneratorConfig
from .dart_types import DartTypes, dart_literal, dart_string, doc_lines, enum_value_type

TEMPLATE_ROOT = Path(__file__).parent.parent.parent / "templates"


class ClassGeneratorStrategy(ABC):
    """Abstract base class for generation styles."""

    # Style name used in configuration
    STYLE: str = ""

    # Template directories searched in order (style specific first, then shared)
    TEMPLATE_DIRS: tuple[str, ...] = ("common",)

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.types = DartTypes()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader([str(TEMPLATE_ROOT / name) for name in self.TEMPLATE_DIRS]),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=False,
        )
        self.jinja_env.filters["dart_string"] = dart_string
        self.jinja_env.filters["dart_literal"] = dart_literal

    def prepare(self, ir: IR) -> None:
        """Bind the backend to the models of one run."""
        wrappers = {m.name for m in ir.models.values() if isinstance(m, WrapperModel)}
        self.types = DartTypes(dynamic_json_classes=wrappers)

    @abstractmethod
    def imports_and_parts(self, file_stem: str, needs_codegen: bool) -> list[str]:
        """
        Import and part directives the style needs.

        Args:
            file_stem: File name without the ``.dart`` extension
            needs_codegen: Whether the file holds a class handled by build_runner

        Returns:
            Directive lines (imports first, then parts)
        """

    def class_annotations(self, class_def: ClassDef) -> list[str]:
        """Annotations placed above a generated class."""
        return []

    def enum_annotations(self, enum_def: EnumDef) -> list[str]:
        """Annotations placed above a generated enum."""
        return []

    def needs_codegen(self, model: ModelDef) -> bool:
        """Whether build_runner generates code for this model's file."""
        return False

    # Rendering

    def render_model(self, model: ModelDef) -> str:
        """Render a model and the inline models declared with it."""
        parts = [self._render_one(model)]
        parts.extend(self._render_one(inline) for inline in model.inline_models)
        return "\n\n".join(part.strip("\n") for part in parts if part.strip())

    def _render_one(self, model: ModelDef) -> str:
        if isinstance(model, UnionModel):
            return self.render_union(model)
        if isinstance(model, WrapperModel):
            return self.render_wrapper(model)
        if isinstance(model, EnumDef):
            return self.render_enum(model)
        if isinstance(model, MapClassDef):
            return self.render_map_class(model)
        if isinstance(model, TypedefDef):
            return self.render_typedef(model)
        if isinstance(model, ClassDef):
            return self.render_class(model)
        raise TypeError(f"Cannot render {type(model).__name__}")

    def render_class(self, class_def: ClassDef) -> str:
        template = self.jinja_env.get_template("class.dart.jinja2")
        return template.render(**self._prepare_class_context(class_def))

    def render_enum(self, enum_def: EnumDef) -> str:
        template = self.jinja_env.get_template("enum.dart.jinja2")
        return template.render(
            name=enum_def.name,
            doc_lines=doc_lines(enum_def.description),
            annotations=self.enum_annotations(enum_def),
            members=enum_def.members,
            value_type=enum_value_type(enum_def),
        )

    def render_union(self, union: UnionModel) -> str:
        template = self.jinja_env.get_template("union.dart.jinja2")
        return template.render(
            name=union.name,
            doc_lines=doc_lines(union.description),
            discriminator=union.discriminator,
            variants=union.variants,
            operator=union.operator.value,
        )

    def render_wrapper(self, wrapper: WrapperModel) -> str:
        template = self.jinja_env.get_template("wrapper.dart.jinja2")
        return template.render(
            name=wrapper.name,
            doc_lines=doc_lines(wrapper.description),
            operator=wrapper.operator.value,
            alternatives=wrapper.alternatives,
        )

    def render_map_class(self, map_class: MapClassDef) -> str:
        template = self.jinja_env.get_template("map_class.dart.jinja2")
        value_type = map_class.value_type
        return template.render(
            name=map_class.name,
            doc_lines=doc_lines(map_class.description),
            value_type=self.types.translate_type(value_type, value_type.nullable),
            value_from_json=self.types.from_json("v", value_type, value_type.nullable, depth=1),
            value_to_json=self.types.to_json("v", value_type, value_type.nullable, depth=1),
            needs_conversion=value_type.kind != TypeKind.DYNAMIC or value_type.override is not None,
        )

    def render_typedef(self, typedef: TypedefDef) -> str:
        template = self.jinja_env.get_template("typedef.dart.jinja2")
        return template.render(
            name=typedef.name,
            doc_lines=doc_lines(typedef.description),
            target=self.types.translate_type(typedef.target),
        )

    def render_file(self, model: ModelDef, file_stem: str, model_imports: list[str]) -> str:
        """
        Render the generated content of a model's file.

        Args:
            model: The model to render
            file_stem: File name without extension (for part directives)
            model_imports: Relative import paths of referenced models

        Returns:
            The generated code placed between the region markers
        """
        directives = self.imports_and_parts(file_stem, self.needs_codegen(model))
        imports = [d for d in directives if d.startswith("import ")]
        parts = [d for d in directives if d.startswith("part ")]
        imports.extend(f"import {dart_string(path)};" for path in sorted(set(model_imports)))

        template = self.jinja_env.get_template("file.dart.jinja2")
        return template.render(imports=imports, parts=parts, body=self.render_model(model))

    # Context preparation

    def _prepare_class_context(self, class_def: ClassDef) -> dict[str, Any]:
        """
        Prepare the template context for a class.

        Args:
            class_def: The class definition

        Returns:
            Dictionary of template variables
        """
        lines = doc_lines(class_def.description)
        if class_def.composed_of or class_def.cycle_refs:
            if lines:
                lines.append("///")
            if class_def.composed_of:
                lines.append(f"/// Composed of: {', '.join(class_def.composed_of)}.")
            if class_def.cycle_refs:
                lines.append(f"/// Recursively composes: {', '.join(class_def.cycle_refs)}.")

        return {
            "name": class_def.name,
            "doc_lines": lines,
            "annotations": self.class_annotations(class_def),
            "fields": [self._prepare_field_context(f, class_def) for f in class_def.fields],
        }

    def _prepare_field_context(self, field: FieldDef, class_def: ClassDef) -> dict[str, Any]:
        return {
            "name": field.name,
            "json_key": field.json_key,
            "key_literal": dart_string(field.json_key),
            "type": self.types.translate_type(field.type_ref, field.nullable),
            "required": field.is_required,
            "doc_lines": doc_lines(field.description, field.example),
            "json_key_annotation": class_def.use_json_key and field.needs_json_key(),
            "from_json": self.types.from_json(f"json[{dart_string(field.json_key)}]", field.type_ref, field.nullable),
            "to_json": self.types.to_json(field.name, field.type_ref, field.nullable),
        }
