"""
End-to-end tests of the generation pipeline.

Covers idempotence, incremental regeneration, removal of deleted schemas and
the isolation of file-scoped failures.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from openapi_to_dart.pipeline import CodeGeneratorConfig, PipelineGenerator
from openapi_to_dart.pipeline.cache import CACHE_FILE_NAME
from openapi_to_dart.pipeline.config import FormatterConfig
from openapi_to_dart.pipeline.errors import MarkerConflict, UnknownStyleError, UnresolvedReference
from openapi_to_dart.pipeline.formatters import Formatter
from openapi_to_dart.pipeline.merger import BEGIN_MARKER, END_MARKER, IDENTITY_MARKER, read_exact, render_new

TEST_DATA = Path(__file__).parent / "test_data"

ALPHA = {"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}}}
BETA = {"type": "object", "properties": {"label": {"type": "string"}}}


def document(schemas: dict) -> dict:
    return {"openapi": "3.0.0", "info": {"title": "t", "version": "1"}, "components": {"schemas": schemas}}


@pytest.fixture
def project(tmp_path):
    """A project directory with a spec file and a config pointing inside it."""

    class Project:
        root = tmp_path
        spec = tmp_path / "api.json"
        models = tmp_path / "lib" / "models"

        def write_spec(self, schemas: dict) -> Path:
            self.spec.write_text(json.dumps(document(schemas)), encoding="utf-8")
            return self.spec

        def config(self, **options) -> CodeGeneratorConfig:
            return CodeGeneratorConfig(output_dir=str(self.models), project_dir=str(self.root), **options)

        def run(self, schemas: dict, **options):
            return PipelineGenerator(self.config(**options)).run(self.write_spec(schemas))

        def cached_names(self) -> set[str]:
            return set(json.loads((self.root / CACHE_FILE_NAME).read_text())["schemaHashes"])

    return Project()


class TestGeneration:
    def test_one_file_per_schema(self, tmp_path):
        models = tmp_path / "models"
        config = CodeGeneratorConfig(output_dir=str(models), project_dir=str(tmp_path))

        result = PipelineGenerator(config).run(TEST_DATA / "petstore.yaml")

        assert result.ok
        assert sorted(p.name for p in models.iterdir()) == [
            "cat.dart",
            "dog.dart",
            "owner.dart",
            "pet.dart",
            "role.dart",
            "user.dart",
        ]
        assert result.files_created == 6
        assert result.schemas_processed == 6
        assert result.enums_generated == 1
        for path in models.iterdir():
            assert read_exact(path).startswith(f"{IDENTITY_MARKER}\n")

    def test_swagger_2(self, tmp_path):
        models = tmp_path / "models"
        config = CodeGeneratorConfig(output_dir=str(models), project_dir=str(tmp_path))

        PipelineGenerator(config).run(TEST_DATA / "swagger2.json")

        order = read_exact(models / "order.dart")
        assert "import 'order_item.dart';" in order
        assert "enum OrderStatus {" in order
        assert (models / "order_item.dart").exists()

    @pytest.mark.parametrize(
        "style, expected",
        [
            ("plain_dart", "factory User.fromJson(Map<String, dynamic> json) {"),
            ("json_serializable", "part 'user.g.dart';"),
            ("freezed", "part 'user.freezed.dart';"),
        ],
    )
    def test_styles(self, tmp_path, style, expected):
        models = tmp_path / "models"
        config = CodeGeneratorConfig(style=style, output_dir=str(models), project_dir=str(tmp_path))

        PipelineGenerator(config).run(TEST_DATA / "petstore.yaml")

        assert expected in read_exact(models / "user.dart")

    def test_unknown_style(self):
        with pytest.raises(UnknownStyleError):
            PipelineGenerator(CodeGeneratorConfig(style="built_value"))

    def test_idempotent(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA})
        first = {p.name: read_exact(p) for p in project.models.iterdir()}

        result = project.run({"Alpha": ALPHA, "Beta": BETA})
        second = {p.name: read_exact(p) for p in project.models.iterdir()}

        assert first == second
        assert result.files_created == 0
        assert result.files_updated == 0

    def test_formatter_is_applied(self, project):
        class Stamp(Formatter):
            def format(self, code, config):
                return f"// width {config.line_length}\n{code}"

            def is_available(self):
                return True

        config = project.config(formatter=FormatterConfig(enabled=True, line_length=100))
        PipelineGenerator(config, formatter=Stamp()).run(project.write_spec({"Alpha": ALPHA}))

        assert "// width 100\n" in read_exact(project.models / "alpha.dart")

    def test_lint_diagnostics_are_returned(self, project):
        schemas = {"Alpha": {"type": "object", "properties": {"owner_id": {"type": "integer"}}}}

        result = project.run(schemas)

        assert [d.rule for d in result.diagnostics] == ["suspicious_id_field"]
        assert result.lint_errors == []
        assert result.ok


class TestIncremental:
    def test_only_changed_schemas_are_regenerated(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA}, changed_only=True)
        beta_mtime = (project.models / "beta.dart").stat().st_mtime_ns

        changed_alpha = {**ALPHA, "properties": {**ALPHA["properties"], "name": {"type": "string"}}}
        result = project.run({"Alpha": changed_alpha, "Beta": BETA}, changed_only=True)

        assert result.skipped == ["Beta"]
        assert result.written_files == [project.models / "alpha.dart"]
        assert "final String name;" in read_exact(project.models / "alpha.dart")
        assert (project.models / "beta.dart").stat().st_mtime_ns == beta_mtime

    def test_key_order_does_not_trigger_regeneration(self, project):
        project.run({"Alpha": ALPHA}, changed_only=True)

        reordered = {"properties": ALPHA["properties"], "required": ["id"], "type": "object"}
        result = project.run({"Alpha": reordered}, changed_only=True)

        assert result.skipped == ["Alpha"]

    def test_property_order_does_not_change_output(self, project):
        user = {"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}, "name": {"type": "string"}}}
        permuted = {**user, "properties": {"name": user["properties"]["name"], "id": user["properties"]["id"]}}
        project.run({"User": user}, changed_only=True)
        fresh = read_exact(project.models / "user.dart")

        result = project.run({"User": permuted}, changed_only=True)
        assert result.skipped == ["User"]
        assert read_exact(project.models / "user.dart") == fresh

        project.run({"User": permuted})
        assert read_exact(project.models / "user.dart") == fresh

    def test_missing_file_is_regenerated(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA}, changed_only=True)
        (project.models / "beta.dart").unlink()

        result = project.run({"Alpha": ALPHA, "Beta": BETA}, changed_only=True)

        assert result.skipped == ["Alpha"]
        assert (project.models / "beta.dart").exists()

    def test_style_change_regenerates_everything(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA}, changed_only=True)

        result = project.run({"Alpha": ALPHA, "Beta": BETA}, changed_only=True, style="freezed")

        assert result.skipped == []
        assert "@freezed" in read_exact(project.models / "alpha.dart")

    def test_removed_schema_is_deleted(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA})

        result = project.run({"Alpha": ALPHA})

        assert not (project.models / "beta.dart").exists()
        assert result.deleted_files == [project.models / "beta.dart"]
        assert project.cached_names() == {"Alpha"}

    def test_removed_schema_without_marker_is_kept(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA})
        (project.models / "beta.dart").write_text("class Beta {}\n", encoding="utf-8")

        result = project.run({"Alpha": ALPHA})

        assert (project.models / "beta.dart").read_text(encoding="utf-8") == "class Beta {}\n"
        assert result.deleted_files == []
        assert project.cached_names() == {"Alpha"}

    def test_user_code_survives_regeneration(self, project):
        project.run({"Alpha": ALPHA})
        path = project.models / "alpha.dart"
        content = read_exact(path)
        content = content.replace(f"{IDENTITY_MARKER}\n", f"{IDENTITY_MARKER}\nimport 'package:meta/meta.dart';\n")
        content += "\nextension AlphaLabel on Alpha {\n  String get label => 'alpha $id';\n}\n"
        path.write_text(content, encoding="utf-8", newline="")

        changed_alpha = {**ALPHA, "properties": {**ALPHA["properties"], "name": {"type": "string"}}}
        project.run({"Alpha": changed_alpha})
        updated = read_exact(path)

        assert "import 'package:meta/meta.dart';\n" in updated
        assert updated.endswith("\nextension AlphaLabel on Alpha {\n  String get label => 'alpha $id';\n}\n")
        assert "final String name;" in updated


class TestFailures:
    def test_foreign_file_fails_only_its_schema(self, project):
        project.models.mkdir(parents=True)
        (project.models / "beta.dart").write_text("class Beta {}\n", encoding="utf-8")

        result = project.run({"Alpha": ALPHA, "Beta": BETA})

        assert not result.ok
        assert isinstance(result.failed["Beta"], MarkerConflict)
        assert (project.models / "beta.dart").read_text(encoding="utf-8") == "class Beta {}\n"
        assert (project.models / "alpha.dart").exists()
        assert project.cached_names() == {"Alpha"}

    def test_broken_region_fails_only_its_schema(self, project):
        project.run({"Alpha": ALPHA, "Beta": BETA})
        path = project.models / "beta.dart"
        path.write_text(read_exact(path).replace(END_MARKER, ""), encoding="utf-8", newline="")

        result = project.run({"Alpha": ALPHA, "Beta": BETA})

        assert list(result.failed) == ["Beta"]
        assert END_MARKER not in read_exact(path)

    def test_unresolved_reference_is_fatal(self, project):
        schemas = {"Alpha": {"type": "object", "properties": {"beta": {"$ref": "#/components/schemas/Gone"}}}}

        with pytest.raises(UnresolvedReference, match="Gone"):
            project.run(schemas)

        assert not (project.root / CACHE_FILE_NAME).exists()
        assert not (project.models / "alpha.dart").exists()


class TestProjectScan:
    def test_generated_file_outside_output_dir_is_updated_in_place(self, project):
        legacy = project.root / "lib" / "legacy" / "alpha.dart"
        legacy.parent.mkdir(parents=True)
        legacy.write_text(render_new("class Alpha {}") + "\n// kept\n", encoding="utf-8")

        result = project.run({"Alpha": ALPHA})

        content = read_exact(legacy)
        assert result.written_files == [legacy]
        assert "final int id;" in content
        assert content.endswith("// kept\n")
        assert BEGIN_MARKER in content
        assert not (project.models / "alpha.dart").exists()

    def test_generated_file_outside_output_dir_is_skipped_when_unchanged(self, project):
        legacy = project.root / "lib" / "legacy" / "alpha.dart"
        legacy.parent.mkdir(parents=True)
        legacy.write_text(render_new("class Alpha {}"), encoding="utf-8")
        project.run({"Alpha": ALPHA}, changed_only=True)
        mtime = legacy.stat().st_mtime_ns

        result = project.run({"Alpha": ALPHA}, changed_only=True)

        assert result.skipped == ["Alpha"]
        assert result.written_files == []
        assert legacy.stat().st_mtime_ns == mtime
        assert not (project.models / "alpha.dart").exists()

    def test_build_directories_are_ignored(self, project):
        built = project.root / "build" / "alpha.dart"
        built.parent.mkdir(parents=True)
        built.write_text(render_new("class Alpha {}"), encoding="utf-8")

        project.run({"Alpha": ALPHA})

        assert (project.models / "alpha.dart").exists()
        assert read_exact(built) == render_new("class Alpha {}")
