"""
Tests for marker-region merging into existing files.

User code outside the generated region must survive regeneration byte for
byte; files that cannot be patched safely must never be overwritten.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from openapi_to_dart.pipeline.errors import CodeMergeError, MarkerConflict
from openapi_to_dart.pipeline.merger import (
    BEGIN_MARKER,
    END_MARKER,
    IDENTITY_MARKER,
    AtomicWriter,
    FileMergeController,
    WriteOutcome,
    has_identity,
    locate_region,
    read_exact,
    render_new,
    splice,
)

BODY = "class User {\n  final int id;\n\n  const User({required this.id});\n}"

EXISTING = (
    f"{IDENTITY_MARKER}\n"
    "import 'package:collection/collection.dart';\n"
    "\n"
    f"{BEGIN_MARKER}\n"
    "\n"
    "class User {}\n"
    "\n"
    f"{END_MARKER}\n"
    "\n"
    "extension UserX on User {\n"
    "  String get label => 'user';\n"
    "}\n"
)


class TestMarkerAlgebra:
    def test_new_file_layout(self):
        content = render_new(BODY)

        assert content.startswith(f"{IDENTITY_MARKER}\n\n{BEGIN_MARKER}\n\n")
        assert content.endswith(f"\n\n{END_MARKER}\n")
        assert BODY in content

    def test_identity_must_be_a_whole_line(self):
        assert has_identity(EXISTING)
        assert not has_identity(f"// see {IDENTITY_MARKER} docs\n")

    def test_splice_preserves_outside_bytes(self):
        region = locate_region(EXISTING)
        updated = splice(EXISTING, region, BODY)

        before, _, rest = updated.partition(BEGIN_MARKER)
        _, _, after = rest.partition(END_MARKER)
        original_before, _, original_rest = EXISTING.partition(BEGIN_MARKER)
        _, _, original_after = original_rest.partition(END_MARKER)

        assert before == original_before
        assert after == original_after
        assert BODY in updated

    def test_missing_end_marker(self):
        with pytest.raises(MarkerConflict, match="missing"):
            locate_region(f"{IDENTITY_MARKER}\n{BEGIN_MARKER}\nclass A {{}}\n")

    def test_multiple_pairs_conflict(self):
        text = f"{IDENTITY_MARKER}\n{BEGIN_MARKER}\n{END_MARKER}\n{BEGIN_MARKER}\n{END_MARKER}\n"
        with pytest.raises(MarkerConflict, match="exactly one pair"):
            locate_region(text, "user.dart")

    def test_out_of_order_markers(self):
        with pytest.raises(MarkerConflict):
            locate_region(f"{IDENTITY_MARKER}\n{END_MARKER}\n{BEGIN_MARKER}\n")


class TestFileMergeController:
    def test_create(self, tmp_path):
        path = tmp_path / "user.dart"
        outcome = FileMergeController().write(path, BODY)

        assert outcome == WriteOutcome.CREATED
        assert read_exact(path) == render_new(BODY)

    def test_update_preserves_user_code(self, tmp_path):
        path = tmp_path / "user.dart"
        path.write_text(EXISTING, encoding="utf-8", newline="")

        outcome = FileMergeController().write(path, BODY)
        content = read_exact(path)

        assert outcome == WriteOutcome.UPDATED
        assert "import 'package:collection/collection.dart';" in content
        assert "extension UserX on User {" in content
        assert "class User {}" not in content
        assert BODY in content

    def test_unchanged_file_is_not_rewritten(self, tmp_path):
        path = tmp_path / "user.dart"
        controller = FileMergeController()
        controller.write(path, BODY)
        mtime = path.stat().st_mtime_ns

        assert controller.write(path, BODY) == WriteOutcome.UNCHANGED
        assert path.stat().st_mtime_ns == mtime

    def test_crlf_outside_region_is_preserved(self, tmp_path):
        path = tmp_path / "user.dart"
        existing = EXISTING.replace("extension UserX on User {\n", "extension UserX on User {\r\n")
        path.write_text(existing, encoding="utf-8", newline="")

        FileMergeController().write(path, BODY)

        assert "extension UserX on User {\r\n" in read_exact(path)

    def test_foreign_file_is_never_overwritten(self, tmp_path):
        path = tmp_path / "user.dart"
        path.write_text("class User {}\n", encoding="utf-8")

        with pytest.raises(MarkerConflict, match="identity marker"):
            FileMergeController().write(path, BODY)
        assert path.read_text(encoding="utf-8") == "class User {}\n"

    def test_file_without_region_is_never_overwritten(self, tmp_path):
        path = tmp_path / "user.dart"
        original = f"{IDENTITY_MARKER}\nclass User {{}}\n"
        path.write_text(original, encoding="utf-8")

        with pytest.raises(MarkerConflict):
            FileMergeController().write(path, BODY)
        assert path.read_text(encoding="utf-8") == original


class TestAtomicWriter:
    def test_unbalanced_dart_is_rejected(self, tmp_path):
        path = tmp_path / "broken.dart"

        with pytest.raises(CodeMergeError):
            AtomicWriter().write(path, "class Broken {\n")
        assert not path.exists()

    def test_braces_in_strings_and_comments_are_ignored(self, tmp_path):
        path = tmp_path / "ok.dart"
        AtomicWriter().write(path, "// {\nconst a = '}'; /* ( */\nclass A {}\n")

        assert path.exists()

    def test_no_temporary_files_left(self, tmp_path):
        AtomicWriter().write(tmp_path / "a.dart", "class A {}\n")

        assert [p.name for p in tmp_path.iterdir()] == ["a.dart"]

    def test_non_dart_files_are_not_validated(self, tmp_path):
        path = tmp_path / "cache.json"
        AtomicWriter().write(path, "{")

        assert Path(path).read_text(encoding="utf-8") == "{"
