"""
Tests for the incremental cache.
"""

from __future__ import annotations

import json
import logging

import pytest

from openapi_to_dart.pipeline.cache import CACHE_FILE_NAME, IncrementalCache, canonicalize, compute_schema_hash
from openapi_to_dart.pipeline.errors import CacheCorrupt

USER = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
}

USER_REORDERED = {
    "properties": {"name": {"type": "string"}, "id": {"type": "integer"}},
    "required": ["id"],
    "type": "object",
}


class TestSchemaHash:
    def test_reorder_invariance(self):
        assert compute_schema_hash(USER) == compute_schema_hash(USER_REORDERED)

    def test_content_change_changes_hash(self):
        changed = {**USER, "required": ["id", "name"]}
        assert compute_schema_hash(USER) != compute_schema_hash(changed)

    def test_fingerprint_is_folded_in(self):
        assert compute_schema_hash(USER, {"style": "freezed"}) != compute_schema_hash(USER, {"style": "plain_dart"})

    def test_canonicalize_sorts_nested_keys(self):
        assert list(canonicalize({"b": {"d": 1, "c": 2}, "a": 0})) == ["a", "b"]
        assert list(canonicalize({"b": {"d": 1, "c": 2}})["b"]) == ["c", "d"]


class TestIncrementalCache:
    def test_missing_file_is_empty(self, tmp_path):
        cache = IncrementalCache.load(tmp_path)

        assert cache.names == set()
        assert cache.should_regenerate("User", USER)
        assert not cache.recovered

    def test_commit_save_load(self, tmp_path):
        cache = IncrementalCache.load(tmp_path)
        cache.commit("User", USER)
        cache.save()

        data = json.loads((tmp_path / CACHE_FILE_NAME).read_text())
        assert set(data["schemaHashes"]) == {"User"}

        reloaded = IncrementalCache.load(tmp_path)
        assert not reloaded.should_regenerate("User", USER_REORDERED)
        assert reloaded.should_regenerate("User", {**USER, "description": "changed"})

    def test_fingerprint_change_regenerates(self, tmp_path):
        cache = IncrementalCache.load(tmp_path, {"style": "plain_dart"})
        cache.commit("User", USER)
        cache.save()

        assert IncrementalCache.load(tmp_path, {"style": "freezed"}).should_regenerate("User", USER)

    def test_removed_since(self, tmp_path):
        cache = IncrementalCache.load(tmp_path)
        cache.commit("A", USER)
        cache.commit("B", USER)
        cache.save()

        reloaded = IncrementalCache.load(tmp_path)
        assert reloaded.removed_since(["A"]) == {"B"}

        reloaded.drop("B")
        assert reloaded.names == {"A"}

    def test_corrupt_cache_recovers(self, tmp_path, caplog):
        (tmp_path / CACHE_FILE_NAME).write_text("{broken", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            cache = IncrementalCache.load(tmp_path)

        assert cache.recovered
        assert cache.names == set()
        assert cache.should_regenerate("User", USER)
        assert "unreadable cache" in caplog.text

    @pytest.mark.parametrize(
        "content",
        ["[]", '{"schemaHashes": []}', '{"schemaHashes": {"A": 1}}', "not json"],
    )
    def test_decode_rejects_invalid_records(self, content):
        with pytest.raises(CacheCorrupt):
            IncrementalCache.decode(content)

    def test_save_is_sorted_and_stable(self, tmp_path):
        cache = IncrementalCache.load(tmp_path)
        cache.commit("b", USER)
        cache.commit("a", USER)
        cache.save()
        first = (tmp_path / CACHE_FILE_NAME).read_text()

        cache.save()
        assert (tmp_path / CACHE_FILE_NAME).read_text() == first
        assert first.index('"a"') < first.index('"b"')
