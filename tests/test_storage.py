"""
Tests for storage.py - in-memory and JSON-file stores.
"""

import json

import pytest

from portability.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


class TestInMemoryKeyValueStore:
    """Test the in-process store."""

    def test_get_missing_key(self):
        assert InMemoryKeyValueStore().get("nope") is None

    def test_put_then_get(self):
        store = InMemoryKeyValueStore()
        store.put("tok", {"UUID": "i", "TOKEN": "tok"})
        assert store.get("tok") == {"UUID": "i", "TOKEN": "tok"}

    def test_put_replaces_entry(self):
        store = InMemoryKeyValueStore()
        store.put("tok", {"UUID": "i", "TOKEN": "tok", "DATA_TYPE": "MAIL"})
        store.put("tok", {"UUID": "i", "TOKEN": "tok"})
        assert store.get("tok") == {"UUID": "i", "TOKEN": "tok"}

    def test_returned_mapping_is_a_copy(self):
        store = InMemoryKeyValueStore()
        store.put("tok", {"UUID": "i", "TOKEN": "tok"})
        store.get("tok")["DATA_TYPE"] = "MAIL"
        assert "DATA_TYPE" not in store.get("tok")

    def test_nested_payload_is_not_shared_with_caller(self):
        """Changing a payload after put or get leaves the stored entry alone."""
        store = InMemoryKeyValueStore()
        payload = {"access_token": "xyz"}
        store.put("tok", {"UUID": "i", "TOKEN": "tok", "EXPORT_AUTH_DATA": payload})

        payload["access_token"] = "changed"
        store.get("tok")["EXPORT_AUTH_DATA"]["access_token"] = "changed too"

        assert store.get("tok")["EXPORT_AUTH_DATA"] == {"access_token": "xyz"}

    def test_keys(self):
        store = InMemoryKeyValueStore()
        store.put("a", {"UUID": "1", "TOKEN": "a"})
        store.put("b", {"UUID": "2", "TOKEN": "b"})
        assert sorted(store.keys()) == ["a", "b"]


class TestJsonFileKeyValueStore:
    """Test the whole-file JSON store."""

    def test_missing_file_reads_empty(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "jobs.json")
        assert store.get("tok") is None
        assert store.keys() == []

    def test_empty_file_reads_empty(self, tmp_path):
        path = tmp_path / "jobs.json"
        path.write_text("")
        assert JsonFileKeyValueStore(path).get("tok") is None

    def test_put_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "jobs.json"
        JsonFileKeyValueStore(path).put("tok", {"UUID": "i", "TOKEN": "tok"})
        assert json.loads(path.read_text()) == {"jobs": {"tok": {"UUID": "i", "TOKEN": "tok"}}}

    def test_entries_survive_reopen(self, tmp_path):
        path = tmp_path / "jobs.json"
        JsonFileKeyValueStore(path).put("tok", {"UUID": "i", "TOKEN": "tok", "EXPORT_AUTH_DATA": {"a": [1, 2]}})
        data = JsonFileKeyValueStore(path).get("tok")
        assert data["EXPORT_AUTH_DATA"] == {"a": [1, 2]}

    def test_unserializable_payload_leaves_file_intact(self, tmp_path):
        path = tmp_path / "jobs.json"
        store = JsonFileKeyValueStore(path)
        store.put("tok", {"UUID": "i", "TOKEN": "tok"})
        before = path.read_text()

        with pytest.raises(TypeError):
            store.put("tok", {"UUID": "i", "TOKEN": "tok", "EXPORT_AUTH_DATA": object()})

        assert path.read_text() == before

    def test_read_error_propagates(self, tmp_path):
        path = tmp_path / "jobs.json"
        path.mkdir()
        with pytest.raises(OSError):
            JsonFileKeyValueStore(path).get("tok")
