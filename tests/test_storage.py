"""
Tests for the storage backends.

JsonFileStorage writes into pytest's tmp_path; the retry wait is
switched off so failure tests do not sleep.
"""

import pytest
from tenacity import wait_none

from finance_compass.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
    StorageWriteError,
)
from finance_compass.services.storage import json_file


class TestJsonFileStorage:
    """Tests for the local JSON file backend."""

    def test_set_then_get(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "data")
        storage.set("finance-compass-v3", '{"budget": {}}')
        assert storage.get("finance-compass-v3") == '{"budget": {}}'
        assert (tmp_path / "data" / "finance-compass-v3.json").exists()

    def test_missing_key(self, tmp_path):
        assert JsonFileStorage(tmp_path).get("nothing") is None

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.set("key", "one")
        storage.set("key", "two")
        assert storage.get("key") == "two"
        assert [path.name for path in tmp_path.iterdir()] == ["key.json"]

    def test_unsafe_key_characters(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        assert storage.path_for("../a b").name == ".._a_b.json"
        assert storage.path_for("../a b").parent == tmp_path

    def test_delete(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.set("key", "value")
        storage.delete("key")
        storage.delete("key")
        assert storage.get("key") is None

    def test_unreadable_file_raises(self, tmp_path):
        (tmp_path / "key.json").mkdir()
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).get("key")

    def test_write_failure_is_retried_then_raised(self, tmp_path, monkeypatch):
        """A failed replace is retried, then surfaces as StorageWriteError."""
        monkeypatch.setattr(JsonFileStorage._write_file.retry, "wait", wait_none())
        storage = JsonFileStorage(tmp_path)
        storage.set("key", "original")

        attempts = []

        def failing_replace(src, dst):
            attempts.append(src)
            raise OSError("locked")

        monkeypatch.setattr(json_file.os, "replace", failing_replace)
        with pytest.raises(StorageWriteError):
            storage.set("key", "new")

        assert len(attempts) == 3
        assert storage.get("key") == "original"
        assert [path.name for path in tmp_path.iterdir()] == ["key.json"]


class TestInMemoryStorage:

    def test_basic_operations(self):
        storage = InMemoryStorage({"a": "1"})
        storage.set("b", "2")
        storage.delete("a")
        storage.delete("missing")
        assert storage.get("a") is None
        assert storage.get("b") == "2"
        assert storage.keys() == ["b"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
