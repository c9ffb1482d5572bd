import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import json
from unittest.mock import patch

import pytest
from storage.file_store import FileKeyValueStore
from utils.error_handling import StorageError


def test_set_then_get(store):
    value = {"k": "v", "nested": [1, 2, {"deep": True}], "none": None}
    store.set("hi", value)
    assert store.get("hi") == value


def test_get_missing_key_is_absent(store):
    assert store.get("never-written") is None


def test_get_after_delete_is_absent(store):
    store.set("gone", {"a": 1})
    assert store.delete("gone") is True
    assert store.get("gone") is None


def test_delete_missing_key_returns_false(store):
    assert store.delete("missing") is False


def test_set_overwrites_whole_value(store):
    store.set("user:1", {"a": 1, "b": 2})
    store.set("user:1", {"c": 3})
    assert store.get("user:1") == {"c": 3}


def test_set_creates_root_directory(storage_dir, store):
    assert not storage_dir.exists()
    store.set("keys", {})
    assert (storage_dir / "keys").is_file()


def test_one_file_per_key_in_json(storage_dir, store):
    store.set("user:abc", {"uuid": "abc"})
    with open(storage_dir / "user:abc", encoding="utf-8") as f:
        assert json.load(f) == {"uuid": "abc"}


def test_nested_keys_create_directories(storage_dir, store):
    store.set("tenant/one/keys", ["x"])
    assert (storage_dir / "tenant" / "one" / "keys").is_file()
    assert store.get("tenant/one/keys") == ["x"]


def test_scalar_values(store):
    store.set("count", 3)
    store.set("name", "alice")
    assert store.get("count") == 3
    assert store.get("name") == "alice"


@pytest.mark.parametrize("key", ["", "/etc/passwd", "../escape", "a/../../b", "a//b", "./x", "nul\x00byte"])
def test_invalid_keys_are_rejected(store, key):
    with pytest.raises(StorageError):
        store.set(key, {"x": 1})
    assert store.get(key) is None
    assert store.delete(key) is False


def test_corrupt_file_reads_as_absent(storage_dir, store):
    storage_dir.mkdir(parents=True)
    (storage_dir / "bad").write_text("{not json", encoding="utf-8")
    assert store.get("bad") is None


def test_unserializable_value_raises(store):
    with pytest.raises(StorageError):
        store.set("obj", {"when": object()})
    assert store.get("obj") is None


def test_failed_write_keeps_previous_value_and_leaves_no_temp_files(storage_dir, store):
    store.set("keys", {"a": "1"})
    with patch("storage.file_store.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(StorageError):
            store.set("keys", {"b": "2"})
    assert store.get("keys") == {"a": "1"}
    assert sorted(os.listdir(storage_dir)) == ["keys"]


def test_unwritable_root_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = FileKeyValueStore(str(blocker / "storage"))
    with pytest.raises(StorageError):
        store.set("keys", {})
