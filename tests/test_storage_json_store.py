import json

import pytest

from advisorbridge.storage import DEFAULT_DATA_FILE, JsonFileStore
from advisorbridge.utils.exceptions import StorageError


def test_save_creates_directory_and_pretty_prints(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "data")
    store.save(DEFAULT_DATA_FILE, {"name": "Zoë", "items": [1]})
    path = tmp_path / "nested" / "data" / "data.json"
    text = path.read_text(encoding="utf-8")
    assert "Zoë" in text
    assert text.startswith("{\n  ")
    assert json.loads(text) == {"name": "Zoë", "items": [1]}
    assert not (path.parent / "data.json.tmp").exists()


def test_save_overwrites_whole_document(tmp_path):
    store = JsonFileStore(tmp_path)
    store.save("data.json", {"a": 1})
    store.save("data.json", [1, 2, 3])
    assert store.load("data.json") == [1, 2, 3]


def test_load_missing_returns_none(tmp_path):
    store = JsonFileStore(tmp_path)
    assert store.load("data.json") is None
    assert not store.exists("data.json")


@pytest.mark.parametrize("filename", ["../escape.json", "sub/data.json", ""])
def test_filenames_with_paths_are_rejected(tmp_path, filename):
    with pytest.raises(StorageError):
        JsonFileStore(tmp_path).path_for(filename)


def test_delete(tmp_path):
    store = JsonFileStore(tmp_path)
    store.save("data.json", {})
    assert store.exists("data.json")
    store.delete("data.json")
    assert not store.exists("data.json")
    store.delete("data.json")


def test_storage_error_details(tmp_path):
    (tmp_path / "data.json").write_text("nope", encoding="utf-8")
    with pytest.raises(StorageError) as exc_info:
        JsonFileStore(tmp_path).load("data.json")
    assert exc_info.value.code == "STORAGE_ERROR"
    assert exc_info.value.details == {"filename": "data.json"}
