"""Tests for the key-value stores."""

import json
from pathlib import Path

from chainterm.storage import JsonFileStore, MemoryStore


class TestMemoryStore:
    """Verify the in-process store."""

    def test_set_get_delete(self) -> None:
        """Values can be stored, read and removed."""
        store = MemoryStore()
        store.set("k", "v")
        assert store.get("k") == "v"
        store.delete("k")
        assert store.get("k") is None

    def test_delete_missing(self) -> None:
        """Deleting an absent key is a no-op."""
        MemoryStore().delete("nope")

    def test_initial_is_copied(self) -> None:
        """The initial mapping is copied, not shared."""
        initial = {"a": "1"}
        store = MemoryStore(initial)
        store.set("b", "2")
        assert initial == {"a": "1"}
        assert store.keys() == ["a", "b"]


class TestJsonFileStore:
    """Verify the file-backed store."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        """A store over a missing file starts empty and writes nothing."""
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        assert store.get("k") is None
        assert not path.exists()

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        """Values written by one store are read by the next."""
        path = tmp_path / "nested" / "state.json"
        JsonFileStore(path).set("k", "v")
        assert JsonFileStore(path).get("k") == "v"
        assert json.loads(path.read_text()) == {"k": "v"}

    def test_delete_flushes(self, tmp_path: Path) -> None:
        """Deleting a key rewrites the file."""
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")
        assert JsonFileStore(path).get("a") is None
        assert store.path == path

    def test_corrupt_file_is_empty(self, tmp_path: Path) -> None:
        """An unparseable file starts an empty store and is replaced on write."""
        path = tmp_path / "state.json"
        path.write_text("{not json")
        store = JsonFileStore(path)
        assert store.get("k") is None
        store.set("k", "v")
        assert json.loads(path.read_text()) == {"k": "v"}

    def test_non_string_values_dropped(self, tmp_path: Path) -> None:
        """Only string values are loaded."""
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"good": "x", "bad": 3}))
        store = JsonFileStore(path)
        assert store.get("good") == "x"
        assert store.get("bad") is None
