"""
Unit tests for session storage.

Run: pytest tests/unit/test_session_storage.py -v
"""

import json

from utils.session_storage import FileSessionStorage, MemorySessionStorage


class TestMemorySessionStorage:

    def test_set_get_remove(self):
        storage = MemorySessionStorage()

        storage.set("admin_data", {"id": "a1"})
        assert storage.get("admin_data") == {"id": "a1"}

        storage.remove("admin_data")
        assert storage.get("admin_data") is None

    def test_remove_missing_key_is_noop(self):
        storage = MemorySessionStorage({"a": 1})
        storage.remove("b")
        assert storage.get("a") == 1


class TestFileSessionStorage:
    """Tests for the JSON file variant."""

    def test_survives_restart(self, tmp_path):
        """Should read back what a previous instance wrote."""
        # Arrange
        path = tmp_path / "session.json"
        FileSessionStorage(str(path)).set("admin_data", {"id": "a1"})

        # Act
        restored = FileSessionStorage(str(path))

        # Assert
        assert restored.get("admin_data") == {"id": "a1"}
        assert json.loads(path.read_text()) == {"admin_data": {"id": "a1"}}

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "session.json"

        FileSessionStorage(str(path)).set("k", "v")

        assert path.exists()

    def test_corrupt_file_starts_empty(self, tmp_path):
        """Should not fail startup on an unreadable file."""
        path = tmp_path / "session.json"
        path.write_text("{not json")

        storage = FileSessionStorage(str(path))

        assert storage.get("admin_data") is None

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("[1, 2, 3]")

        assert FileSessionStorage(str(path)).get("admin_data") is None

    def test_clear_empties_file(self, tmp_path):
        path = tmp_path / "session.json"
        storage = FileSessionStorage(str(path))
        storage.set("a", 1)

        storage.clear()

        assert json.loads(path.read_text()) == {}
