"""
Tests for file-backed key-value storage (easy_vibe/local_storage.py).
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from easy_vibe.local_storage import (
    DEFAULT_STORAGE_FILE,
    LocalStorage,
    LocalStorageError,
    get_storage_path,
)


class TestGetStoragePath:
    """Tests for storage path resolution."""

    def test_default_path(self):
        """Test default path is under the user config directory."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("EASY_VIBE_STORAGE_FILE", None)
            path = get_storage_path()
        assert path == Path(os.path.expanduser(DEFAULT_STORAGE_FILE))

    def test_env_override(self, tmp_path):
        """Test EASY_VIBE_STORAGE_FILE overrides the default."""
        target = tmp_path / "custom.json"
        with patch.dict(os.environ, {"EASY_VIBE_STORAGE_FILE": str(target)}):
            assert get_storage_path() == target
            assert LocalStorage().path == target


class TestLocalStorage:
    """Tests for LocalStorage operations."""

    def test_missing_file_is_empty(self, tmp_path):
        """Test reading before any write."""
        storage = LocalStorage(tmp_path / "storage.json")
        assert storage.get_item("key") is None
        assert storage.all_items() == {}

    def test_set_and_get(self, tmp_path):
        """Test values persist across instances."""
        path = tmp_path / "nested" / "storage.json"
        LocalStorage(path).set_item("easy-vibe-settings", '{"packageManager": "npm"}')

        assert path.exists()
        assert LocalStorage(path).get_item("easy-vibe-settings") == '{"packageManager": "npm"}'

    def test_set_preserves_other_keys(self, tmp_path):
        """Test writing one key keeps the rest."""
        storage = LocalStorage(tmp_path / "storage.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        assert storage.all_items() == {"a": "1", "b": "2"}

    def test_remove_item(self, tmp_path):
        """Test deleting a key."""
        storage = LocalStorage(tmp_path / "storage.json")
        storage.set_item("a", "1")
        storage.remove_item("a")
        storage.remove_item("missing")
        assert storage.get_item("a") is None

    def test_atomic_write_leaves_no_temp_file(self, tmp_path):
        """Test the temp file is renamed into place."""
        path = tmp_path / "storage.json"
        LocalStorage(path).set_item("a", "1")
        assert not path.with_suffix(".tmp").exists()
        assert json.loads(path.read_text()) == {"a": "1"}

    def test_non_string_values_ignored(self, tmp_path):
        """Test foreign values are not returned."""
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"a": 1, "b": "two"}))
        storage = LocalStorage(path)
        assert storage.get_item("a") is None
        assert storage.all_items() == {"b": "two"}

    def test_corrupt_file_raises(self, tmp_path):
        """Test unreadable JSON raises LocalStorageError."""
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        with pytest.raises(LocalStorageError):
            LocalStorage(path).get_item("a")

    def test_non_object_raises(self, tmp_path):
        """Test a JSON array is rejected."""
        path = tmp_path / "storage.json"
        path.write_text("[]")
        with pytest.raises(LocalStorageError, match="expected an object"):
            LocalStorage(path).all_items()
