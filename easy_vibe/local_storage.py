"""
File-backed key-value storage.

A single JSON object maps storage keys to string values. The file is
machine-specific and written atomically (temp file, then rename).
"""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_STORAGE_FILE = os.path.join("~", ".config", "easy-vibe", "local_storage.json")


class LocalStorageError(Exception):
    """Raised when the storage file cannot be read or written."""
    pass


def get_storage_path() -> Path:
    """Get storage file path from env or default.

    Returns:
        Path to the storage file
    """
    storage_file = os.environ.get("EASY_VIBE_STORAGE_FILE", DEFAULT_STORAGE_FILE)
    return Path(os.path.expanduser(storage_file))


class LocalStorage:
    """String key-value store persisted as one JSON document."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else get_storage_path()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise LocalStorageError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise LocalStorageError(f"Malformed storage file {self.path}: expected an object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
            temp_path.replace(self.path)
        except OSError as e:
            raise LocalStorageError(f"Failed to write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        """Return the stored value for key, or None."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, preserving other keys."""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        """Delete key if present."""
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def all_items(self) -> dict[str, str]:
        """Return a copy of every stored key and value."""
        return {k: v for k, v in self._read().items() if isinstance(v, str)}
