"""
Local Key-Value Storage Implementations

DESIGN DECISION: The file backend keeps one UTF-8 file per key in a
data directory, e.g. .smart_spend/gemini-expenses.json. This is the
desktop equivalent of the browser's local storage:
1. The user can open and back up the file directly
2. No database setup required
3. The whole collection is small, so rewriting it on every change is fine

TRADEOFFS:
- No transactions (last write wins, which is all a single session needs)
- Writes go through a temp file and an atomic rename so a crash
  mid-write never leaves a half-written collection behind
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from smart_spend.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadError,
    StorageError,
)


class LocalFileStorage(KeyValueStorageInterface):
    """
    File-backed key-value storage.

    Each key maps to <data_dir>/<key>.json.
    """

    def __init__(self, data_dir: Path | str):
        self._data_dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key:
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Read a key's file, or None if it does not exist."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise PersistenceReadError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """Write a key's file atomically."""
        path = self._path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}") from e


class InMemoryStorage(KeyValueStorageInterface):
    """
    Dict-backed key-value storage.

    Nothing survives the process; used in tests and when
    STORAGE_BACKEND=memory.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
