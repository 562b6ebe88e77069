"""JSON file persistence for process-wide key/value state.

This module backs the retained-entry slot. Values are stored as plain JSON
under string keys, with file locking around every read-modify-write.
"""

import json
import logging
from pathlib import Path
from typing import Any

from filelock import FileLock
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Storage format version for future migrations
STORAGE_VERSION = 1


class StorageData(BaseModel):
    """Root structure of the storage file.

    Attributes:
        version: Storage format version.
        items: Stored key/value pairs.
    """

    version: int = Field(default=STORAGE_VERSION, description="Storage format version")
    items: dict[str, Any] = Field(default_factory=dict, description="Stored values")


class LocalStorage:
    """JSON file-based key/value storage.

    Example:
        storage = LocalStorage("/path/to/storage.json")
        storage.set("chosenFile", {"token": "..."})
        value = storage.get("chosenFile")
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the storage.

        Args:
            path: Path to the JSON storage file. Created on first write.
        """
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(str(self._path.with_suffix(".lock")))

    @property
    def path(self) -> Path:
        """Get the storage file path."""
        return self._path

    def _read_data(self) -> StorageData:
        """Read and parse the storage file.

        Returns:
            Parsed storage data, empty if the file does not exist yet.

        Raises:
            ValueError: If the file is not valid JSON or not shaped like
                ``StorageData`` (includes JSONDecodeError and ValidationError).
        """
        if not self._path.exists():
            return StorageData()

        content = self._path.read_text(encoding="utf-8")
        if not content.strip():
            return StorageData()

        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Storage root must be an object, got {type(data).__name__}")

        version = data.get("version", 1)
        if version != STORAGE_VERSION:
            data = self._migrate_data(data, version)

        return StorageData.model_validate(data)

    def _write_data(self, data: StorageData) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data.model_dump(mode="json"), indent=2)
        self._path.write_text(content, encoding="utf-8")

    def _migrate_data(self, data: dict[str, Any], from_version: int) -> dict[str, Any]:
        # Currently no migrations needed
        logger.info(f"Migrating storage from version {from_version} to {STORAGE_VERSION}")
        data["version"] = STORAGE_VERSION
        return data

    def get(self, key: str) -> Any | None:
        """Get the value stored under ``key``, or None."""
        with self._lock:
            return self._read_data().items.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        An unreadable storage file is replaced rather than raising.
        """
        with self._lock:
            try:
                data = self._read_data()
            except ValueError as e:
                logger.warning(f"Replacing unreadable storage file {self._path}: {e}")
                data = StorageData()
            data.items[key] = value
            self._write_data(data)
            logger.debug(f"Stored {key!r} in {self._path}")

    def remove(self, key: str) -> bool:
        """Remove ``key``.

        Returns:
            True if the key was present.
        """
        with self._lock:
            data = self._read_data()
            if key not in data.items:
                return False
            del data.items[key]
            self._write_data(data)
            logger.debug(f"Removed {key!r} from {self._path}")
            return True
