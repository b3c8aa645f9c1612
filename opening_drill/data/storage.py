"""Key-value storage ports used to persist studies."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger("opening_drill")


class KeyValueStore(ABC):
    """Abstract string key-value store, in the spirit of browser localStorage."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Returns the stored string for key, or None when absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Stores value under key. Raises OSError when the write fails."""
        pass


class MemoryStore(KeyValueStore):
    """In-process store, used by tests and throwaway sessions."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = path

    def get_item(self, key: str) -> Optional[str]:
        data = self._read()
        value = data.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read(strict=True)
        data[key] = value
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".studies-", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _read(self, strict: bool = False) -> Dict:
        """
        Loads the whole JSON object from disk.

        Args:
            strict (bool): Raise OSError instead of falling back to an empty
                object when the file exists but cannot be used, so a write
                never replaces data it could not read.
        """
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            if strict:
                raise OSError(f"Refusing to overwrite unreadable store {self.path}: {e}") from e
            logger.warning(f"Could not read store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            if strict:
                raise OSError(f"Refusing to overwrite store {self.path}: not a JSON object")
            logger.warning(f"Store {self.path} does not hold a JSON object, ignoring it.")
            return {}
        return data
