"""
Key-Value Slot Stores

A tiny string-to-string store with the same shape as a browser's
localStorage: get_item / set_item / remove_item. The local expense backend
keeps its whole collection as one text blob under a single key.

Two implementations:
- JsonFileKeyValueStore: one JSON object on disk, replaced atomically
- InMemoryKeyValueStore: a dict, for tests and throwaway sessions
"""

import contextlib
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import structlog

from expense_tracker.services.storage.interface import StorageError


logger = structlog.get_logger(__name__)


class KeyValueStore(ABC):
    """Synchronous string slots addressed by key."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text, or None if the key is absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store text under a key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Forget a key. Missing keys are ignored."""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed slots. Contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Slots persisted as a single JSON object in a file.

    Each write serializes every slot to a temporary file in the same
    directory and moves it over the original with os.replace, so a failed
    write leaves the previous file untouched.

    An unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("kv_store_unreadable", path=str(self._path), error=str(e))
            return {}
        except UnicodeDecodeError as e:
            logger.warning("kv_store_corrupt", path=str(self._path), error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("kv_store_corrupt", path=str(self._path), error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning("kv_store_corrupt", path=str(self._path), error="not an object")
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
        except OSError as e:
            raise StorageError(f"Cannot write local store {self._path}: {e}")

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write local store {self._path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)
