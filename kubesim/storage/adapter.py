"""Persistence adapters.

StorageAdapter is the ABC the rest of kubesim talks to.  Values are plain
JSON-serializable dicts; every failure surfaces as StorageError.

JsonFileStorage  -- one ``<key>.json`` file per key under a directory,
                    replaced atomically on save.
MemoryStorage    -- JSON strings held in a dict; used by tests and
                    ``--storage memory``.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

from kubesim.errors import StorageError

_log = structlog.get_logger(component="storage.adapter")

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _check_key(key: str) -> str:
    if not _KEY_RE.match(key):
        raise StorageError(f"invalid storage key: {key!r}")
    return key


class StorageAdapter(ABC):
    """Key/value persistence for serialized cluster state."""

    @abstractmethod
    def save(self, key: str, data: dict[str, Any]) -> None:
        """Persist *data* under *key*, replacing any previous value."""

    @abstractmethod
    def load(self, key: str) -> dict[str, Any]:
        """Return the value stored under *key*.  Raises StorageError if absent."""

    @abstractmethod
    def exists(self, key: str) -> bool: ...

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove *key*.  Removing a missing key is not an error."""

    @abstractmethod
    def clear_all(self) -> None: ...


def _encode(data: dict[str, Any]) -> str:
    try:
        return json.dumps(data, indent=2, sort_keys=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"cannot serialize state: {exc}") from exc


def _decode(key: str, text: str) -> dict[str, Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StorageError(f"corrupt data for key {key}: {exc}") from exc
    if not isinstance(value, dict):
        raise StorageError(f"corrupt data for key {key}: expected an object")
    return value


class MemoryStorage(StorageAdapter):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._items[_check_key(key)] = _encode(data)

    def load(self, key: str) -> dict[str, Any]:
        if key not in self._items:
            raise StorageError(f"No data found for key: {key}")
        return _decode(key, self._items[key])

    def exists(self, key: str) -> bool:
        return key in self._items

    def clear(self, key: str) -> None:
        self._items.pop(key, None)

    def clear_all(self) -> None:
        self._items.clear()


class JsonFileStorage(StorageAdapter):
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self._dir / f"{_check_key(key)}.json"

    def save(self, key: str, data: dict[str, Any]) -> None:
        path = self._path(key)
        text = _encode(data)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(text)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"cannot save {key}: {exc}") from exc
        _log.debug("state_saved", key=key, path=str(path), bytes=len(text))

    def load(self, key: str) -> dict[str, Any]:
        path = self._path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise StorageError(f"No data found for key: {key}") from None
        except OSError as exc:
            raise StorageError(f"cannot load {key}: {exc}") from exc
        return _decode(key, text)

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def clear(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot clear {key}: {exc}") from exc

    def clear_all(self) -> None:
        if not self._dir.is_dir():
            return
        try:
            for path in self._dir.glob("*.json"):
                path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot clear storage: {exc}") from exc
