"""Key-value storage — where a session's aliases and history are kept.

The interpreter never decides *where* its data lives.  It serializes
the alias table and history log to JSON strings and hands them to a
``KeyValueStore``, the same way a browser terminal would write them to
``localStorage``.

Two stores are provided:

    - ``MemoryStore`` — a plain dict; nothing survives the process.
    - ``JsonFileStore`` — every key in one JSON document on disk,
      rewritten on each change (like ``sync`` flushing to storage).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path


class KeyValueStore(Protocol):
    """The storage interface a session persists through."""

    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        ...


class MemoryStore:
    """An in-process store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create a store, optionally pre-populated (copied, not referenced)."""
        self._data: dict[str, str] = dict(initial) if initial else {}

    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None."""
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*."""
        self._data[key] = value

    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Return the stored keys, sorted."""
        return sorted(self._data)


class JsonFileStore:
    """A store that keeps every key in a single JSON file.

    The file is read once on construction and rewritten after every
    ``set`` or ``delete``.  A missing file starts an empty store; an
    unreadable or corrupt file also starts empty and is replaced on the
    next write.
    """

    def __init__(self, path: Path) -> None:
        """Open (or prepare to create) the store at *path*."""
        self._path = path
        self._data: dict[str, str] = self._read()

    @property
    def path(self) -> Path:
        """Return the backing file path."""
        return self._path

    def get(self, key: str) -> str | None:
        """Return the value stored under *key*, or None."""
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key* and flush to disk."""
        self._data[key] = value
        self._write()

    def delete(self, key: str) -> None:
        """Remove *key* if present and flush to disk."""
        if self._data.pop(key, None) is not None:
            self._write()

    def _read(self) -> dict[str, str]:
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2))
