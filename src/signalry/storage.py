"""Key-value string stores that PersistentStore can write through to."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
from urllib.parse import quote


class Storage(Protocol):
    """String-keyed, string-valued store. `get` returns None when absent."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """In-process store. Handy in tests and for state that need not survive a restart."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data) if data else {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"MemoryStorage({self._data!r})"


class FileStorage:
    """One UTF-8 file per key under a directory.

    Storage path: ``<directory>/<quoted key>``. Keys are percent-quoted,
    dots included, so any string is a valid key.
    """

    def __init__(self, directory: str | Path) -> None:
        self._base = Path(directory)
        self._base.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._base / quote(key, safe="").replace(".", "%2E")

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def __repr__(self) -> str:
        return f"FileStorage({str(self._base)!r})"
