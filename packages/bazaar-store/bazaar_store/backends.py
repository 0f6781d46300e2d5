"""Raw string storage backends."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class Backend(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, raw: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def reload(self) -> dict[str, str | None]: ...


class MemoryBackend:
    """Process-local dict of raw strings."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(data or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def reload(self) -> dict[str, str | None]:
        return {}

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileBackend:
    """All keys in one JSON object on disk.

    Every write rewrites the file through a temporary sibling and
    ``os.replace``. ``reload`` re-reads the file and reports keys whose raw
    value differs from what this process last saw (None for removed keys).
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            loaded = json.loads(text)
        except ValueError:
            logger.warning("store file %s is not valid JSON; starting empty", self._path)
            return {}
        if not isinstance(loaded, dict):
            logger.warning("store file %s does not hold an object; starting empty", self._path)
            return {}
        return {str(k): v for k, v in loaded.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, raw: str) -> None:
        self._data[key] = raw
        self._flush()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def reload(self) -> dict[str, str | None]:
        fresh = self._load()
        changes: dict[str, str | None] = {}
        for key in self._data.keys() | fresh.keys():
            if self._data.get(key) != fresh.get(key):
                changes[key] = fresh.get(key)
        self._data = fresh
        return changes
