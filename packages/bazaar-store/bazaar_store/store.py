"""KeyValueStore - versioned, JSON-serialized entries with change callbacks."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from bazaar_store.backends import Backend

logger = logging.getLogger(__name__)

Serializer = Callable[[Any], str]
Deserializer = Callable[[str], Any]
ChangeCallback = Callable[[str, Any], None]

_MISSING = object()


def default_serializer(data: Any) -> str:
    return json.dumps(data)


def default_deserializer(raw: str) -> Any:
    return json.loads(raw)


@dataclass(frozen=True)
class StoreConfig:
    """Key namespace and codec for a store.

    Attributes:
        primary_key: Namespace shared by every entry of one application.
        version: Format tag; entries written under another version are invisible.
        serializer: Encodes a value to text (JSON by default).
        deserializer: Decodes text back to a value (JSON by default).
    """

    primary_key: str = "bazaar"
    version: str = "1.0.0"
    serializer: Serializer | None = None
    deserializer: Deserializer | None = None

    def __post_init__(self) -> None:
        if (self.serializer is None) != (self.deserializer is None):
            raise ValueError("Must provide both a serializer and deserializer or neither.")

    def key(self, entry: str) -> str:
        return f"{self.primary_key}:{entry}:{self.version}"


class KeyValueStore:
    """Typed view over a raw string backend.

    Reads never raise: a missing or undecodable entry yields the caller's
    default. Subscribers hear about changes written by someone else, either
    pushed through ``notify_external`` or found by ``reload``.
    """

    def __init__(self, backend: Backend, config: StoreConfig | None = None) -> None:
        self._backend = backend
        self._config = config or StoreConfig()
        self._serialize = self._config.serializer or default_serializer
        self._deserialize = self._config.deserializer or default_deserializer
        self._subscribers: dict[str, list[ChangeCallback]] = {}
        self._defaults: dict[str, Any] = {}

    @property
    def config(self) -> StoreConfig:
        return self._config

    def key(self, entry: str) -> str:
        return self._config.key(entry)

    def get(self, entry: str, default: Any = None) -> Any:
        raw = self._backend.read(self.key(entry))
        if raw is None:
            return default
        return self._decode(entry, raw, default)

    def _decode(self, entry: str, raw: str, default: Any) -> Any:
        try:
            return self._deserialize(raw)
        except (ValueError, TypeError) as exc:
            logger.warning("stored value for %r is unreadable (%s); using default", entry, exc)
            return default

    def set(self, entry: str, value: Any) -> None:
        self._backend.write(self.key(entry), self._serialize(value))

    def delete(self, entry: str) -> None:
        self._backend.delete(self.key(entry))

    def has(self, entry: str) -> bool:
        return self._backend.read(self.key(entry)) is not None

    # -- External changes --

    def subscribe(self, entry: str, callback: ChangeCallback, default: Any = None) -> None:
        """Call ``callback(entry, value)`` when another writer changes *entry*.

        A deleted entry is reported with *default*.
        """
        self._subscribers.setdefault(entry, []).append(callback)
        self._defaults[entry] = default

    def unsubscribe(self, entry: str, callback: ChangeCallback) -> None:
        callbacks = self._subscribers.get(entry)
        if callbacks is None:
            return
        try:
            callbacks.remove(callback)
        except ValueError:
            pass

    def notify_external(self, raw_key: str, raw_value: str | None, current: Any = _MISSING) -> None:
        """Deliver a change another writer made to the backing storage.

        *raw_value* None means the key was deleted. When *current* is given
        and serializes to *raw_value*, the change is an echo and is ignored.
        """
        for entry, callbacks in self._subscribers.items():
            if self.key(entry) != raw_key or not callbacks:
                continue
            default = self._defaults.get(entry)
            if raw_value is None:
                logger.warning("value for %r was deleted; using default", entry)
                value = default
            else:
                if current is not _MISSING and self._serialize(current) == raw_value:
                    continue
                value = self._decode(entry, raw_value, default)
            for callback in list(callbacks):
                callback(entry, value)

    def reload(self) -> list[str]:
        """Re-read the backend and notify subscribers of changed keys."""
        changes = self._backend.reload()
        for raw_key, raw_value in changes.items():
            self.notify_external(raw_key, raw_value)
        return list(changes)
