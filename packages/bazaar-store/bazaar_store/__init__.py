"""bazaar-store — Versioned key-value persistence for simulation state."""
from bazaar_store.backends import Backend, JsonFileBackend, MemoryBackend
from bazaar_store.store import (
    KeyValueStore,
    StoreConfig,
    default_deserializer,
    default_serializer,
)

__all__ = [
    "Backend",
    "JsonFileBackend",
    "KeyValueStore",
    "MemoryBackend",
    "StoreConfig",
    "default_deserializer",
    "default_serializer",
]
