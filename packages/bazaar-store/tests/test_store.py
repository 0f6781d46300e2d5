"""Tests for KeyValueStore and its backends."""
from __future__ import annotations

import json

import pytest
from bazaar_store import JsonFileBackend, KeyValueStore, MemoryBackend, StoreConfig


class TestKeys:
    def test_key_includes_namespace_and_version(self) -> None:
        config = StoreConfig(primary_key="app", version="2")
        assert config.key("values") == "app:values:2"

    def test_codec_must_be_paired(self) -> None:
        with pytest.raises(ValueError):
            StoreConfig(serializer=str)


class TestReadWrite:
    def test_round_trip(self) -> None:
        store = KeyValueStore(MemoryBackend())
        store.set("values", {"iron": 5})
        assert store.get("values") == {"iron": 5}
        assert store.has("values")

    def test_missing_returns_default(self) -> None:
        store = KeyValueStore(MemoryBackend())
        assert store.get("nope", default=3) == 3

    def test_malformed_returns_default(self) -> None:
        backend = MemoryBackend({"bazaar:values:1.0.0": "{not json"})
        store = KeyValueStore(backend)
        assert store.get("values", default={}) == {}

    def test_other_version_is_invisible(self) -> None:
        backend = MemoryBackend()
        KeyValueStore(backend, StoreConfig(version="0.9")).set("count", 4)
        assert KeyValueStore(backend).get("count", default=3) == 3

    def test_custom_codec(self) -> None:
        config = StoreConfig(serializer=lambda v: f"<{v}>", deserializer=lambda s: s.strip("<>"))
        store = KeyValueStore(MemoryBackend(), config)
        store.set("name", "iron")
        assert store.get("name") == "iron"

    def test_delete(self) -> None:
        store = KeyValueStore(MemoryBackend())
        store.set("x", 1)
        store.delete("x")
        assert store.get("x", default=0) == 0


class TestExternalChanges:
    def test_subscriber_receives_decoded_value(self) -> None:
        store = KeyValueStore(MemoryBackend())
        seen = []
        store.subscribe("count", lambda entry, value: seen.append((entry, value)))
        store.notify_external(store.key("count"), "7")
        assert seen == [("count", 7)]

    def test_deleted_key_reports_default(self) -> None:
        store = KeyValueStore(MemoryBackend())
        seen = []
        store.subscribe("count", lambda entry, value: seen.append(value), default=3)
        store.notify_external(store.key("count"), None)
        assert seen == [3]

    def test_echo_of_current_value_is_ignored(self) -> None:
        store = KeyValueStore(MemoryBackend())
        seen = []
        store.subscribe("count", lambda entry, value: seen.append(value))
        store.notify_external(store.key("count"), "5", current=5)
        assert seen == []

    def test_other_keys_are_ignored(self) -> None:
        store = KeyValueStore(MemoryBackend())
        seen = []
        store.subscribe("count", lambda entry, value: seen.append(value))
        store.notify_external("elsewhere:count:1.0.0", "5")
        assert seen == []

    def test_unsubscribe(self) -> None:
        store = KeyValueStore(MemoryBackend())
        seen = []

        def cb(entry, value):
            seen.append(value)

        store.subscribe("count", cb)
        store.unsubscribe("count", cb)
        store.unsubscribe("missing", cb)
        store.notify_external(store.key("count"), "1")
        assert seen == []


class TestJsonFileBackend:
    def test_persists_across_instances(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        KeyValueStore(JsonFileBackend(path)).set("values", {"oil": 6})
        assert KeyValueStore(JsonFileBackend(path)).get("values") == {"oil": 6}

    def test_corrupt_file_starts_empty(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        path.write_text("[[[", encoding="utf-8")
        store = KeyValueStore(JsonFileBackend(path))
        assert store.get("values", default="fallback") == "fallback"

    def test_reload_notifies_changed_keys(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        store = KeyValueStore(JsonFileBackend(path))
        store.set("count", 1)
        seen = []
        store.subscribe("count", lambda entry, value: seen.append(value))

        # Another process rewrites the file.
        data = json.loads(path.read_text(encoding="utf-8"))
        data[store.key("count")] = "9"
        path.write_text(json.dumps(data), encoding="utf-8")

        assert store.reload() == [store.key("count")]
        assert seen == [9]
        assert store.get("count") == 9
