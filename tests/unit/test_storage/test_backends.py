"""Tests for the key/value persistence backends."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from termengine.storage.base import StorageError, state_key
from termengine.storage.file import JsonFileKeyValueStore
from termengine.storage.memory import InMemoryKeyValueStore


class TestInMemoryKeyValueStore:
    """Test the in-memory backend."""

    @pytest.mark.asyncio
    async def test_set_get_remove(self) -> None:
        store = InMemoryKeyValueStore()
        assert await store.get("missing") is None
        await store.set("k", {"a": [1, 2]})
        assert await store.get("k") == {"a": [1, 2]}
        await store.remove("k")
        await store.remove("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_values_are_snapshots(self) -> None:
        store = InMemoryKeyValueStore()
        value = {"items": [1]}
        await store.set("k", value)
        value["items"].append(2)
        assert await store.get("k") == {"items": [1]}

    @pytest.mark.asyncio
    async def test_unserializable_value(self) -> None:
        store = InMemoryKeyValueStore()
        with pytest.raises(StorageError) as exc_info:
            await store.set("k", object())
        assert exc_info.value.backend == "memory"

    @pytest.mark.asyncio
    async def test_initial_values_and_clear(self) -> None:
        store = InMemoryKeyValueStore({"a": 1, "b": 2})
        assert store.keys == ["a", "b"]
        await store.clear()
        assert store.keys == []

    def test_state_key(self) -> None:
        assert state_key("aliases") == "store-state-aliases"


class TestJsonFileKeyValueStore:
    """Test the JSON file backend."""

    @pytest.mark.asyncio
    async def test_roundtrip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "storage.json"
        store = JsonFileKeyValueStore(path)
        await store.set("cli-command-history", ["echo a"])
        assert json.loads(path.read_text()) == {"cli-command-history": ["echo a"]}

        reopened = JsonFileKeyValueStore(path)
        assert await reopened.get("cli-command-history") == ["echo a"]

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = JsonFileKeyValueStore(tmp_path / "absent.json")
        assert await store.get("anything") is None
        assert not (tmp_path / "absent.json").exists()

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        store = JsonFileKeyValueStore(path)
        await store.set("a", 1)
        await store.set("b", 2)
        await store.remove("a")
        assert json.loads(path.read_text()) == {"b": 2}
        await store.clear()
        assert json.loads(path.read_text()) == {}

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_text("{not json")
        store = JsonFileKeyValueStore(path)
        with pytest.raises(StorageError) as exc_info:
            await store.get("a")
        assert exc_info.value.backend == "file"

    @pytest.mark.asyncio
    async def test_non_object_document(self, tmp_path: Path) -> None:
        path = tmp_path / "storage.json"
        path.write_text("[1, 2]")
        with pytest.raises(StorageError):
            await JsonFileKeyValueStore(path).get("a")
