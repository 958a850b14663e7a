"""JSON file key/value backend.

All keys live in a single JSON document. Writes go to a temporary file
that replaces the original, so a crash never leaves a half-written file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from termengine.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Persists values to a JSON document on disk."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._data: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            data = await self._load()
            return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await self._load()
            try:
                # Snapshot through JSON so later caller mutation is not persisted
                data[key] = json.loads(json.dumps(value))
            except (TypeError, ValueError) as e:
                raise StorageError(
                    f"Value for key {key!r} is not JSON-serializable: {e}", backend="file"
                ) from e
            await self._flush(data)

    async def remove(self, key: str) -> None:
        async with self._lock:
            data = await self._load()
            if data.pop(key, None) is not None:
                await self._flush(data)

    async def clear(self) -> None:
        async with self._lock:
            self._data = {}
            await self._flush(self._data)

    async def _load(self) -> dict[str, Any]:
        if self._data is None:
            self._data = await asyncio.to_thread(self._read_file)
        return self._data

    async def _flush(self, data: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write_file, json.dumps(data, indent=2))

    def _read_file(self) -> dict[str, Any]:
        if not self._path.exists():
            logger.info("Storage file %s not found, starting empty", self._path)
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}", backend="file") from e
        if not isinstance(content, dict):
            raise StorageError(f"{self._path} does not contain a JSON object", backend="file")
        return content

    def _write_file(self, payload: str) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}", backend="file") from e
