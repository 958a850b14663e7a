"""In-memory key/value backend."""

from __future__ import annotations

import json
import logging
from typing import Any

from termengine.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps values in a dict for the lifetime of the process.

    Values are stored as JSON snapshots so callers cannot mutate stored
    data through a reference they still hold.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = self._dump(key, value)

    @property
    def keys(self) -> list[str]:
        return list(self._data)

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = self._dump(key, value)
        logger.debug("Stored key %s", key)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    @staticmethod
    def _dump(key: str, value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(
                f"Value for key {key!r} is not JSON-serializable: {e}", backend="memory"
            ) from e
